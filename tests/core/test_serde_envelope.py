"""Tests for `tablelog.core.serde` envelope encoding and precedence decoding."""

import json
import logging

import pytest

from tablelog.core.actions import ActionKind, AddFile, Format, Metadata, Protocol, RemoveFile
from tablelog.core.errors import InvalidActionError, MalformedRecordError
from tablelog.core.serde import decode, encode, hash_action, select_envelope_field, to_json

ADD = AddFile(
    path="date=2024-01-01/part-0.parquet",
    partition_values={"date": "2024-01-01"},
    size=1024,
    modification_time=1_700_000_000_000,
    data_change=True,
    stats='{"numRecords":3,"minValues":{"id":1}}',
    tags={"origin": "ingest"},
)
BARE_ADD = AddFile(
    path="part-1.parquet", partition_values={}, size=1, modification_time=0, data_change=False
)
REMOVE = RemoveFile(path="part-0.parquet", deletion_timestamp=1000, data_change=False)
META = Metadata(
    id="6f1c",
    name="events",
    description="raw events",
    format=Format(provider="parquet", options={"compression": "zstd"}),
    schema_string='{"type":"struct","fields":[]}',
    partition_columns=["date", "region"],
    configuration={"retention": "7d"},
    created_time=1_700_000_000_000,
)
PROTO = Protocol(min_reader_version=1, min_writer_version=2)


@pytest.mark.parametrize(
    "action", [ADD, BARE_ADD, REMOVE, RemoveFile(path="x"), META, Metadata(id="m"), PROTO]
)
def test_round_trip(action) -> None:
    assert decode(encode(action)) == action
    assert decode(to_json(action)) == action


def test_encode_uses_single_wire_field() -> None:
    assert list(encode(ADD)) == ["add"]
    assert list(encode(REMOVE)) == ["remove"]
    assert list(encode(META)) == ["metaData"]
    assert list(encode(PROTO)) == ["protocol"]


def test_encode_always_writes_partition_values_and_omits_absent_optionals() -> None:
    payload = encode(BARE_ADD)["add"]
    assert payload["partitionValues"] == {}
    assert "stats" not in payload
    assert "tags" not in payload
    assert payload["modificationTime"] == 0
    assert payload["dataChange"] is False


def test_encode_omits_absent_deletion_timestamp_and_metadata_fields() -> None:
    assert "deletionTimestamp" not in encode(RemoveFile(path="x"))["remove"]
    meta_payload = encode(Metadata(id="m"))["metaData"]
    assert "name" not in meta_payload
    assert "createdTime" not in meta_payload
    assert meta_payload["format"] == {"provider": "parquet", "options": {}}


def test_stats_pass_through_as_opaque_string() -> None:
    line = to_json(ADD)
    assert json.loads(line)["add"]["stats"] == ADD.stats
    assert decode(line).stats == ADD.stats


def test_to_json_is_canonical() -> None:
    assert to_json(PROTO) == '{"protocol":{"minReaderVersion":1,"minWriterVersion":2}}'


def test_precedence_order_for_multiple_fields(caplog) -> None:
    envelope = {**encode(PROTO), **encode(META), **encode(REMOVE), **encode(ADD)}
    with caplog.at_level(logging.WARNING, logger="tablelog.core.serde"):
        assert decode(envelope) == ADD
    assert "4 populated fields" in caplog.text

    del envelope["add"]
    assert decode(envelope) == REMOVE
    del envelope["remove"]
    assert decode(envelope) == META
    del envelope["metaData"]
    assert decode(envelope) == PROTO


def test_null_fields_are_not_populated(caplog) -> None:
    envelope = {"add": None, "remove": None, "metaData": None, **encode(PROTO)}
    with caplog.at_level(logging.WARNING, logger="tablelog.core.serde"):
        assert select_envelope_field(envelope) is ActionKind.PROTOCOL
    assert caplog.records == []


def test_empty_or_unknown_envelope_decodes_to_none() -> None:
    assert decode("{}") is None
    assert decode('{"commitInfo":{"operation":"WRITE"},"txn":{"appId":"a","version":1}}') is None


def test_unknown_payload_fields_are_ignored() -> None:
    line = '{"protocol":{"minReaderVersion":1,"minWriterVersion":2,"writerFeatures":["x"]},"extra":1}'
    assert decode(line) == PROTO


@pytest.mark.parametrize("record", ["not json", "[1, 2]", '"add"', "", b"\xff\xfe"])
def test_malformed_records(record) -> None:
    with pytest.raises(MalformedRecordError):
        decode(record)


@pytest.mark.parametrize(
    "record",
    [
        {"add": {"path": "", "partitionValues": {}, "size": 1, "modificationTime": 0, "dataChange": True}},
        {"add": {"path": "a.parquet"}},
        {"add": 5},
        {"remove": {"path": "a", "deletionTimestamp": "yesterday"}},
        {"protocol": {"minReaderVersion": 0}},
    ],
)
def test_invalid_payloads(record) -> None:
    with pytest.raises(InvalidActionError):
        decode(record)


def test_encode_rejects_non_actions() -> None:
    with pytest.raises(TypeError):
        encode({"add": {}})  # type: ignore[arg-type]


def test_hash_action_is_stable_across_decoding() -> None:
    assert hash_action(ADD) == hash_action(decode(to_json(ADD)))
    assert hash_action(ADD) != hash_action(BARE_ADD)
    assert len(hash_action(REMOVE)) == 64


def test_null_partition_value_is_kept() -> None:
    record = (
        '{"add":{"path":"d=__null/part-0.parquet","partitionValues":{"d":null},'
        '"size":1,"modificationTime":0,"dataChange":true}}'
    )
    add = decode(record)
    assert add.partition_values == {"d": None}

    nulled = BARE_ADD.model_copy(update={"partition_values": {"d": None}})
    assert encode(nulled)["add"]["partitionValues"] == {"d": None}
    assert decode(encode(nulled)) == nulled
    assert decode(to_json(nulled)) == nulled
