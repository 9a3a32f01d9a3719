"""Tests for the protocol gate in `tablelog.core.versioning`."""

import pytest

from tablelog.core.actions import Protocol
from tablelog.core.errors import UnsupportedProtocolError
from tablelog.core.versioning import (
    SupportedVersions,
    can_read,
    can_write,
    check_protocol,
    check_read,
    check_write,
    is_next_version,
)


def test_read_and_write_checks_are_independent() -> None:
    table = Protocol(min_reader_version=3, min_writer_version=2)
    impl = SupportedVersions(reader_version=1, writer_version=2)

    with pytest.raises(UnsupportedProtocolError) as info:
        check_protocol(table, impl, "read")
    assert info.value.bound == "reader"
    assert info.value.required == 3
    assert info.value.supported == 1
    assert info.value.excess == 2

    assert check_protocol(table, impl, "write") is None


def test_writer_bound_violation_names_excess() -> None:
    table = Protocol(min_reader_version=1, min_writer_version=5)
    impl = SupportedVersions(reader_version=1, writer_version=2)

    with pytest.raises(UnsupportedProtocolError, match="writer version 5") as info:
        check_write(table, impl)
    assert info.value.excess == 3
    assert "exceeded by 3" in str(info.value)
    check_read(table, impl)


@pytest.mark.parametrize(
    "reader,writer,readable,writable",
    [
        (1, 2, True, True),
        (2, 2, True, True),
        (1, 1, True, False),
        (3, 7, True, True),
    ],
)
def test_supported_version_configurations(reader, writer, readable, writable) -> None:
    table = Protocol(min_reader_version=1, min_writer_version=2)
    impl = SupportedVersions(reader_version=reader, writer_version=writer)

    assert can_read(table, impl) is readable
    assert can_write(table, impl) is writable


def test_default_supported_versions_match_default_protocol() -> None:
    impl = SupportedVersions()
    check_protocol(Protocol(), impl, "read")
    check_protocol(Protocol(), impl, "write")


@pytest.mark.parametrize("field", ["reader_version", "writer_version"])
def test_supported_versions_reject_non_positive(field: str) -> None:
    with pytest.raises(ValueError, match=f"{field} must be >= 1"):
        SupportedVersions(**{field: 0})


def test_unknown_operation_rejected() -> None:
    with pytest.raises(ValueError):
        check_protocol(Protocol(), SupportedVersions(), "delete")  # type: ignore[arg-type]


def test_is_next_version() -> None:
    assert is_next_version(0, -1)
    assert is_next_version(8, 7)
    assert not is_next_version(7, 7)
    assert not is_next_version(9, 7)
