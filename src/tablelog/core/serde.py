"""
Envelope serialization for log actions.

Every log record is a single JSON object ("envelope") with at most one populated
field among ``add``, ``remove``, ``metaData`` and ``protocol``. Encoding fills
the field matching the action's kind; decoding picks the populated field by a
fixed precedence and validates its payload into the matching model.

Notes:
    - Precedence is ``add > remove > metaData > protocol`` (ENVELOPE_PRECEDENCE).
      Envelopes with several populated fields are resolved by this rule, not
      rejected; a WARNING naming the fields is logged so producers can be fixed.
      This is a compatibility property of the log format.
    - A field counts as populated when present and not null.
    - Unknown envelope keys and unknown payload fields are ignored so records
      written by newer protocol versions still decode.
    - An envelope with no known populated field decodes to None (a no-op for replay).
    - Optional payload fields are omitted when absent; AddFile.partitionValues is
      always written, even when empty.

Examples:
    >>> from tablelog.core.actions import Protocol
    >>> from tablelog.core.serde import decode, to_json
    >>> to_json(Protocol(min_reader_version=1, min_writer_version=2))
    '{"protocol":{"minReaderVersion":1,"minWriterVersion":2}}'
    >>> decode('{"protocol":{"minReaderVersion":1,"minWriterVersion":2}}').simple_string
    '(1,2)'
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from .actions import Action, ActionKind, AddFile, Metadata, Protocol, RemoveFile
from .errors import InvalidActionError, MalformedRecordError

# Re-export canonical dumps to keep a single canonicalization policy.
from .hashing import hash_record, json_dumps_canonical
from .typing import JsonDict

__all__ = [
    "DECODE_CONTEXT",
    "ENVELOPE_PRECEDENCE",
    "json_loads",
    "json_dumps_canonical",
    "encode",
    "to_json",
    "hash_action",
    "parse_record",
    "populated_fields",
    "select_envelope_field",
    "decode",
]

logger = logging.getLogger(__name__)

# Validation context for payloads read from the log; models fill no generated defaults under it.
DECODE_CONTEXT: dict[str, str] = {"source": "log"}

ENVELOPE_PRECEDENCE: tuple[ActionKind, ...] = (
    ActionKind.ADD,
    ActionKind.REMOVE,
    ActionKind.METADATA,
    ActionKind.PROTOCOL,
)

_MODELS: dict[ActionKind, type[BaseModel]] = {
    ActionKind.ADD: AddFile,
    ActionKind.REMOVE: RemoveFile,
    ActionKind.METADATA: Metadata,
    ActionKind.PROTOCOL: Protocol,
}


def json_loads(s: str | bytes) -> Any:
    """Deserialize a JSON string with the stdlib json module (no custom hooks)."""
    return json.loads(s)


def encode(action: Action) -> JsonDict:
    """
    Wrap an action in its single-field envelope.

    Args:
        action (Action): AddFile, RemoveFile, Metadata or Protocol.

    Returns:
        JsonDict: ``{kind: payload}`` with camelCase payload keys and absent
        optional fields omitted.

    Raises:
        TypeError: If ``action`` is not one of the four action variants.
    """
    if not isinstance(action, (AddFile, RemoveFile, Metadata, Protocol)):
        raise TypeError(f"cannot encode {type(action).__name__} as a log action")
    payload = action.model_dump(mode="json", by_alias=True, exclude_none=True)
    return {action.kind.value: payload}


def to_json(action: Action) -> str:
    """Encode an action as one canonical JSON log line (no trailing newline)."""
    return json_dumps_canonical(encode(action))


def hash_action(action: Action) -> str:
    """SHA-256 hex digest of the canonical envelope; equal actions hash equal."""
    return hash_record(encode(action))


def parse_record(record: str | bytes | Mapping[str, Any]) -> JsonDict:
    """
    Parse a raw log record into an envelope mapping.

    Args:
        record (str | bytes | Mapping): JSON text of one record, or an already-parsed mapping.

    Returns:
        JsonDict: The envelope.

    Raises:
        MalformedRecordError: If the text is not JSON or not a JSON object.
    """
    if isinstance(record, Mapping):
        return dict(record)
    try:
        obj = json_loads(record)
    except ValueError as exc:
        raise MalformedRecordError(f"record is not valid JSON: {exc}") from exc
    if not isinstance(obj, dict):
        raise MalformedRecordError(f"record must be a JSON object, got {type(obj).__name__}")
    return obj


def populated_fields(envelope: Mapping[str, Any]) -> list[ActionKind]:
    """Known envelope fields that are present and non-null, in precedence order."""
    return [kind for kind in ENVELOPE_PRECEDENCE if envelope.get(kind.value) is not None]


def select_envelope_field(envelope: Mapping[str, Any]) -> ActionKind | None:
    """
    Choose which envelope field holds the action, using ENVELOPE_PRECEDENCE.

    Args:
        envelope (Mapping[str, Any]): Parsed envelope.

    Returns:
        ActionKind | None: Highest-precedence populated field, or None if none is populated.

    Examples:
        >>> from tablelog.core.serde import select_envelope_field
        >>> select_envelope_field({"protocol": {}, "remove": {"path": "a"}}).value
        'remove'
    """
    present = populated_fields(envelope)
    if not present:
        return None
    if len(present) > 1:
        logger.warning(
            "action envelope has %d populated fields (%s); decoding %r by precedence",
            len(present),
            ", ".join(k.value for k in present),
            present[0].value,
        )
    return present[0]


def decode(record: str | bytes | Mapping[str, Any]) -> Action | None:
    """
    Decode one log record into its action.

    Args:
        record (str | bytes | Mapping): Raw JSON line or parsed envelope.

    Returns:
        Action | None: The unwrapped action, or None when no known field is populated.

    Raises:
        MalformedRecordError: If the record is not a JSON object.
        InvalidActionError: If the selected payload is not an object or fails validation.
    """
    envelope = parse_record(record)
    kind = select_envelope_field(envelope)
    if kind is None:
        return None
    payload = envelope[kind.value]
    if not isinstance(payload, Mapping):
        raise InvalidActionError(f"{kind.value} payload must be an object, got {payload!r}")
    try:
        return _MODELS[kind].model_validate(payload, context=DECODE_CONTEXT)  # type: ignore[return-value]
    except ValidationError as exc:
        raise InvalidActionError(f"invalid {kind.value} action: {exc}") from exc
