"""
Pydantic v2 models for the four transaction-log actions and their shared pieces.

An action is one atomic, immutable fact recorded in the log at a specific
version. The set of variants is closed: ``Action`` is the union of AddFile,
RemoveFile, Metadata and Protocol, and every consumer (serde, replay) matches
over exactly these four.

Responsibilities
- Define frozen models whose snake_case attributes map to camelCase wire names.
- Enforce construction-time invariants (non-empty file paths, protocol versions >= 1).
- Provide pure derivations: tombstones from adds, cached schema parse for Metadata.

Style
- Zero-IO (stdlib + pydantic only).
- Unknown fields are ignored on validation so newer writers' additions are tolerated.
- No implicit clock reads: timestamps are always supplied by the caller.
- Models are frozen and compare by value but are not hashable, since they hold
  dict and list fields; use tablelog.core.serde.hash_action for a stable digest.

References
- serde: src/tablelog/core/serde.py (envelope encoding/decoding)
- replay: src/tablelog/core/replay.py (reconciliation semantics)
- tests: tests/core/test_actions.py
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any, ClassVar
from urllib.parse import SplitResult, urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .constants import DEFAULT_FORMAT_PROVIDER, READER_VERSION, WRITER_VERSION
from .errors import InvalidActionError
from .schema import StructType, parse_schema

__all__ = [
    "ActionKind",
    "Protocol",
    "FileAction",
    "AddFile",
    "RemoveFile",
    "Format",
    "Metadata",
    "Action",
]


class ActionKind(Enum):
    """
    Closed set of action variants; the value is the envelope field name on the wire.

    Notes:
        Declaration order matches envelope decoding precedence
        (add > remove > metaData > protocol).
    """

    ADD = "add"
    REMOVE = "remove"
    METADATA = "metaData"
    PROTOCOL = "protocol"


class _WireModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class Protocol(_WireModel):
    """
    Minimum implementation capability required to read or write the table.

    Attributes:
        min_reader_version (int): Lowest reader version allowed to read (>= 1).
        min_writer_version (int): Lowest writer version allowed to write (>= 1).

    Notes:
        Defaults equal this implementation's own supported versions
        (tablelog.core.constants.READER_VERSION / WRITER_VERSION).

    Examples:
        >>> from tablelog.core.actions import Protocol
        >>> Protocol(min_reader_version=1, min_writer_version=2).simple_string
        '(1,2)'
    """

    kind: ClassVar[ActionKind] = ActionKind.PROTOCOL

    min_reader_version: int = Field(default=READER_VERSION, ge=1)
    min_writer_version: int = Field(default=WRITER_VERSION, ge=1)

    @property
    def simple_string(self) -> str:
        return f"({self.min_reader_version},{self.min_writer_version})"


class FileAction(_WireModel):
    """
    Shared shape of AddFile and RemoveFile.

    Attributes:
        path (str): Non-empty, URI-like file identifier relative to the table root.
        data_change (bool): True when the action changes query-visible data;
            False for purely structural rewrites such as compaction.

    Raises:
        InvalidActionError: If path is empty.
    """

    path: str
    data_change: bool

    @field_validator("path")
    @classmethod
    def _check_path(cls, v: str) -> str:
        if not v:
            raise InvalidActionError(f"{cls.__name__} requires a non-empty path")
        return v

    @property
    def path_uri(self) -> SplitResult:
        """Path split into URI components (scheme, netloc, path, query, fragment)."""
        return urlsplit(self.path)


class AddFile(FileAction):
    """
    Adds a data file to the table manifest.

    When several AddFile actions for the same path are replayed, only the last
    one is kept, in full (no field-level merge).

    Attributes:
        partition_values (dict[str, str | None]): Partition column -> value; always
            serialized. None is a null partition value and is written as JSON null.
        size (int): File size in bytes.
        modification_time (int): Epoch milliseconds of the file's creation/modification.
        data_change (bool): See FileAction.
        stats (str | None): Opaque statistics blob, passed through uninterpreted.
        tags (dict[str, str] | None): Optional free-form tags.

    Examples:
        >>> from tablelog.core.actions import AddFile
        >>> add = AddFile(path="part-0.parquet", partition_values={}, size=10,
        ...               modification_time=1, data_change=True)
        >>> add.remove_with_timestamp(1000).deletion_timestamp
        1000
    """

    kind: ClassVar[ActionKind] = ActionKind.ADD

    partition_values: dict[str, str | None]
    size: int
    modification_time: int
    data_change: bool
    stats: str | None = None
    tags: dict[str, str] | None = None

    def remove_with_timestamp(self, timestamp: int, data_change: bool = True) -> RemoveFile:
        """
        Derive the tombstone that logically deletes this file.

        Args:
            timestamp (int): Deletion time in epoch milliseconds, supplied by the caller.
            data_change (bool): Whether the removal changes query-visible data.

        Returns:
            RemoveFile: Tombstone for this file's path.
        """
        return RemoveFile.from_add(self, timestamp, data_change=data_change)


class RemoveFile(FileAction):
    """
    Logical removal of a file; kept as a tombstone until physically deleted.

    Attributes:
        deletion_timestamp (int | None): Epoch milliseconds of the deletion.
        data_change (bool): Defaults to True.
    """

    kind: ClassVar[ActionKind] = ActionKind.REMOVE

    deletion_timestamp: int | None = None
    data_change: bool = True

    @classmethod
    def from_add(cls, add: AddFile, timestamp: int, data_change: bool = True) -> RemoveFile:
        """Build the tombstone for ``add.path`` deleted at ``timestamp``."""
        return cls(path=add.path, deletion_timestamp=timestamp, data_change=data_change)

    @property
    def del_timestamp(self) -> int:
        """Deletion timestamp, or 0 when absent."""
        return self.deletion_timestamp if self.deletion_timestamp is not None else 0


class Format(_WireModel):
    """Storage format of the table's data files."""

    provider: str = DEFAULT_FORMAT_PROVIDER
    options: dict[str, str] = Field(default_factory=dict)


def _new_table_id() -> str:
    return str(uuid.uuid4())


class Metadata(_WireModel):
    """
    Table schema, partitioning and configuration. Only the last Metadata in log order counts.

    Attributes:
        id (str | None): Table UUID. Direct construction generates one when not
            supplied; a decoded record keeps exactly what the log holds, so an
            id-less record decodes to None on every read.
        name (str | None): Optional table name.
        description (str | None): Optional description.
        format (Format): Data file format (default provider "parquet").
        schema_string (str | None): Serialized schema; the persisted source of truth.
        partition_columns (list[str]): Ordered partition column names.
        configuration (dict[str, str]): Table properties.
        created_time (int | None): Creation time in epoch milliseconds, supplied by the caller.

    Examples:
        >>> from tablelog.core.actions import Metadata
        >>> Metadata(id="t1").parsed_schema.fields
        ()
    """

    kind: ClassVar[ActionKind] = ActionKind.METADATA

    id: str | None = None
    name: str | None = None
    description: str | None = None
    format: Format = Field(default_factory=Format)
    schema_string: str | None = None
    partition_columns: list[str] = Field(default_factory=list)
    configuration: dict[str, str] = Field(default_factory=dict)
    created_time: int | None = None

    @model_validator(mode="before")
    @classmethod
    def _assign_table_id(cls, data: Any, info: ValidationInfo) -> Any:
        # Decoding passes a validation context; only plain construction mints an id.
        if info.context is None and isinstance(data, dict) and data.get("id") is None:
            data = {**data, "id": _new_table_id()}
        return data

    @property
    def parsed_schema(self) -> StructType:
        """
        Structured schema derived from schema_string.

        Raises:
            InvalidActionError: If schema_string is present but unparseable.
        """
        return parse_schema(self.schema_string)


Action = AddFile | RemoveFile | Metadata | Protocol
