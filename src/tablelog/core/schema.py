"""
Structured, read-only view of the table schema carried in Metadata.schemaString.

The persisted ``schemaString`` stays the source of truth. ``parse_schema`` is a
pure function of that string and is memoized with ``functools.lru_cache``, so
repeated access from many ``Metadata`` values shares one parse without any
per-instance mutable state.

Responsibilities
- Parse the Spark-style JSON schema (struct/array/map nesting, primitive type names).
- Reject strings that are not JSON or do not describe a struct with InvalidActionError.

Notes
- Primitive types are kept as their type-name strings ("integer", "decimal(10,2)", ...).
  Interpreting them (casting, compatibility) belongs to the external type system.
- Zero-IO (stdlib + pydantic only).

Examples:
    >>> from tablelog.core.schema import parse_schema
    >>> s = parse_schema('{"type":"struct","fields":[{"name":"id","type":"long","nullable":false,"metadata":{}}]}')
    >>> s.field_names
    ('id',)
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import InvalidActionError

__all__ = [
    "ArrayType",
    "MapType",
    "StructField",
    "StructType",
    "DataType",
    "parse_schema",
]


class ArrayType(BaseModel):
    """
    Array of a single element type.

    Attributes:
        element_type (DataType): Type of each element.
        contains_null (bool): Whether elements may be null.
    """

    model_config = ConfigDict(frozen=True)

    element_type: DataType
    contains_null: bool = True


class MapType(BaseModel):
    """
    Map from key type to value type.

    Attributes:
        key_type (DataType): Type of map keys.
        value_type (DataType): Type of map values.
        value_contains_null (bool): Whether values may be null.
    """

    model_config = ConfigDict(frozen=True)

    key_type: DataType
    value_type: DataType
    value_contains_null: bool = True


class StructField(BaseModel):
    """
    Named, typed column within a struct.

    Attributes:
        name (str): Column name as written by the producer.
        data_type (DataType): Primitive type name or nested type.
        nullable (bool): Whether the column may hold nulls.
        metadata (dict[str, Any]): Free-form column metadata, passed through.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    data_type: DataType
    nullable: bool = True
    metadata: dict[str, Any] = Field(default_factory=dict)


class StructType(BaseModel):
    """
    Ordered collection of struct fields; the top-level table schema.

    Examples:
        >>> from tablelog.core.schema import StructType, StructField
        >>> st = StructType(fields=(StructField(name="a", data_type="integer"),))
        >>> st.field("a").data_type
        'integer'
    """

    model_config = ConfigDict(frozen=True)

    fields: tuple[StructField, ...] = ()

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def field(self, name: str) -> StructField:
        """
        Look up a top-level field by exact name.

        Raises:
            KeyError: If no field has that name.
        """
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)


DataType = Union[str, ArrayType, MapType, StructType]

ArrayType.model_rebuild()
MapType.model_rebuild()
StructField.model_rebuild()
StructType.model_rebuild()


def _parse_type(obj: Any) -> DataType:
    if isinstance(obj, str):
        return obj
    if not isinstance(obj, dict):
        raise InvalidActionError(f"schema type must be a string or object, got {obj!r}")
    kind = obj.get("type")
    if kind == "struct":
        fields = obj.get("fields")
        if not isinstance(fields, list):
            raise InvalidActionError("struct type requires a 'fields' list")
        return StructType(fields=tuple(_parse_field(f) for f in fields))
    if kind == "array":
        if "elementType" not in obj:
            raise InvalidActionError("array type requires 'elementType'")
        return ArrayType(
            element_type=_parse_type(obj["elementType"]),
            contains_null=bool(obj.get("containsNull", True)),
        )
    if kind == "map":
        if "keyType" not in obj or "valueType" not in obj:
            raise InvalidActionError("map type requires 'keyType' and 'valueType'")
        return MapType(
            key_type=_parse_type(obj["keyType"]),
            value_type=_parse_type(obj["valueType"]),
            value_contains_null=bool(obj.get("valueContainsNull", True)),
        )
    raise InvalidActionError(f"unknown schema type {kind!r}")


def _parse_field(obj: Any) -> StructField:
    if not isinstance(obj, dict):
        raise InvalidActionError(f"struct field must be an object, got {obj!r}")
    name = obj.get("name")
    if not isinstance(name, str):
        raise InvalidActionError(f"struct field requires a string 'name', got {name!r}")
    if "type" not in obj:
        raise InvalidActionError(f"struct field {name!r} has no 'type'")
    metadata = obj.get("metadata") or {}
    if not isinstance(metadata, dict):
        raise InvalidActionError(f"metadata of field {name!r} must be an object")
    return StructField(
        name=name,
        data_type=_parse_type(obj["type"]),
        nullable=bool(obj.get("nullable", True)),
        metadata=metadata,
    )


@lru_cache(maxsize=256)
def parse_schema(schema_string: str | None) -> StructType:
    """
    Parse a serialized schema string into a StructType.

    Args:
        schema_string (str | None): JSON schema as persisted in Metadata.schemaString.

    Returns:
        StructType: Parsed schema; an empty struct when the string is absent or empty.

    Raises:
        InvalidActionError: If the string is not JSON or does not describe a struct.
    """
    if not schema_string:
        return StructType()
    try:
        obj = json.loads(schema_string)
    except json.JSONDecodeError as exc:
        raise InvalidActionError(f"schemaString is not valid JSON: {exc}") from exc
    parsed = _parse_type(obj)
    if not isinstance(parsed, StructType):
        raise InvalidActionError("schemaString must describe a struct type")
    return parsed
