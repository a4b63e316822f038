"""Table schemas and the schema registry.

Schemas live only in memory; every process registers them again on startup.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..core.errors import FieldTypeMismatchError, InvalidSchemaError, SchemaNotRegisteredError
from ..core.types import Record, RecordHash
from .hashing import record_hash

logger = logging.getLogger(__name__)


class FieldType(Enum):
    """Primitive type tag of a schema field."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"

    def matches(self, value: Any) -> bool:
        """Return True if value is an instance of this type.

        bool is never accepted as a number.
        """
        if self is FieldType.BOOLEAN:
            return isinstance(value, bool)
        if self is FieldType.NUMBER:
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        return isinstance(value, str)


def _type_name(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return type(value).__name__


@dataclass(frozen=True)
class TableSchema:
    """Field definitions, address fields and indexed fields of a table.

    Attributes:
        fields: Ordered mapping of field name to type; the order is the
            stored column order
        hash_fields: Ordered fields whose values derive the record address
        index_fields: Fields with a maintained value -> hash index
    """

    fields: dict[str, FieldType]
    hash_fields: tuple[str, ...]
    index_fields: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        fields = {}
        for name, tag in self.fields.items():
            try:
                fields[name] = FieldType(tag)
            except ValueError as e:
                raise InvalidSchemaError(f"Unknown type '{tag}' for field '{name}'") from e
        object.__setattr__(self, "fields", fields)
        object.__setattr__(self, "hash_fields", tuple(self.hash_fields))
        object.__setattr__(self, "index_fields", tuple(self.index_fields))

        if not self.hash_fields:
            raise InvalidSchemaError("hash_fields must name at least one field")
        for kind, names in (("hash", self.hash_fields), ("index", self.index_fields)):
            unknown = [n for n in names if n not in fields]
            if unknown:
                raise InvalidSchemaError(f"Unknown {kind} fields: {', '.join(unknown)}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TableSchema:
        """Build a schema from its external description.

        Accepts {fields, hashFields, indexFields?} as well as snake_case keys.
        """
        try:
            fields = data["fields"]
            hash_fields = data["hashFields"] if "hashFields" in data else data["hash_fields"]
        except KeyError as e:
            raise InvalidSchemaError(f"Schema description is missing {e}") from e
        index_fields = data.get("indexFields", data.get("index_fields")) or ()
        return cls(fields=dict(fields), hash_fields=tuple(hash_fields), index_fields=tuple(index_fields))

    @property
    def field_names(self) -> list[str]:
        return list(self.fields)

    def validate(self, record: Mapping[str, Any]) -> None:
        """Raise FieldTypeMismatchError on the first field with a wrong type."""
        for name, tag in self.fields.items():
            if name not in record:
                raise FieldTypeMismatchError(name, tag.value, "missing")
            value = record[name]
            if not tag.matches(value):
                raise FieldTypeMismatchError(name, tag.value, _type_name(value))

    def project(self, record: Mapping[str, Any]) -> Record:
        """Return the schema's fields of record, in schema order."""
        return {name: record[name] for name in self.fields}

    def hash(self, record: Mapping[str, Any]) -> RecordHash:
        """Return the address of record."""
        return record_hash(record, self.hash_fields)


class SchemaRegistry:
    """In-memory mapping of table name to schema.

    One registry belongs to one engine instance.
    """

    def __init__(self):
        self._schemas: dict[str, TableSchema] = {}

    def register(self, table: str, schema: TableSchema) -> None:
        """Store schema for table, replacing any previous one."""
        if table in self._schemas:
            logger.debug(f"Replacing schema for table '{table}'")
        self._schemas[table] = schema

    def lookup(self, table: str) -> TableSchema:
        """Return the schema of table or raise SchemaNotRegisteredError."""
        try:
            return self._schemas[table]
        except KeyError:
            raise SchemaNotRegisteredError(table) from None

    def unregister(self, table: str) -> None:
        self._schemas.pop(table, None)

    def rename(self, old: str, new: str) -> None:
        """Move a registered schema to a new table name (no-op if unregistered)."""
        if old in self._schemas:
            self._schemas[new] = self._schemas.pop(old)

    def tables(self) -> list[str]:
        return list(self._schemas)

    def __contains__(self, table: str) -> bool:
        return table in self._schemas
