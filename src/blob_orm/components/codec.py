"""Record codecs.

Both codecs store the schema's fields in schema order:

    delimited: Alice|25|true
    json:      ["Alice",25,true]
"""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING

from ..core.errors import CodecError, FieldTypeMismatchError
from .hashing import stringify_value
from .schema import FieldType

if TYPE_CHECKING:
    from ..core.types import Record, Scalar
    from ..interfaces.codec import RecordCodec
    from .schema import TableSchema

_INT_RE = re.compile(r"^[+-]?\d+$")


class DelimitedRecordCodec:
    """Single-character delimited encoding.

    Args:
        delimiter: Separator between values

    Values whose text contains the delimiter cannot be stored and raise
    CodecError on encode.
    """

    def __init__(self, delimiter: str = "|"):
        if len(delimiter) != 1:
            raise ValueError(f"delimiter must be a single character, got {delimiter!r}")
        self.delimiter = delimiter

    def encode(self, schema: TableSchema, record: Record) -> str:
        values = []
        for name in schema.fields:
            text = stringify_value(record[name])
            if self.delimiter in text:
                raise CodecError(f"Value of field '{name}' contains the delimiter '{self.delimiter}'")
            values.append(text)
        return self.delimiter.join(values)

    def decode(self, schema: TableSchema, text: str) -> Record:
        values = text.split(self.delimiter)
        if len(values) != len(schema.fields):
            raise CodecError(f"Expected {len(schema.fields)} values, got {len(values)}")
        return {
            name: self._coerce(name, tag, raw)
            for (name, tag), raw in zip(schema.fields.items(), values)
        }

    @staticmethod
    def _coerce(name: str, tag: FieldType, raw: str) -> Scalar:
        if tag is FieldType.STRING:
            return raw
        if tag is FieldType.BOOLEAN:
            if raw == "true":
                return True
            if raw == "false":
                return False
            raise CodecError(f"Invalid boolean for field '{name}': {raw!r}")
        if _INT_RE.match(raw):
            return int(raw)
        try:
            return float(raw)
        except ValueError as e:
            raise CodecError(f"Invalid number for field '{name}': {raw!r}") from e


class JsonRecordCodec:
    """JSON array encoding; safe for any value and type-preserving."""

    def encode(self, schema: TableSchema, record: Record) -> str:
        values = [record[name] for name in schema.fields]
        return json.dumps(values, separators=(",", ":"), ensure_ascii=False)

    def decode(self, schema: TableSchema, text: str) -> Record:
        try:
            values = json.loads(text)
        except json.JSONDecodeError as e:
            raise CodecError(f"Stored record is not valid JSON: {e}") from e
        if not isinstance(values, list) or len(values) != len(schema.fields):
            raise CodecError(f"Expected a JSON array of {len(schema.fields)} values")
        record = dict(zip(schema.fields, values))
        try:
            schema.validate(record)
        except FieldTypeMismatchError as e:
            raise CodecError(f"Stored record does not match schema: {e}") from e
        return record


def make_codec(name: str, delimiter: str = "|") -> RecordCodec:
    """Return the codec configured by name ("json" or "delimited")."""
    if name == "json":
        return JsonRecordCodec()
    if name == "delimited":
        return DelimitedRecordCodec(delimiter)
    raise ValueError(f"Unknown codec: {name}")
