"""Protocol definition for record codecs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..components.schema import TableSchema
    from ..core.types import Record


class RecordCodec(Protocol):
    """Converts records to and from their stored text form."""

    def encode(self, schema: TableSchema, record: Record) -> str:
        """Serialize the schema's fields of record in schema order."""
        ...

    def decode(self, schema: TableSchema, text: str) -> Record:
        """Parse stored text back into a record.

        Invariants:
            - decode(schema, encode(schema, r)) == r for every valid r
        """
        ...
