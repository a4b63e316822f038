"""Protocol definition for the record engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..components.schema import TableSchema
    from ..core.types import Record, RecordHash


class RecordStore(Protocol):
    """Public API of the document store."""

    def register_schema(self, table: str, schema: TableSchema | Mapping[str, Any]) -> TableSchema:
        """Register a schema and initialize its index files."""
        ...

    def create_table(self, name: str) -> None:
        """Create the table folder; no-op if it already exists."""
        ...

    def modify_table(self, old_name: str, new_name: str) -> None:
        """Move every blob of a table under a new name."""
        ...

    def delete_table(self, name: str) -> None:
        """Delete every blob of a table."""
        ...

    def delete_table_contents(self, name: str) -> None:
        """Delete every blob of a table but keep the folder."""
        ...

    def insert_record(self, table: str, record: Record) -> RecordHash:
        """Validate, store and index a record; return its address."""
        ...

    def get_record_by_hash(self, table: str, record_hash: RecordHash) -> Record:
        """Return the record stored at an address."""
        ...

    def get_record_by_field(self, table: str, field: str, value: Any) -> Record:
        """Return the record an indexed field value points to."""
        ...

    def update_record_by_hash(self, table: str, record_hash: RecordHash, updates: Record) -> Record:
        """Merge updates into the stored record at the same address."""
        ...

    def delete_record_by_hash(self, table: str, record_hash: RecordHash) -> None:
        """Delete the record stored at an address."""
        ...

    def clear_repo(self) -> None:
        """Delete every table and loose file in the repository."""
        ...
