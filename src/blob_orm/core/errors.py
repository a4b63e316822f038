"""Exception hierarchy for blob-orm.

Defines all custom exceptions raised by the engine and the blob store adapters.
"""

from __future__ import annotations

from typing import Any


class ORMError(Exception):
    """Base exception for all blob-orm errors."""
    pass


class BlobStoreError(ORMError):
    """Raised when a blob store operation fails."""
    pass


class NotFoundError(BlobStoreError):
    """Raised when a blob or folder does not exist.

    Attributes:
        path: Repository path that was looked up
    """

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Not found: {path}")


class ConflictError(BlobStoreError):
    """Raised when a write or delete carries a stale version token.

    Attributes:
        path: Repository path of the conflicting blob
    """

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Version conflict on {path}")


class InvalidSchemaError(ORMError):
    """Raised when a table schema definition is malformed."""
    pass


class SchemaNotRegisteredError(ORMError):
    """Raised when a table has no registered schema.

    Attributes:
        table: Table name
    """

    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f"Schema for table '{table}' not registered")


class FieldTypeMismatchError(ORMError):
    """Raised when a record field does not match its declared type.

    Attributes:
        field: Field name
        expected: Declared type tag
        actual: Python type name of the offending value ("missing" if absent)
    """

    def __init__(self, field: str, expected: str, actual: str) -> None:
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Field '{field}' is of incorrect type. Expected '{expected}' but got '{actual}'"
        )


class FieldNotIndexedError(ORMError):
    """Raised when a lookup targets a field without an index."""

    def __init__(self, table: str, field: str) -> None:
        self.table = table
        self.field = field
        super().__init__(f"Field '{field}' is not indexed in table '{table}'")


class NoSuchIndexValueError(ORMError):
    """Raised when an index has no entry for the requested value."""

    def __init__(self, table: str, field: str, value: Any) -> None:
        self.table = table
        self.field = field
        self.value = value
        super().__init__(f"No record found in '{table}' with {field} = '{value}'")


class RenameIncompleteError(ORMError):
    """Raised when a table rename could not move every blob.

    Attributes:
        old: Source table name
        new: Target table name
        moved: Paths already moved before the failure
    """

    def __init__(self, old: str, new: str, moved: list[str] | None = None, reason: str = "") -> None:
        self.old = old
        self.new = new
        self.moved = list(moved or [])
        message = f"Rename of '{old}' to '{new}' incomplete ({len(self.moved)} blobs moved)"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class EmptyTableError(RenameIncompleteError):
    """Raised when renaming a table that holds no blobs."""

    def __init__(self, old: str, new: str) -> None:
        super().__init__(old, new, reason="table is empty")


class CodecError(ORMError):
    """Raised when a record cannot be encoded or decoded."""
    pass


class IndexInitializationError(ORMError):
    """Raised when one or more index files could not be created.

    Attributes:
        table: Table name
        failures: Mapping of field name to the exception raised for it
    """

    def __init__(self, table: str, failures: dict[str, Exception]) -> None:
        self.table = table
        self.failures = dict(failures)
        fields = ", ".join(sorted(self.failures))
        super().__init__(f"Failed to initialize indexes for table '{table}': {fields}")
