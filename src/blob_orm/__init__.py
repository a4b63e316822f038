"""blob-orm - a minimal document store over versioned blob storage."""

from .components.cache import MISSING, LRUCache
from .components.local_store import LocalBlobStore
from .components.memory_store import InMemoryBlobStore
from .components.schema import FieldType, SchemaRegistry, TableSchema
from .core.config import ORMConfig
from .core.engine import RecordEngine
from .core.errors import (
    ORMError,
    BlobStoreError,
    NotFoundError,
    ConflictError,
    InvalidSchemaError,
    SchemaNotRegisteredError,
    FieldTypeMismatchError,
    FieldNotIndexedError,
    NoSuchIndexValueError,
    RenameIncompleteError,
    EmptyTableError,
    CodecError,
    IndexInitializationError,
)
from .core.types import BlobEntry, BlobFile, Record, RecordHash, Scalar

__all__ = [
    "MISSING",
    "LRUCache",
    "LocalBlobStore",
    "InMemoryBlobStore",
    "FieldType",
    "SchemaRegistry",
    "TableSchema",
    "ORMConfig",
    "RecordEngine",
    "ORMError",
    "BlobStoreError",
    "NotFoundError",
    "ConflictError",
    "InvalidSchemaError",
    "SchemaNotRegisteredError",
    "FieldTypeMismatchError",
    "FieldNotIndexedError",
    "NoSuchIndexValueError",
    "RenameIncompleteError",
    "EmptyTableError",
    "CodecError",
    "IndexInitializationError",
    "BlobEntry",
    "BlobFile",
    "Record",
    "RecordHash",
    "Scalar",
]
