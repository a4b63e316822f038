"""Secondary field indexes.

Each indexed field of a table owns one JSON document at
'<table>/index_<field>.json' mapping stringified field values to record hashes.
Documents are kept in a SortedDict so they serialize in key order.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from sortedcontainers import SortedDict

from ..core.errors import (
    BlobStoreError,
    CodecError,
    ConflictError,
    FieldNotIndexedError,
    NoSuchIndexValueError,
)
from .hashing import stringify_value
from .versioned_writer import VersionedWriter

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..core.types import RecordHash
    from ..interfaces.blob_store import BlobStore
    from .schema import SchemaRegistry

logger = logging.getLogger(__name__)


def _parse(content: str | None) -> SortedDict:
    if not content:
        return SortedDict()
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise CodecError(f"Index document is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise CodecError("Index document is not a JSON object")
    return SortedDict(data)


def _dump(mapping: SortedDict) -> str:
    return json.dumps(dict(mapping))


class IndexManager:
    """Maintains value -> hash indexes for indexed fields.

    Args:
        store: Blob store holding the index documents
        registry: Schema registry used to check which fields are indexed

    Invariants:
        - After update(t, f, v, h), lookup(t, f, v) == h
        - Index documents of different fields are disjoint blobs
    """

    def __init__(self, store: BlobStore, registry: SchemaRegistry):
        self.store = store
        self.registry = registry
        self._writer = VersionedWriter(store)

    @staticmethod
    def index_path(table: str, field: str) -> str:
        return f"{table}/index_{field}.json"

    def initialize(self, table: str, fields: Iterable[str]) -> dict[str, Exception]:
        """Create an empty index document for every field lacking one.

        Returns:
            Mapping of field name to the error raised while creating it
        """
        failures: dict[str, Exception] = {}
        for field in fields:
            path = self.index_path(table, field)
            try:
                if self._writer.read(path) is not None:
                    continue
                self.store.write_file(path, "{}")
                logger.info(f"Index created for field '{field}' in table '{table}'")
            except ConflictError:
                # Created concurrently by another writer
                continue
            except BlobStoreError as e:
                logger.warning(f"Error creating index for field '{field}' in table '{table}': {e}")
                failures[field] = e
        return failures

    def update(self, table: str, field: str, value: Any, record_hash: RecordHash) -> None:
        """Point value of field at record_hash."""
        key = stringify_value(value)

        def mutate(content: str | None) -> str:
            if content is None:
                logger.debug(f"Index file for '{field}' not found, creating a new one")
            mapping = _parse(content)
            mapping[key] = record_hash
            return _dump(mapping)

        self._writer.apply(self.index_path(table, field), mutate)
        logger.debug(f"Indexed {table}.{field}={key!r} -> {record_hash}")

    def remove(self, table: str, field: str, value: Any, record_hash: RecordHash) -> bool:
        """Drop the entry for value if it still points to record_hash.

        Returns:
            True if an entry was removed
        """
        key = stringify_value(value)
        path = self.index_path(table, field)
        current = self._writer.read(path)
        if current is None or _parse(current.content).get(key) != record_hash:
            return False

        def mutate(content: str | None) -> str:
            mapping = _parse(content)
            if mapping.get(key) == record_hash:
                del mapping[key]
            return _dump(mapping)

        self._writer.apply(path, mutate)
        logger.debug(f"Removed {table}.{field}={key!r} from index")
        return True

    def lookup(self, table: str, field: str, value: Any) -> RecordHash:
        """Return the hash indexed under value.

        Raises:
            SchemaNotRegisteredError: table has no schema
            FieldNotIndexedError: field is not an index field
            NoSuchIndexValueError: value is not in the index
        """
        schema = self.registry.lookup(table)
        if field not in schema.index_fields:
            raise FieldNotIndexedError(table, field)

        current = self._writer.read(self.index_path(table, field))
        mapping = _parse(current.content if current is not None else None)
        try:
            return mapping[stringify_value(value)]
        except KeyError:
            raise NoSuchIndexValueError(table, field, value) from None

    def entries(self, table: str, field: str) -> dict[str, RecordHash]:
        """Return the full index document of field in key order."""
        current = self._writer.read(self.index_path(table, field))
        return dict(_parse(current.content if current is not None else None))
