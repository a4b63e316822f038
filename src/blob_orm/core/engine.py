"""Record engine implementation - main public API.

Orchestrates schemas, codec, cache, indexes and the blob store.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any

from ..components.cache import MISSING, LRUCache
from ..components.codec import make_codec
from ..components.hashing import stringify_value
from ..components.index import IndexManager
from ..components.schema import SchemaRegistry, TableSchema
from ..components.versioned_writer import VersionedWriter
from ..interfaces.blob_store import BlobStore
from ..interfaces.cache import RecordCache
from ..interfaces.codec import RecordCodec
from .config import ORMConfig
from .errors import (
    EmptyTableError,
    IndexInitializationError,
    NotFoundError,
    ORMError,
    RenameIncompleteError,
)
from .types import BlobEntry, Record, RecordHash

logger = logging.getLogger(__name__)

_HASH_RE = re.compile(r"^[0-9a-f]{32}$")


class RecordEngine:
    """Document store over a versioned blob store.

    Args:
        store: Blob store adapter
        config: Engine configuration (defaults to ORMConfig())
        registry: Schema registry (a fresh one by default)

    Public API:
        - register_schema(table, schema): Register schema, create index files
        - create_table / modify_table / delete_table / delete_table_contents
        - insert_record(table, record): Store and index; returns the hash
        - get_record_by_hash / get_record_by_field
        - update_record_by_hash / delete_record_by_hash
        - clear_repo(): Delete everything in the repository

    Invariants:
        - A record lives at '<table>/<md5 of hash-field values>'
        - Index updates run only after the record write succeeded
        - After insert_record, every index of the table resolves the
          record's values to its hash
        - Reads are served from the cache when possible; writes go through it
    """

    def __init__(
        self,
        store: BlobStore,
        config: ORMConfig | None = None,
        registry: SchemaRegistry | None = None,
    ):
        self.config = config or ORMConfig()
        self.store = store
        self.registry = registry if registry is not None else SchemaRegistry()
        self.cache: RecordCache = LRUCache(self.config.cache_size)
        self.codec: RecordCodec = make_codec(self.config.codec, self.config.delimiter)
        self.indexes = IndexManager(store, self.registry)
        self._writer = VersionedWriter(store)
        self._index_pool = ThreadPoolExecutor(
            max_workers=self.config.index_workers, thread_name_prefix="IndexUpdate"
        )

        logger.info(f"Initialized RecordEngine with {self.config.codec} codec")

    # Schemas

    def register_schema(self, table: str, schema: TableSchema | Mapping[str, Any]) -> TableSchema:
        """Register schema for table and create its missing index files.

        Raises:
            IndexInitializationError: One or more index files could not be
                created; the schema stays registered
        """
        if not isinstance(schema, TableSchema):
            schema = TableSchema.from_dict(schema)
        self.registry.register(table, schema)

        failures = self.indexes.initialize(table, schema.index_fields)
        if failures:
            raise IndexInitializationError(table, failures)

        logger.info(f"Schema for table '{table}' registered successfully")
        return schema

    # Tables

    def table_exists(self, name: str) -> bool:
        return self.store.folder_exists(name)

    def create_table(self, name: str) -> None:
        """Create the table folder; no-op if it exists."""
        if self.store.folder_exists(name):
            logger.info(f"Table '{name}' already exists")
            return
        self.store.create_folder(name)
        logger.info(f"Table (folder) '{name}' created successfully")

    def modify_table(self, old_name: str, new_name: str) -> None:
        """Rename a table by copying each blob to the new prefix and deleting it.

        Raises:
            RenameIncompleteError: Old folder is unreadable or a move failed
            EmptyTableError: Old folder holds no blobs
        """
        old_name, new_name = old_name.strip("/"), new_name.strip("/")
        try:
            paths = self._walk(old_name)
        except NotFoundError as e:
            raise RenameIncompleteError(old_name, new_name, reason=str(e)) from e
        if not paths:
            raise EmptyTableError(old_name, new_name)

        moved: list[str] = []
        for path in paths:
            new_path = new_name + path[len(old_name):]
            try:
                current = self.store.read_file(path)
                self._writer.write(new_path, current.content)
                self.store.delete_file(path, current.version)
            except ORMError as e:
                raise RenameIncompleteError(old_name, new_name, moved, reason=str(e)) from e
            self.cache.delete(path)
            moved.append(path)

        self.registry.rename(old_name, new_name)
        logger.info(f"Table '{old_name}' renamed to '{new_name}' ({len(moved)} blobs moved)")

    def delete_table(self, name: str) -> None:
        """Delete every blob under the table folder."""
        paths = self._walk(name)
        for path in paths:
            self._writer.delete(path)
            self.cache.delete(path)
        logger.info(f"Table (folder) '{name}' deleted ({len(paths)} blobs)")

    def delete_table_contents(self, name: str) -> None:
        """Delete every blob of the table, leaving only the folder placeholder."""
        self.delete_table(name)
        self.store.create_folder(name)
        logger.info(f"Contents of table '{name}' deleted")

    def list_record_hashes(self, table: str) -> list[RecordHash]:
        """Return the sorted hashes of the records stored in table."""
        return sorted(
            entry["name"]
            for entry in self.store.list_folder(table)
            if entry["kind"] == "file" and _HASH_RE.match(entry["name"])
        )

    def clear_repo(self) -> None:
        """Delete every table and loose file in the repository."""
        for entry in self.store.list_root():
            if entry["kind"] == "dir":
                self.delete_table(entry["path"])
            else:
                self._writer.delete(entry["path"])
        self.cache.clear()
        logger.info("Repository cleared successfully")

    # Records

    def insert_record(self, table: str, record: Record) -> RecordHash:
        """Validate, store and index record.

        Returns:
            The record hash (its address within the table)

        Raises:
            SchemaNotRegisteredError: No schema for table
            FieldTypeMismatchError: Validation failed; nothing was written
            ConflictError: The write conflicted twice
        """
        schema = self.registry.lookup(table)
        schema.validate(record)
        record = schema.project(record)

        record_hash = schema.hash(record)
        path = self._record_path(table, record_hash)
        previous = None
        if self.config.maintain_indexes and schema.index_fields:
            previous = self._stored_record(schema, path)
        self._writer.write(path, self.codec.encode(schema, record))
        self.cache.set(path, record)
        logger.debug(f"Record inserted into table '{table}' with hash '{record_hash}'")

        calls = []
        for field in schema.index_fields:
            if previous is not None and stringify_value(previous[field]) != stringify_value(record[field]):
                calls.append((self._reindex, table, field, previous[field], record[field], record_hash))
            else:
                calls.append((self.indexes.update, table, field, record[field], record_hash))
        self._fan_out(calls)
        return record_hash

    def get_record_by_hash(self, table: str, record_hash: RecordHash) -> Record:
        """Return the record at record_hash, from cache when possible.

        Raises:
            NotFoundError: No blob at the address
        """
        schema = self.registry.lookup(table)
        path = self._record_path(table, record_hash)

        cached = self.cache.get(path)
        if cached is not MISSING:
            logger.debug(f"Cache hit for '{path}'")
            return dict(cached)

        record = self.codec.decode(schema, self.store.read_file(path).content)
        self.cache.set(path, record)
        logger.debug(f"Record retrieved from table '{table}' with hash '{record_hash}'")
        return dict(record)

    def get_record_by_field(self, table: str, field: str, value: Any) -> Record:
        """Return the record whose indexed field equals value.

        Raises:
            FieldNotIndexedError: field has no index
            NoSuchIndexValueError: No record indexed under value
        """
        record_hash = self.indexes.lookup(table, field, value)
        return self.get_record_by_hash(table, record_hash)

    def update_record_by_hash(self, table: str, record_hash: RecordHash, updates: Record) -> Record:
        """Merge updates over the stored record and rewrite it in place.

        The address is not recomputed even if hash fields change.

        Returns:
            The merged record
        """
        schema = self.registry.lookup(table)
        existing = self.get_record_by_hash(table, record_hash)
        merged = {**existing, **updates}
        schema.validate(merged)
        merged = schema.project(merged)

        path = self._record_path(table, record_hash)
        self._writer.write(path, self.codec.encode(schema, merged))
        self.cache.set(path, merged)
        logger.debug(f"Record updated with hash '{record_hash}'")

        if self.config.maintain_indexes:
            changed = [
                field
                for field in schema.index_fields
                if stringify_value(existing[field]) != stringify_value(merged[field])
            ]
            self._fan_out(
                (self._reindex, table, field, existing[field], merged[field], record_hash)
                for field in changed
            )
        return dict(merged)

    def delete_record_by_hash(self, table: str, record_hash: RecordHash) -> None:
        """Delete the record at record_hash.

        Raises:
            NotFoundError: No blob at the address
        """
        schema = self.registry.lookup(table)
        path = self._record_path(table, record_hash)
        existing = None
        if self.config.maintain_indexes and schema.index_fields:
            existing = self.get_record_by_hash(table, record_hash)

        self._writer.delete(path)
        self.cache.delete(path)
        logger.debug(f"Record deleted from table '{table}' with hash '{record_hash}'")

        if existing is not None:
            self._fan_out(
                (self.indexes.remove, table, field, existing[field], record_hash)
                for field in schema.index_fields
            )

    def close(self) -> None:
        """Release the index worker pool."""
        logger.info("Closing RecordEngine")
        self._index_pool.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # Internals

    @staticmethod
    def _record_path(table: str, record_hash: RecordHash) -> str:
        return f"{table}/{record_hash}"

    def _stored_record(self, schema: TableSchema, path: str) -> Record | None:
        """Return the record currently at path, or None if there is none."""
        cached = self.cache.get(path)
        if cached is not MISSING:
            return cached
        current = self._writer.read(path)
        if current is None:
            return None
        return self.codec.decode(schema, current.content)

    def _reindex(self, table: str, field: str, old: Any, new: Any, record_hash: RecordHash) -> None:
        self.indexes.remove(table, field, old, record_hash)
        self.indexes.update(table, field, new, record_hash)

    def _fan_out(self, calls) -> None:
        """Run index calls on the worker pool and wait for all of them.

        The first failure is raised after every call has finished.
        """
        futures = [self._index_pool.submit(fn, *args) for fn, *args in calls]
        if not futures:
            return
        wait(futures)
        errors = [f.exception() for f in futures if f.exception() is not None]
        for error in errors[1:]:
            logger.error(f"Additional index update failure: {error}")
        if errors:
            raise errors[0]

    def _walk(self, folder: str) -> list[str]:
        """Return every blob path under folder, recursing into sub-folders."""
        paths: list[str] = []
        entries: list[BlobEntry] = self.store.list_folder(folder)
        for entry in entries:
            if entry["kind"] == "dir":
                paths.extend(self._walk(entry["path"]))
            else:
                paths.append(entry["path"])
        return paths
