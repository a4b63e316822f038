"""Optimistic-concurrency writes against a blob store.

Every write fetches the blob's current version token, submits the write with
it, and on a ConflictError fetches again and retries exactly once.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..core.errors import ConflictError, NotFoundError

if TYPE_CHECKING:
    from ..core.types import BlobFile, VersionToken
    from ..interfaces.blob_store import BlobStore

logger = logging.getLogger(__name__)


class VersionedWriter:
    """Single-retry create/update/delete helper.

    Args:
        store: Blob store to write to
    """

    def __init__(self, store: BlobStore):
        self.store = store

    def read(self, path: str) -> BlobFile | None:
        """Return the blob at path, or None if it does not exist."""
        try:
            return self.store.read_file(path)
        except NotFoundError:
            return None

    def current_version(self, path: str) -> VersionToken | None:
        current = self.read(path)
        return current.version if current is not None else None

    def write(self, path: str, content: str) -> VersionToken:
        """Create or overwrite path with content."""
        return self.apply(path, lambda _current: content)

    def apply(self, path: str, mutate: Callable[[str | None], str]) -> VersionToken:
        """Read-modify-write path.

        mutate receives the current content (None if absent) and returns the
        new content. On a conflict the blob is read again and mutate re-applied
        once; a second conflict propagates.
        """
        try:
            return self._apply_once(path, mutate)
        except ConflictError:
            logger.warning(f"Conflict detected for '{path}', retrying with fresh version")
        return self._apply_once(path, mutate)

    def delete(self, path: str) -> None:
        """Delete path; NotFoundError if it does not exist."""
        try:
            self._delete_once(path)
            return
        except ConflictError:
            logger.warning(f"Conflict detected deleting '{path}', retrying with fresh version")
        self._delete_once(path)

    def _apply_once(self, path: str, mutate: Callable[[str | None], str]) -> VersionToken:
        current = self.read(path)
        if current is None:
            return self.store.write_file(path, mutate(None))
        return self.store.write_file(path, mutate(current.content), current.version)

    def _delete_once(self, path: str) -> None:
        current = self.store.read_file(path)
        self.store.delete_file(path, current.version)
