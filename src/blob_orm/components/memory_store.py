"""In-memory blob store.

Holds blobs in a dict keyed by path; folders exist implicitly while they
contain at least one blob.
"""

from __future__ import annotations

import hashlib
import logging
import threading

from ..core.errors import ConflictError, NotFoundError
from ..core.types import BlobEntry, BlobFile, VersionToken

logger = logging.getLogger(__name__)


def blob_sha(content: str) -> VersionToken:
    """Return the git blob SHA-1 of content."""
    data = content.encode("utf-8")
    return hashlib.sha1(b"blob %d\0" % len(data) + data).hexdigest()


def normalize_path(path: str) -> str:
    return path.strip("/")


class InMemoryBlobStore:
    """Thread-safe dict-backed implementation of the BlobStore protocol.

    Args:
        placeholder_name: Name of the blob that represents an empty folder

    Invariants:
        - Every stored blob's version is the git blob SHA of its content
        - A folder exists iff some blob path starts with '<folder>/'
    """

    def __init__(self, placeholder_name: str = ".keep"):
        self.placeholder_name = placeholder_name
        self._blobs: dict[str, str] = {}
        self._lock = threading.Lock()

    def folder_exists(self, path: str) -> bool:
        prefix = normalize_path(path) + "/"
        with self._lock:
            return any(p.startswith(prefix) for p in self._blobs)

    def create_folder(self, path: str) -> None:
        path = normalize_path(path)
        if self.folder_exists(path):
            logger.debug(f"Folder '{path}' already exists, skipping creation")
            return
        with self._lock:
            self._blobs.setdefault(f"{path}/{self.placeholder_name}", "")
        logger.debug(f"Created folder: {path}")

    def list_folder(self, path: str) -> list[BlobEntry]:
        path = normalize_path(path)
        with self._lock:
            entries = self._children(path + "/")
        if not entries:
            raise NotFoundError(path)
        return entries

    def list_root(self) -> list[BlobEntry]:
        with self._lock:
            return self._children("")

    def read_file(self, path: str) -> BlobFile:
        path = normalize_path(path)
        with self._lock:
            if path not in self._blobs:
                raise NotFoundError(path)
            content = self._blobs[path]
        return BlobFile(content=content, version=blob_sha(content))

    def write_file(self, path: str, content: str, version: VersionToken | None = None) -> VersionToken:
        path = normalize_path(path)
        with self._lock:
            current = self._blobs.get(path)
            if version is None and current is not None:
                raise ConflictError(path)
            if version is not None and (current is None or blob_sha(current) != version):
                raise ConflictError(path)
            self._blobs[path] = content
        return blob_sha(content)

    def delete_file(self, path: str, version: VersionToken) -> None:
        path = normalize_path(path)
        with self._lock:
            if path not in self._blobs:
                raise NotFoundError(path)
            if blob_sha(self._blobs[path]) != version:
                raise ConflictError(path)
            del self._blobs[path]

    def paths(self) -> list[str]:
        """Return every stored blob path in sorted order."""
        with self._lock:
            return sorted(self._blobs)

    def _children(self, prefix: str) -> list[BlobEntry]:
        # Must hold lock
        files: dict[str, BlobEntry] = {}
        for p in self._blobs:
            if not p.startswith(prefix):
                continue
            name, sep, _rest = p[len(prefix):].partition("/")
            kind = "dir" if sep else "file"
            files[name] = BlobEntry(path=prefix + name, name=name, kind=kind)
        return [files[name] for name in sorted(files)]
