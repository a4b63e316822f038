"""Filesystem blob store.

Maps repository paths onto a directory tree. Writes are atomic via
write-temp-then-rename; version tokens are git blob SHAs of file content.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from ..core.errors import BlobStoreError, ConflictError, NotFoundError
from ..core.types import BlobEntry, BlobFile, VersionToken
from .memory_store import blob_sha, normalize_path

logger = logging.getLogger(__name__)


class LocalBlobStore:
    """Directory-backed implementation of the BlobStore protocol.

    Args:
        root: Directory holding the repository (created if missing)
        placeholder_name: Name of the blob that represents an empty folder

    Invariants:
        - Writes and deletes are serialized by a lock and check versions first
        - Directories left empty by a delete are removed
    """

    def __init__(self, root: str | Path, placeholder_name: str = ".keep"):
        self.root = Path(root)
        self.placeholder_name = placeholder_name
        self._lock = threading.Lock()
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"Opened local blob store at {self.root}")

    def _resolve(self, path: str) -> Path:
        path = normalize_path(path)
        parts = path.split("/") if path else []
        if any(part in ("", ".", "..") for part in parts):
            raise BlobStoreError(f"Invalid repository path: {path!r}")
        return self.root.joinpath(*parts)

    def _relative(self, target: Path) -> str:
        return target.relative_to(self.root).as_posix()

    def folder_exists(self, path: str) -> bool:
        return self._resolve(path).is_dir()

    def create_folder(self, path: str) -> None:
        target = self._resolve(path)
        with self._lock:
            if target.is_dir():
                logger.debug(f"Folder '{path}' already exists, skipping creation")
                return
            try:
                target.mkdir(parents=True, exist_ok=True)
                (target / self.placeholder_name).write_text("", encoding="utf-8")
            except OSError as e:
                raise BlobStoreError(f"Failed to create folder '{path}': {e}") from e
        logger.debug(f"Created folder: {path}")

    def list_folder(self, path: str) -> list[BlobEntry]:
        target = self._resolve(path)
        if not target.is_dir():
            raise NotFoundError(normalize_path(path))
        return self._children(target)

    def list_root(self) -> list[BlobEntry]:
        return self._children(self.root)

    def read_file(self, path: str) -> BlobFile:
        target = self._resolve(path)
        if not target.is_file():
            raise NotFoundError(normalize_path(path))
        try:
            content = target.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise BlobStoreError(f"Failed to read '{path}': {e}") from e
        return BlobFile(content=content, version=blob_sha(content))

    def write_file(self, path: str, content: str, version: VersionToken | None = None) -> VersionToken:
        target = self._resolve(path)
        with self._lock:
            exists = target.is_file()
            if version is None and exists:
                raise ConflictError(normalize_path(path))
            if version is not None and (not exists or self._version_of(target) != version):
                raise ConflictError(normalize_path(path))

            temp_path = target.with_name(target.name + ".tmp")
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                with open(temp_path, "wb") as f:
                    f.write(content.encode("utf-8"))
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(temp_path, target)
            except OSError as e:
                raise BlobStoreError(f"Failed to write '{path}': {e}") from e
        return blob_sha(content)

    def delete_file(self, path: str, version: VersionToken) -> None:
        target = self._resolve(path)
        with self._lock:
            if not target.is_file():
                raise NotFoundError(normalize_path(path))
            if self._version_of(target) != version:
                raise ConflictError(normalize_path(path))
            try:
                target.unlink()
                self._prune(target.parent)
            except OSError as e:
                raise BlobStoreError(f"Failed to delete '{path}': {e}") from e

    def _version_of(self, target: Path) -> VersionToken:
        try:
            return blob_sha(target.read_bytes().decode("utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise BlobStoreError(f"Failed to read '{self._relative(target)}': {e}") from e

    def _prune(self, directory: Path) -> None:
        """Remove empty directories up to (not including) the root."""
        while directory != self.root and not any(directory.iterdir()):
            directory.rmdir()
            directory = directory.parent

    def _children(self, directory: Path) -> list[BlobEntry]:
        try:
            children = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise BlobStoreError(f"Failed to list '{directory}': {e}") from e
        return [
            BlobEntry(
                path=self._relative(child),
                name=child.name,
                kind="dir" if child.is_dir() else "file",
            )
            for child in children
            if not child.name.endswith(".tmp")
        ]
