"""Protocol definition for the Blob Store Port."""

from __future__ import annotations

from typing import Protocol

from ..core.types import BlobEntry, BlobFile, VersionToken


class BlobStore(Protocol):
    """Versioned, hierarchical blob storage consumed by the record engine.

    Paths are '/'-separated and relative to the repository root.
    """

    def folder_exists(self, path: str) -> bool:
        """Return True if a folder exists at path.

        Raises BlobStoreError for failures other than "not found".
        """
        ...

    def create_folder(self, path: str) -> None:
        """Create a folder by writing a placeholder blob (idempotent)."""
        ...

    def list_folder(self, path: str) -> list[BlobEntry]:
        """Return the immediate children of a folder.

        Raises NotFoundError if the folder does not exist.
        """
        ...

    def list_root(self) -> list[BlobEntry]:
        """Return the top-level entries of the repository."""
        ...

    def read_file(self, path: str) -> BlobFile:
        """Return content and version token of a blob.

        Raises NotFoundError if the blob does not exist.
        """
        ...

    def write_file(self, path: str, content: str, version: VersionToken | None = None) -> VersionToken:
        """Create (version is None) or update-if-matches a blob.

        Returns:
            Version token of the written content

        Invariants:
            - Creating over an existing blob raises ConflictError
            - Updating with a stale or vanished version raises ConflictError
        """
        ...

    def delete_file(self, path: str, version: VersionToken) -> None:
        """Delete a blob whose current version matches.

        Raises NotFoundError if absent, ConflictError if version is stale.
        """
        ...
