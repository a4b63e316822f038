"""Common type definitions for blob-orm.

Defines fundamental types used across all components.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypedDict

# Core primitive types
Scalar = str | int | float | bool
Record = dict[str, Scalar]
RecordHash = str
VersionToken = str


class BlobEntry(TypedDict):
    """Entry of a folder or root listing."""
    path: str
    name: str
    kind: Literal["file", "dir"]


@dataclass(frozen=True)
class BlobFile:
    """Blob content together with its current version token."""
    content: str
    version: VersionToken
