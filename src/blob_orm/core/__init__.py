"""blob-orm core package."""

from .config import ORMConfig
from .engine import RecordEngine

__all__ = ["ORMConfig", "RecordEngine"]
