"""Configuration for the record engine.

Defines all tunable parameters of the ORM layer.
"""

from __future__ import annotations

from dataclasses import dataclass

CODECS = ("json", "delimited")


@dataclass
class ORMConfig:
    """Configuration parameters for the record engine.

    Attributes:
        cache_size: Maximum number of records held in the LRU cache
        codec: Record encoding, "json" or "delimited"
        delimiter: Separator used by the delimited codec
        index_workers: Threads used to fan out per-field index updates
        maintain_indexes: Whether update/delete rewrite affected index entries
    """

    cache_size: int = 50
    codec: str = "json"
    delimiter: str = "|"
    index_workers: int = 4
    maintain_indexes: bool = True

    def __post_init__(self) -> None:
        if self.cache_size < 1:
            raise ValueError(f"cache_size must be >= 1, got {self.cache_size}")
        if self.index_workers < 1:
            raise ValueError(f"index_workers must be >= 1, got {self.index_workers}")
        if self.codec not in CODECS:
            raise ValueError(f"Unknown codec: {self.codec}")
        if len(self.delimiter) != 1:
            raise ValueError(f"delimiter must be a single character, got {self.delimiter!r}")
