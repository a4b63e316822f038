"""Record addressing.

A record's address is the MD5 hex digest of its hash-field values joined by '-'.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping, Sequence
from typing import Any

from ..core.types import RecordHash


def stringify_value(value: Any) -> str:
    """Render a scalar the way it appears in addresses and index keys.

    Booleans become 'true'/'false' and integral floats lose their
    fractional part, so 25 and 25.0 address the same record.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def record_hash(record: Mapping[str, Any], hash_fields: Sequence[str]) -> RecordHash:
    """Return the deterministic address of record.

    Hash fields absent from the record (or None) are skipped.
    """
    parts = [
        stringify_value(record[field])
        for field in hash_fields
        if record.get(field) is not None
    ]
    return hashlib.md5("-".join(parts).encode("utf-8")).hexdigest()
