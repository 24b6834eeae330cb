from __future__ import annotations

from alertbridge.models.base import Base
from alertbridge.models.kv_entry import KVEntry

__all__ = [
    "Base",
    "KVEntry",
]
