"""A small in-memory cache whose entries expire after a fixed time."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CacheEntry:
    value: Any
    stored_at: datetime


@dataclass
class Cache:
    store_time: timedelta = timedelta(minutes=10)
    entries: dict[str, CacheEntry] = field(default_factory=dict)

    def _fresh(self, key: str) -> CacheEntry | None:
        entry = self.entries.get(key)
        if entry is None or entry.stored_at + self.store_time < _now():
            return None
        return entry

    def get(self, key: str) -> Any:
        """Return the stored value, or None when missing or expired."""
        entry = self._fresh(key)
        return None if entry is None else entry.value

    def set(self, key: str, value: Any) -> None:
        self.entries[key] = CacheEntry(value=value, stored_at=_now())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._fresh(key) is not None