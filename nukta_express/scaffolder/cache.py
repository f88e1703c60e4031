"""Time-bounded cache of rendered template output.

Keys are ``<template_id>_<canonical JSON of the data context>``.  The JSON is
serialised with sorted keys so two contexts holding the same values in a
different insertion order share one entry.
"""

from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

DEFAULT_EXPIRY_SECONDS = 5 * 60

KEY_SEPARATOR = "_"


@dataclass(frozen=True)
class CacheEntry:
    """A rendered template plus the context it was rendered from."""

    content: str
    created_at: float
    source_data: Mapping[str, Any] = field(default_factory=dict)


def _string_keys(value: Any) -> Any:
    """Recursively turn mapping keys into strings so any keys can be sorted."""
    if isinstance(value, Mapping):
        return {str(k): _string_keys(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_string_keys(v) for v in value]
    return value


def canonical_serialize(data: Mapping[str, Any]) -> str:
    """Serialise *data* deterministically (sorted keys, compact separators)."""
    return json.dumps(
        _string_keys(data),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def make_cache_key(template_id: str, data: Mapping[str, Any]) -> str:
    return f"{template_id}{KEY_SEPARATOR}{canonical_serialize(data)}"


class RenderCache:
    """In-memory map of cache key -> ``CacheEntry`` with lazy expiry.

    Safe for concurrent ``get``/``put`` from worker threads.  The clock is
    injectable so expiry can be driven from tests.
    """

    def __init__(
        self,
        expiry_seconds: float = DEFAULT_EXPIRY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if expiry_seconds <= 0:
            raise ValueError("expiry_seconds must be positive")
        self.expiry_seconds = expiry_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    make_key = staticmethod(make_cache_key)

    def get(self, key: str) -> str | None:
        """Return cached content for *key*, or ``None`` if absent or expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and now - entry.created_at >= self.expiry_seconds:
                del self._entries[key]
                entry = None
            if entry is None:
                self.misses += 1
                return None
            self.hits += 1
            return entry.content

    def put(self, key: str, content: str, data: Mapping[str, Any] | None = None) -> None:
        entry = CacheEntry(
            content=content,
            created_at=self._clock(),
            source_data=dict(data or {}),
        )
        with self._lock:
            self._entries[key] = entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Diagnostic snapshot: entry count and per-key age in milliseconds."""
        now = self._clock()
        with self._lock:
            items = list(self._entries.items())
        return {
            "size": len(items),
            "entries": [
                {"key": key, "age_ms": (now - entry.created_at) * 1000}
                for key, entry in items
            ],
        }

    @property
    def hit_rate(self) -> float:
        """Percentage of lookups served from the cache (0 when none were made)."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return round(self.hits * 100 / total, 2)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
