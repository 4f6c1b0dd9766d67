"""Session-scoped key/value cache for remote call results.

Entries are serialized to JSON strings so any string store (in-memory dict,
browser-style session storage, Redis) can back the cache. The store itself
never expires anything: freshness is decided by the reader against a TTL.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class CacheEntryError(Exception):
    """Raised when a stored entry cannot be decoded."""


@dataclass(frozen=True)
class CacheEntry:
    """A cached result with its write time (wall-clock seconds)."""

    timestamp: float
    data: Any
    fallback: bool = False

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        return now - self.timestamp < ttl_seconds

    def encode(self) -> str:
        """Serialize to compact JSON.

        Raises:
            TypeError / ValueError: If ``data`` is not JSON-serializable.
        """
        return json.dumps(
            {"timestamp": self.timestamp, "data": self.data, "fallback": self.fallback},
            separators=(",", ":"),
        )

    @classmethod
    def decode(cls, raw: str) -> CacheEntry:
        """Parse a stored entry.

        Raises:
            CacheEntryError: If the payload is not a well-formed entry.
        """
        try:
            parsed = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as exc:
            raise CacheEntryError(f"Invalid JSON in cache entry: {exc}") from exc

        if not isinstance(parsed, dict) or "data" not in parsed:
            raise CacheEntryError("Cache entry is missing 'data'")
        timestamp = parsed.get("timestamp")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise CacheEntryError(f"Invalid cache timestamp: {timestamp!r}")

        return cls(
            timestamp=float(timestamp),
            data=parsed["data"],
            fallback=bool(parsed.get("fallback", False)),
        )


@runtime_checkable
class CacheStore(Protocol):
    """Synchronous string store. No transactions, no range queries."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class SessionCacheStore:
    """In-memory store that lives for one client session.

    Created empty at startup and discarded with the process; nothing is
    written to durable storage.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data
