"""Resilient remote calls: memoization + per-operation circuit breaker.

Every AI request goes through ``ResilientCaller``. For each invocation:

1. A fresh cache entry for the request fingerprint is returned as-is.
2. If the operation is cooling down, the fallback is cached and returned
   without touching the remote service.
3. Otherwise the remote call runs. Success is cached and closes the breaker.
4. Failure is absorbed: overload errors open the breaker for the
   operation's cooldown window, and every failure caches and returns the
   fallback.

Callers always receive a renderable value; ``with_resilience_detailed``
additionally reports whether that value came from the fallback.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Literal, TypeVar

from oracle_health.core.llm.provider import is_overload_error
from oracle_health.core.resilience.cooldown import Clock, CooldownRegistry
from oracle_health.core.resilience.policy import (
    DEFAULT_COOLDOWN_SECONDS,
    DEFAULT_POLICIES,
    ResiliencePolicy,
)
from oracle_health.core.resilience.store import (
    CacheEntry,
    CacheEntryError,
    CacheStore,
    SessionCacheStore,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

ResultSource = Literal["live", "cache", "fallback"]


@dataclass(frozen=True)
class ResilientResult(Generic[T]):
    """A resilient call outcome and where it came from."""

    value: T
    source: ResultSource
    is_fallback: bool = False

    @property
    def stale(self) -> bool:
        """True when the value is a substitute rather than a real analysis."""
        return self.is_fallback


class ResilientCaller:
    """Wraps one-shot async remote calls with caching and a cooldown breaker.

    The cache store and cooldown registry are injected so that one pair can
    be shared across every component that talks to the remote service, and
    so tests can drive time with a fake clock.

    Usage::

        caller = ResilientCaller(SessionCacheStore(), CooldownRegistry())
        text = await caller.with_resilience(
            key=fingerprint(request),
            ttl_seconds=600,
            operation="health_analysis",
            call=lambda: llm.complete(system, prompt),
            fallback="Could not fetch recommendations.",
        )
    """

    def __init__(
        self,
        store: CacheStore | None = None,
        cooldowns: CooldownRegistry | None = None,
        *,
        clock: Clock = time.time,
        policies: dict[str, ResiliencePolicy] | None = None,
        is_overload: Callable[[BaseException], bool] = is_overload_error,
    ) -> None:
        self.store = store if store is not None else SessionCacheStore()
        self.cooldowns = cooldowns if cooldowns is not None else CooldownRegistry(clock)
        self.policies = dict(policies if policies is not None else DEFAULT_POLICIES)
        self._clock = clock
        self._is_overload = is_overload
        self._in_flight: dict[str, asyncio.Future[ResilientResult[Any]]] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def with_resilience(
        self,
        key: str,
        ttl_seconds: float,
        operation: str,
        call: Callable[[], Awaitable[T]],
        fallback: T,
        *,
        cooldown_seconds: float | None = None,
    ) -> T:
        """Return a cached, live or fallback value. Never raises for remote failures."""
        result = await self.with_resilience_detailed(
            key, ttl_seconds, operation, call, fallback, cooldown_seconds=cooldown_seconds
        )
        return result.value

    async def with_resilience_detailed(
        self,
        key: str,
        ttl_seconds: float,
        operation: str,
        call: Callable[[], Awaitable[T]],
        fallback: T,
        *,
        cooldown_seconds: float | None = None,
    ) -> ResilientResult[T]:
        """Same as ``with_resilience`` but reports the value's provenance."""
        cached = self._read(key)
        if cached is not None and cached.is_fresh(self._clock(), ttl_seconds):
            logger.debug("Cache hit for %s (operation=%s)", key, operation)
            return ResilientResult(cached.data, "cache", cached.fallback)

        if self.cooldowns.is_cooling_down(operation):
            logger.info("Operation %s is cooling down; serving fallback for %s", operation, key)
            self._write(key, fallback, fallback=True)
            return ResilientResult(fallback, "fallback", True)

        if cooldown_seconds is None:
            cooldown_seconds = self._cooldown_for(operation)

        # Concurrent requests for the same fingerprint share one remote attempt.
        pending = self._in_flight.get(key)
        if pending is None:
            logger.debug("Cache miss for %s (operation=%s)", key, operation)
            pending = asyncio.ensure_future(
                self._attempt(key, operation, call, fallback, cooldown_seconds)
            )
            self._in_flight[key] = pending
        # Shielded: a caller abandoning its await does not cancel the remote call.
        return await asyncio.shield(pending)

    async def guarded(
        self,
        operation: str,
        key: str,
        call: Callable[[], Awaitable[T]],
        fallback: T,
    ) -> ResilientResult[T]:
        """Run ``call`` under the configured policy for ``operation``.

        Raises:
            ValueError: If no policy is configured for ``operation``.
        """
        policy = self.policies.get(operation)
        if policy is None:
            raise ValueError(f"No resilience policy configured for operation: {operation}")
        return await self.with_resilience_detailed(
            key,
            policy.ttl_seconds,
            operation,
            call,
            fallback,
            cooldown_seconds=policy.cooldown_seconds,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _attempt(
        self,
        key: str,
        operation: str,
        call: Callable[[], Awaitable[T]],
        fallback: T,
        cooldown_seconds: float,
    ) -> ResilientResult[T]:
        try:
            value = await call()
        except Exception as exc:
            if self._is_overload(exc):
                self.cooldowns.trip(operation, cooldown_seconds)
                logger.warning(
                    "Remote %s overloaded (%s); serving fallback for %s",
                    operation,
                    type(exc).__name__,
                    key,
                )
            else:
                logger.warning(
                    "Remote %s failed; serving fallback for %s", operation, key, exc_info=True
                )
            self._write(key, fallback, fallback=True)
            return ResilientResult(fallback, "fallback", True)
        finally:
            self._in_flight.pop(key, None)

        self._write(key, value)
        self.cooldowns.reset(operation)
        return ResilientResult(value, "live", False)

    def _cooldown_for(self, operation: str) -> float:
        policy = self.policies.get(operation)
        return policy.cooldown_seconds if policy is not None else DEFAULT_COOLDOWN_SECONDS

    def _read(self, key: str) -> CacheEntry | None:
        raw = self.store.get(key)
        if raw is None:
            return None
        try:
            return CacheEntry.decode(raw)
        except CacheEntryError as exc:
            # Treated as a miss; the next write for this key replaces it.
            logger.warning("Discarding corrupt cache entry %s: %s", key, exc)
            return None

    def _write(self, key: str, data: Any, *, fallback: bool = False) -> None:
        entry = CacheEntry(timestamp=self._clock(), data=data, fallback=fallback)
        try:
            encoded = entry.encode()
        except (TypeError, ValueError) as exc:
            logger.warning("Result for %s is not cacheable: %s", key, exc)
            return
        # A cache hit must return exactly what the live call returned
        if CacheEntry.decode(encoded).data != data:
            logger.warning("Result for %s does not survive JSON round-trip; not cached", key)
            return
        self.store.set(key, encoded)
