"""Per-operation cooldown markers (the circuit breaker state).

One marker per remote operation, never per request fingerprint: every
request to an operation shares the same backend capacity.

    closed --overload--> open --(cooldown expires, next attempt)--> closed
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Literal

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
BreakerState = Literal["closed", "open"]


class CooldownRegistry:
    """Tracks until when remote calls for each operation are suppressed.

    Usage::

        cooldowns = CooldownRegistry()
        cooldowns.trip("health_analysis", 300)
        cooldowns.is_cooling_down("health_analysis")  # True for 5 minutes
        cooldowns.reset("health_analysis")
    """

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock
        self._until: dict[str, float] = {}

    def cooldown_until(self, operation: str) -> float | None:
        """Wall-clock instant until which ``operation`` is suppressed, if any."""
        return self._until.get(operation)

    def is_cooling_down(self, operation: str) -> bool:
        until = self._until.get(operation)
        return until is not None and self._clock() < until

    def state(self, operation: str) -> BreakerState:
        return "open" if self.is_cooling_down(operation) else "closed"

    def trip(self, operation: str, duration_seconds: float) -> float:
        """Open the breaker for ``duration_seconds`` (flat window, no backoff)."""
        until = self._clock() + duration_seconds
        self._until[operation] = until
        logger.warning(
            "Remote operation %s overloaded; suppressing calls for %.0fs",
            operation,
            duration_seconds,
        )
        return until

    def reset(self, operation: str) -> None:
        """Clear the marker; a no-op when none is set."""
        if self._until.pop(operation, None) is not None:
            logger.info("Cooldown cleared for %s", operation)

    def active(self) -> dict[str, float]:
        """Operations currently cooling down, with their expiry instants."""
        now = self._clock()
        return {op: until for op, until in self._until.items() if now < until}
