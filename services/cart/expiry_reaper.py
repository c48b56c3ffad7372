"""Periodic eviction of idle cart sessions and fitting workspaces."""

import asyncio
import logging
import time
from typing import Callable, List, Optional, Protocol, Sequence

LOGGER = logging.getLogger(__name__)


class IdleStore(Protocol):
    def prune_idle(self, ttl_seconds: float, now: Optional[float] = None) -> List[str]:
        ...


class ExpiryReaper:
    """Remove entries whose last activity is older than the TTL."""

    def __init__(
        self,
        stores: Sequence[IdleStore],
        ttl_seconds: int = 30 * 60,
        interval_seconds: int = 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Args:
            stores: Stores exposing `prune_idle(ttl_seconds, now)`.
            ttl_seconds: Idle time after which an entry is evicted.
            interval_seconds: Seconds to sleep between sweeps.
            clock: Time source shared with the stores, in epoch seconds.
        """
        self._stores = list(stores)
        self.ttl_seconds = ttl_seconds
        self.interval_seconds = interval_seconds
        self._clock = clock

    def sweep_once(self) -> int:
        """Run a single sweep over every store and return how many entries were evicted."""
        now = self._clock()
        evicted = 0
        for store in self._stores:
            for key in store.prune_idle(self.ttl_seconds, now=now):
                LOGGER.info("Expired %s from %s", key, type(store).__name__)
                evicted += 1
        return evicted

    async def run_periodic(self) -> None:
        """Sweep every `interval_seconds` until cancelled."""
        while True:
            try:
                await asyncio.sleep(self.interval_seconds)
                self.sweep_once()
            except asyncio.CancelledError:
                break
            except Exception:
                # Keep the loop alive; the next tick retries.
                LOGGER.exception("Expiry sweep failed")
