"""Per-key cooldown tracking.

A cooldown key is any caller-defined string, typically the command
name plus a scope such as the user or channel id. An expired entry is
treated as absent everywhere; ``remaining`` evicts it lazily and
``sweep`` reclaims the rest in bulk.
"""

import asyncio
import math
import threading
import time
from typing import Dict, Optional

import structlog

logger = structlog.get_logger("cmdclient.cooldowns")


class CooldownTracker:
    """Maps cooldown keys to expiry timestamps (Unix seconds).

    All operations take a single lock; they are O(1) except ``sweep``.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._expiries: Dict[str, float] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._expiries)

    def apply(self, key: str, seconds: float) -> None:
        """Set (or overwrite) the cooldown for ``key`` to now + ``seconds``."""
        with self._lock:
            self._expiries[key] = time.time() + seconds

    def get(self, key: str) -> Optional[float]:
        """Return the raw expiry timestamp for ``key``, if one is stored.

        The entry may already be in the past; use ``remaining`` to
        check whether a cooldown is still in force.
        """
        with self._lock:
            return self._expiries.get(key)

    def remaining(self, key: str) -> int:
        """Whole seconds left on the cooldown for ``key``, rounded up.

        Returns 0 when there is no cooldown or it has expired; an
        expired entry is dropped.
        """
        with self._lock:
            expires_at = self._expiries.get(key)
            if expires_at is None:
                return 0
            left = math.ceil(expires_at - time.time())
            if left <= 0:
                del self._expiries[key]
                return 0
            return left

    def sweep(self) -> int:
        """Remove every entry whose expiry is at or before now.

        Returns:
            Number of entries removed.
        """
        now = time.time()
        with self._lock:
            expired = [k for k, expires_at in self._expiries.items() if expires_at <= now]
            for key in expired:
                del self._expiries[key]
        if expired:
            logger.debug("cooldowns_swept", removed=len(expired))
        return len(expired)


class CooldownSweeper:
    """Periodically sweeps a CooldownTracker on the running event loop.

    Owned by the integrator: call ``start()`` from inside a running loop
    and ``stop()`` on shutdown.

    Args:
        tracker: Tracker to sweep.
        interval: Seconds between sweeps.
    """

    def __init__(self, tracker: CooldownTracker, interval: float = 300.0):
        if interval <= 0:
            raise ValueError("Sweep interval must be positive")
        self.tracker = tracker
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the sweep loop. Requires a running event loop."""
        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run())
        logger.info("cooldown_sweeper_started", interval=self.interval)

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("cooldown_sweeper_stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.tracker.sweep()
            except Exception as e:
                logger.error("cooldown_sweep_error", error=str(e))
