"""Per-command invocation counters. Process lifetime, never reset."""

import threading
from collections import Counter
from typing import Dict


class UsageCounter:
    """Thread-safe map of command name to invocation count."""

    def __init__(self):
        self._lock = threading.Lock()
        self._uses: Counter = Counter()

    def increment(self, name: str) -> int:
        """Add one use of ``name`` and return the new count."""
        with self._lock:
            self._uses[name] += 1
            return self._uses[name]

    def get(self, name: str) -> int:
        with self._lock:
            return self._uses.get(name, 0)

    def snapshot(self) -> Dict[str, int]:
        """Copy of all counts."""
        with self._lock:
            return dict(self._uses)
