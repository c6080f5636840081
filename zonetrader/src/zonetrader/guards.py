"""
Non-blocking in-flight guards.

An :class:`InFlightGuard` marks that an asynchronous action (an order
submission, a balance refresh) is outstanding.  Callers use
:meth:`try_acquire` and give up when it returns False; nothing ever
waits on a guard.  All guard operations are synchronous, so on a single
event loop an acquire can never interleave with another coroutine.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

logger = logging.getLogger(__name__)


class InFlightGuard:
    """A try-lock flag with no waiting and no re-entrance."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._held = False
        self._acquired_at: Optional[float] = None

    @property
    def held(self) -> bool:
        return self._held

    @property
    def held_for(self) -> float:
        """Seconds since the guard was taken, 0.0 when free."""
        if self._acquired_at is None:
            return 0.0
        return time.monotonic() - self._acquired_at

    def try_acquire(self) -> bool:
        """Take the guard if it is free; return False without side effects otherwise."""
        if self._held:
            logger.debug("%s guard already held for %.1fs", self.name, self.held_for)
            return False
        self._held = True
        self._acquired_at = time.monotonic()
        return True

    def release(self) -> None:
        self._held = False
        self._acquired_at = None

    def __repr__(self) -> str:
        return f"InFlightGuard({self.name!r}, held={self._held})"
