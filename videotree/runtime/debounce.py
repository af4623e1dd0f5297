"""Trailing-edge debounce on the asyncio event loop."""

from __future__ import annotations

import asyncio
from collections.abc import Callable


class Debouncer:
    """Run ``callback`` once ``delay_seconds`` after the last ``arm`` call.

    At most one call is pending; arming again cancels and replaces it. Must be
    used from the loop thread.
    """

    def __init__(self, delay_seconds: float, callback: Callable[[], object]) -> None:
        self.delay_seconds = delay_seconds
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def arm(self) -> None:
        """(Re)start the quiet window."""
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay_seconds, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()


__all__ = ["Debouncer"]
