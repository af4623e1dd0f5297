"""Filesystem change watching with debounced tree refresh.

A watchdog observer reports changes under the video root on its own thread.
Events are forwarded to the event loop, filtered by extension, and coalesced
by a ``Debouncer`` so a burst of changes (a bulk copy, say) triggers a single
rescan once things go quiet.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver
from watchdog.observers.polling import PollingObserver

from ..file_tree_model import VIDEO_EXTENSIONS
from .debounce import Debouncer

logger = logging.getLogger(__name__)

DEBOUNCE_DELAY_SECONDS = 2.0
OBSERVER_JOIN_TIMEOUT_SECONDS = 5.0

# Access notifications do not change directory contents.
_IGNORED_EVENT_TYPES = frozenset({"opened", "closed_no_write"})

ObserverFactory = Callable[[], BaseObserver]


def is_relevant_change(path: str | None) -> bool:
    """Return whether a change to ``path`` can affect the video tree.

    Paths without an extension may be directories and always count, as do
    events that carry no path at all.
    """
    if not path:
        return True
    extension = os.path.splitext(os.path.basename(path))[1].lower()
    return not extension or extension in VIDEO_EXTENSIONS


class _LoopForwardingHandler(FileSystemEventHandler):
    """Hand observer-thread events to a callback on the event loop."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        notify: Callable[[str, str], None],
    ) -> None:
        super().__init__()
        self._loop = loop
        self._notify = notify

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type in _IGNORED_EVENT_TYPES:
            return
        # Parent mtime updates accompany the child event that caused them.
        if event.is_directory and event.event_type == "modified":
            return
        try:
            paths = [os.fsdecode(event.src_path)]
            dest_path = getattr(event, "dest_path", "")
            if dest_path:
                paths.append(os.fsdecode(dest_path))
            for path in paths:
                self._loop.call_soon_threadsafe(self._notify, event.event_type, path)
        except Exception:
            logger.warning("dropping filesystem event %r", event, exc_info=True)


class ChangeWatcher:
    """Watches the video root and calls ``on_change`` after each quiet burst.

    If the observer cannot be set up (unsupported or network filesystems,
    exhausted watch limits) the watcher stays disabled for the rest of the
    process; manual refreshes keep working.
    """

    def __init__(
        self,
        root: Path,
        on_change: Callable[[], object],
        *,
        delay_seconds: float = DEBOUNCE_DELAY_SECONDS,
        polling: bool = False,
        observer_factory: ObserverFactory | None = None,
    ) -> None:
        self._root = Path(root)
        self._on_change = on_change
        if observer_factory is None:
            observer_factory = PollingObserver if polling else Observer
        self._observer_factory = observer_factory
        self._observer: BaseObserver | None = None
        self._disabled = False
        self._emitter_failure_logged = False
        self._debouncer = Debouncer(delay_seconds, self._fire)

    @property
    def debouncer(self) -> Debouncer:
        return self._debouncer

    @property
    def disabled(self) -> bool:
        return self._disabled

    @property
    def active(self) -> bool:
        """Whether the observer and every emitter thread are running.

        An emitter that died after setup is reported once as a warning; its
        traceback goes to ``threading.excepthook``.
        """
        observer = self._observer
        if observer is None or not observer.is_alive():
            return False
        dead = [emitter for emitter in observer.emitters if not emitter.is_alive()]
        if dead:
            if not self._emitter_failure_logged:
                self._emitter_failure_logged = True
                logger.warning(
                    "change notifications for %s stopped; use POST /api/refresh",
                    self._root,
                )
            return False
        return True

    def start(self) -> bool:
        """Subscribe to recursive change notifications under the root."""
        if self._observer is not None:
            return True
        if self._disabled:
            return False

        handler = _LoopForwardingHandler(asyncio.get_running_loop(), self.notify)
        try:
            observer = self._observer_factory()
            observer.schedule(handler, str(self._root), recursive=True)
            observer.start()
        except Exception as exc:
            self._disabled = True
            logger.warning(
                "cannot watch %s (%s); automatic refresh disabled, use POST /api/refresh",
                self._root,
                exc,
            )
            return False

        self._observer = observer
        logger.info("watching %s for changes", self._root)
        return True

    def notify(self, event_type: str, path: str | None) -> None:
        """Handle one change notification on the loop thread."""
        if not is_relevant_change(path):
            return
        logger.info("change detected: %s %s", event_type, path or "<unknown>")
        self._debouncer.arm()

    def _fire(self) -> None:
        logger.info("changes settled, refreshing tree")
        self._on_change()

    def stop(self) -> None:
        self._debouncer.cancel()
        observer = self._observer
        self._observer = None
        if observer is None:
            return
        observer.stop()
        observer.join(timeout=OBSERVER_JOIN_TIMEOUT_SECONDS)


__all__ = [
    "DEBOUNCE_DELAY_SECONDS",
    "ChangeWatcher",
    "is_relevant_change",
]
