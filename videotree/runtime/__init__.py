"""Runtime orchestration: scan coordination, debouncing, and change watching."""

from __future__ import annotations

from .coordinator import ScanCoordinator, ScanReport, ScanRootError, count_files
from .debounce import Debouncer
from .watch import DEBOUNCE_DELAY_SECONDS, ChangeWatcher, is_relevant_change

__all__ = [
    "ScanCoordinator",
    "ScanReport",
    "ScanRootError",
    "count_files",
    "Debouncer",
    "DEBOUNCE_DELAY_SECONDS",
    "ChangeWatcher",
    "is_relevant_change",
]
