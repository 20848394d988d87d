"""
Synchronization engine interface for HiveMind Workspace.

Sessions only need cursor teardown from the real-time sync engine. The
CursorTracker below keeps cursor positions in memory and is what sessions
use when no other engine is supplied.
"""

import threading
import logging
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class SyncEngine(Protocol):
    """What a session requires from the sync engine."""

    def remove_cursor(self, participant_id: str) -> None:
        ...


class CursorTracker:
    """In-memory cursor registry for one session."""

    def __init__(self, host_id: str):
        self.host_id = host_id
        self._cursors: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.RLock()

    def update_cursor(self, participant_id: str, position: Dict[str, Any]) -> None:
        with self._lock:
            self._cursors[participant_id] = dict(position)

    def get_cursor(self, participant_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            cursor = self._cursors.get(participant_id)
            return dict(cursor) if cursor is not None else None

    def get_cursors(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return {pid: dict(pos) for pid, pos in self._cursors.items()}

    def remove_cursor(self, participant_id: str) -> None:
        with self._lock:
            if self._cursors.pop(participant_id, None) is not None:
                logger.debug(f"Removed cursor for {participant_id}")
