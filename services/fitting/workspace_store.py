"""In-memory registry of fitting canvases, one InputController per canvas id."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from services.fitting.input_controller import InputController

LOGGER = logging.getLogger(__name__)


@dataclass
class _Workspace:
    controller: InputController
    last_active_at: float


class FittingWorkspaceStore:
    """Get-or-create access to per-canvas controllers with idle expiry."""

    def __init__(self, factory: Callable[[], InputController], clock: Callable[[], float] = time.time) -> None:
        self._factory = factory
        self._clock = clock
        self._workspaces: Dict[str, _Workspace] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._workspaces)

    def __contains__(self, canvas_id: object) -> bool:
        with self._lock:
            return canvas_id in self._workspaces

    def get_or_create(self, canvas_id: str) -> InputController:
        now = self._clock()
        with self._lock:
            workspace = self._workspaces.get(canvas_id)
            if workspace is None:
                workspace = _Workspace(controller=self._factory(), last_active_at=now)
                self._workspaces[canvas_id] = workspace
                LOGGER.info("Fitting workspace created: %s", canvas_id)
            else:
                workspace.last_active_at = now
            return workspace.controller

    def prune_idle(self, ttl_seconds: float, now: Optional[float] = None) -> List[str]:
        now = self._clock() if now is None else now
        with self._lock:
            expired = [
                canvas_id
                for canvas_id, workspace in self._workspaces.items()
                if now - workspace.last_active_at > ttl_seconds
            ]
            for canvas_id in expired:
                del self._workspaces[canvas_id]
        return expired
