"""
websocket_manager.py — Pushes session snapshots to connected WebSocket clients.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, List, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages WebSocket connections and broadcasts."""

    def __init__(self):
        self._connections: List[WebSocket] = []
        self._pending: Set[asyncio.Task] = set()

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self._connections.append(websocket)
        logger.info("WebSocket connected (%d open)", len(self._connections))

    def disconnect(self, websocket: WebSocket):
        if websocket in self._connections:
            self._connections.remove(websocket)
            logger.info("WebSocket closed (%d open)", len(self._connections))

    async def broadcast(self, message: dict):
        disconnected = []
        for ws in list(self._connections):
            try:
                await ws.send_json(message)
            except Exception:
                disconnected.append(ws)
        for ws in disconnected:
            self.disconnect(ws)

    def publish(self, message: dict):
        """
        Schedules a broadcast from synchronous code running on the event loop
        (session listeners are plain callables invoked inside async routes).
        """
        task = asyncio.get_running_loop().create_task(self.broadcast(message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    @staticmethod
    def make_event(event_type: str, data: Any = None) -> dict:
        return {
            "type": event_type,
            "data": data or {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
