from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """WebSocket subscribers grouped by store."""

    def __init__(self) -> None:
        self._connections: dict[str, set[WebSocket]] = defaultdict(set)
        self._socket_to_store: dict[WebSocket, str] = {}
        self._lock = asyncio.Lock()

    async def register(self, websocket: WebSocket, store_id: str) -> None:
        await websocket.accept()
        async with self._lock:
            self._connections[store_id].add(websocket)
            self._socket_to_store[websocket] = store_id
        logger.info("ws_client_connected", extra={"store_id": store_id})

    async def unregister(self, websocket: WebSocket) -> None:
        async with self._lock:
            store_id = self._socket_to_store.pop(websocket, None)
            if store_id is None:
                return
            sockets = self._connections.get(store_id)
            if sockets is not None:
                sockets.discard(websocket)
                if not sockets:
                    self._connections.pop(store_id, None)
        logger.info("ws_client_disconnected", extra={"store_id": store_id})

    def subscriber_count(self, store_id: str) -> int:
        return len(self._connections.get(store_id, ()))

    async def broadcast(self, store_id: str, message_json_str: str) -> None:
        async with self._lock:
            targets = list(self._connections.get(store_id, set()))

        stale: list[WebSocket] = []
        for websocket in targets:
            try:
                await websocket.send_text(message_json_str)
            except Exception:
                stale.append(websocket)

        for websocket in stale:
            await self.unregister(websocket)
