"""
WebSocket Connection Manager

Maps channel names to the sockets subscribed in this process.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    In-process channel registry.

    Sends on one channel are serialized by a per-channel lock so subscribers
    see events in publish order. A channel lock is forgotten only when the
    channel has no subscribers and no broadcast is queued on it. A socket that
    fails on send is dropped from every channel once the send loop is done.
    """

    def __init__(self):
        self.active_connections: dict[str, set[WebSocket]] = defaultdict(set)
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._in_flight: dict[str, int] = defaultdict(int)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()

    def subscribe(self, websocket: WebSocket, channel: str) -> None:
        self.active_connections[channel].add(websocket)
        logger.debug(f"Socket subscribed to {channel} ({len(self.active_connections[channel])} total)")

    def unsubscribe(self, websocket: WebSocket, channel: str) -> None:
        sockets = self.active_connections.get(channel)
        if sockets is None:
            return
        sockets.discard(websocket)
        if not sockets:
            del self.active_connections[channel]
            self._forget_idle_lock(channel)

    def disconnect(self, websocket: WebSocket) -> None:
        for channel in [c for c, sockets in self.active_connections.items() if websocket in sockets]:
            self.unsubscribe(websocket, channel)

    def channels_of(self, websocket: WebSocket) -> list[str]:
        return [c for c, sockets in self.active_connections.items() if websocket in sockets]

    def subscriber_count(self, channel: str) -> int:
        return len(self.active_connections.get(channel, ()))

    async def broadcast(self, channel: str, message: dict[str, Any]) -> int:
        """
        Send a message to every socket on a channel.

        Returns:
            Number of sockets the message reached
        """
        if channel not in self.active_connections:
            return 0

        delivered = 0
        dead: list[WebSocket] = []
        self._in_flight[channel] += 1
        try:
            async with self._locks[channel]:
                for websocket in list(self.active_connections.get(channel, ())):
                    try:
                        await websocket.send_json(message)
                        delivered += 1
                    except Exception as e:
                        logger.warning(f"Dropping socket on {channel}: {e}")
                        dead.append(websocket)
        finally:
            self._in_flight[channel] -= 1
            if not self._in_flight[channel]:
                del self._in_flight[channel]

        for websocket in dead:
            self.disconnect(websocket)
        self._forget_idle_lock(channel)
        return delivered

    def _forget_idle_lock(self, channel: str) -> None:
        if channel not in self.active_connections and channel not in self._in_flight:
            self._locks.pop(channel, None)
