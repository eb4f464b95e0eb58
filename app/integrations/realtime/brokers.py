"""
Realtime Brokers

Deliver (channel, event, payload) triples to subscribed sockets, either
directly in this process or through Redis pub/sub so every worker process
receives them.
"""

import asyncio
import json
import logging
from typing import Any, Protocol, runtime_checkable

import redis.asyncio as aioredis

from .connection_manager import ConnectionManager

logger = logging.getLogger(__name__)


@runtime_checkable
class IRealtimeBroker(Protocol):
    async def publish(self, channel: str, event: str, payload: dict[str, Any]) -> None: ...


def envelope(event: str, payload: dict[str, Any]) -> dict[str, Any]:
    """Message shape sent to websocket clients."""
    return {"event": event, "data": payload}


class LocalRealtimeBroker:
    """Single-process delivery straight into the ConnectionManager."""

    def __init__(self, connections: ConnectionManager):
        self.connections = connections

    async def publish(self, channel: str, event: str, payload: dict[str, Any]) -> None:
        await self.connections.broadcast(channel, envelope(event, payload))


class RedisRealtimeBroker:
    """
    Redis pub/sub relay.

    ``publish`` pushes a JSON envelope to one shared Redis channel; the
    listener task started with ``start`` forwards every envelope it receives
    into the local ConnectionManager.
    """

    def __init__(
        self,
        client: aioredis.Redis,
        connections: ConnectionManager,
        redis_channel: str = "scheduling:realtime",
    ):
        self.client = client
        self.connections = connections
        self.redis_channel = redis_channel
        self._listener: asyncio.Task | None = None

    async def publish(self, channel: str, event: str, payload: dict[str, Any]) -> None:
        message = json.dumps({"channel": channel, "event": event, "payload": payload}, default=str)
        await self.client.publish(self.redis_channel, message)

    async def start(self) -> None:
        if self._listener is None:
            self._listener = asyncio.create_task(self._listen(), name="realtime-redis-listener")
            logger.info(f"Realtime Redis listener started on {self.redis_channel}")

    async def stop(self) -> None:
        if self._listener is not None:
            self._listener.cancel()
            try:
                await self._listener
            except asyncio.CancelledError:
                pass
            self._listener = None
        await self.client.aclose()
        logger.info("Realtime Redis listener stopped")

    async def _listen(self) -> None:
        pubsub = self.client.pubsub()
        await pubsub.subscribe(self.redis_channel)
        try:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                await self.dispatch(message["data"])
        finally:
            await pubsub.unsubscribe(self.redis_channel)
            await pubsub.aclose()

    async def dispatch(self, raw: str | bytes) -> None:
        try:
            data = json.loads(raw)
            await self.connections.broadcast(data["channel"], envelope(data["event"], data["payload"]))
        except (ValueError, KeyError) as e:
            logger.error(f"Discarding malformed realtime envelope: {e}")
