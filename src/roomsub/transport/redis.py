"""
Redis Pub/Sub transport.

Delivers room notifications published by the backend on a Redis channel named
after the room id.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from typing import Any, Dict, Optional, Set

import redis.asyncio as aioredis

from .base import MessageHandler

logger = logging.getLogger(__name__)


class RedisTransport:
    """
    Transport backed by a single Redis pub/sub connection.

    Usage:
        transport = RedisTransport("redis://redis:6379")
        await transport.start()

        transport.on("8fd7c1...", handle_notification)
        ...
        transport.off("8fd7c1...")

        await transport.stop()
    """

    def __init__(
        self,
        redis_url: str,
        client: Optional[aioredis.Redis] = None,
        idle_interval: float = 0.1,
    ):
        """
        Initialize transport.

        Args:
            redis_url: Redis connection URL
            client: Existing Redis connection (optional)
            idle_interval: Seconds between checks while no channel is subscribed
        """
        self.redis_url = redis_url
        self._redis = client
        self._pubsub: Optional[aioredis.client.PubSub] = None
        self._handlers: Dict[str, MessageHandler] = {}
        self._listener_task: Optional[asyncio.Task] = None
        self._pending: Set[asyncio.Task] = set()
        self._running = False
        self.idle_interval = idle_interval

    def on(self, channel: str, handler: MessageHandler) -> None:
        """Route messages of channel to handler, replacing any previous one."""
        is_new = channel not in self._handlers
        self._handlers[channel] = handler
        logger.debug(f"Handler bound to channel: {channel}")
        if is_new and self._running:
            self._schedule(self._pubsub.subscribe(channel))

    def off(self, channel: str) -> None:
        """Stop routing messages of channel."""
        if self._handlers.pop(channel, None) is None:
            return
        logger.debug(f"Handler removed from channel: {channel}")
        if self._running:
            self._schedule(self._pubsub.unsubscribe(channel))

    @property
    def channels(self) -> list[str]:
        return list(self._handlers.keys())

    def _schedule(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def start(self):
        """Connect to Redis and start listening"""
        if self._running:
            logger.warning("Redis transport already running")
            return

        if self._redis is None:
            logger.info(f"Redis transport connecting to: {self.redis_url}")
            self._redis = await aioredis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True
            )
        self._pubsub = self._redis.pubsub()

        if self._handlers:
            await self._pubsub.subscribe(*self._handlers.keys())

        self._running = True
        self._listener_task = asyncio.create_task(self._listen())
        logger.info("Redis transport started")

    async def stop(self):
        """Stop listening and close the connection"""
        self._running = False

        if self._listener_task:
            self._listener_task.cancel()
            try:
                await self._listener_task
            except asyncio.CancelledError:
                pass
            self._listener_task = None

        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

        if self._pubsub:
            await self._pubsub.close()
            self._pubsub = None
        if self._redis:
            await self._redis.close()
            self._redis = None

        logger.info("Redis transport stopped")

    async def _listen(self):
        """Poll the pub/sub connection until stopped"""
        logger.info("Redis listener started")
        while self._running:
            # get_message raises until at least one channel is subscribed
            if not self._pubsub.subscribed:
                await asyncio.sleep(self.idle_interval)
                continue

            try:
                message = await self._pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
            except asyncio.CancelledError:
                logger.info("Redis listener cancelled")
                raise
            except Exception as e:
                logger.error(f"Reading from Redis failed: {e}", exc_info=True)
                await asyncio.sleep(1)
                continue

            if message and message["type"] == "message":
                await self._handle_message(message["channel"], message["data"])

    async def _handle_message(self, channel: str, raw_data: Any):
        """Decode one room message and hand it to the room's handler"""
        handler = self._handlers.get(channel)
        if handler is None:
            logger.debug(f"No handler for channel {channel}, message dropped")
            return

        if isinstance(raw_data, (str, bytes)):
            try:
                data = json.loads(raw_data)
            except ValueError:
                logger.warning(f"Undecodable message on {channel}: {raw_data[:100]!r}")
                return
        else:
            data = raw_data

        try:
            result = handler(data)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Room handler for {channel} failed: {e}", exc_info=True)
