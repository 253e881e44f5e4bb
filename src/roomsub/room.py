"""
Subscription room.

A room is the client side of one logical subscription: the caller provides
matching filters, the backend assigns a room id, and every document change or
pub/sub message matching the filters is delivered on the transport channel
named after that room id.

Usage:
    room = client.room("users", RoomOptions(listening_to_connections=True))

    def on_notification(error, data):
        if error:
            print(f"Notification error: {error}")
        else:
            print(f"Notification: {data}")

    room.renew({"term": {"status": "online"}}, on_notification)
    await room.settled()

    room.count(lambda error, count: print(count))
    room.unsubscribe()

All operations must be called from a running event loop. Calls made while a
subscribe request is in flight are queued and replayed in order once it
completes.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Deque, Optional, Set

from pydantic import ValidationError

from .core.commands import Command, Count, Renew, ResponseCallback, Unsubscribe
from .core.errors import ConfigurationError, NotificationError, ProtocolError, SubscriptionError
from .core.models import CountResult, Notification, SubscribeResult
from .core.state import IDLE, Active, Phase, Subscribing
from .listeners import RoomEvent

if TYPE_CHECKING:
    from .client import RoomClient

logger = logging.getLogger(__name__)

CONTROLLER = "subscribe"


@dataclass
class RoomOptions:
    """
    Per-room subscription options.

    listening_to_connections / listening_to_disconnections decide whether
    peer lifecycle notifications reach the room callback. subscribe_to_self
    is forwarded to the backend as-is.
    """
    listening_to_connections: bool = False
    listening_to_disconnections: bool = False
    subscribe_to_self: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)


def _require_callback(operation: str, callback: Any) -> None:
    if not callable(callback):
        raise ConfigurationError(f"{operation}: a callback argument is required")


class SubscriptionRoom:
    """
    State machine for a single subscription.

    Phases:
    - Idle: no subscription, nothing in flight
    - Subscribing: subscribe request sent, response not processed yet
    - Active: subscribed, notification handler bound under room_id
    """

    def __init__(
        self,
        client: RoomClient,
        collection: str,
        options: Optional[RoomOptions] = None,
    ):
        """
        Initialize room.

        Args:
            client: Owning client (gateway, transport, global listeners, headers)
            collection: Collection the filters apply to
            options: Subscription options

        Raises:
            ConfigurationError: If client or collection is missing
        """
        if client is None or not collection:
            raise ConfigurationError("SubscriptionRoom: missing parameters")

        client.ensure_valid()
        options = options or RoomOptions()

        self._client = client
        self._collection = collection

        self.filters: Any = None
        self.headers: dict[str, Any] = copy.deepcopy(client.headers)
        self.metadata: dict[str, Any] = copy.deepcopy(options.metadata)
        self.listening_to_connections = options.listening_to_connections
        self.listening_to_disconnections = options.listening_to_disconnections
        self.subscribe_to_self = options.subscribe_to_self

        self._phase: Phase = IDLE
        self._queue: Deque[Command] = deque()
        self._idle = asyncio.Event()
        self._idle.set()
        self._failure: Optional[SubscriptionError] = None
        self._pending: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def client(self) -> RoomClient:
        return self._client

    @property
    def collection(self) -> str:
        return self._collection

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def subscribing(self) -> bool:
        return isinstance(self._phase, Subscribing)

    @property
    def room_id(self) -> Optional[str]:
        return self._phase.room_id if isinstance(self._phase, Active) else None

    @property
    def subscription_id(self) -> Optional[str]:
        return self._phase.subscription_id if isinstance(self._phase, Active) else None

    @property
    def subscription_timestamp(self) -> Optional[float]:
        return self._phase.since if isinstance(self._phase, Active) else None

    @property
    def queue(self) -> list[Command]:
        """Snapshot of commands waiting for the in-flight subscribe."""
        return list(self._queue)

    def _set_phase(self, phase: Phase) -> None:
        self._phase = phase
        if isinstance(phase, Subscribing):
            self._idle.clear()
        else:
            self._idle.set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def renew(self, filters: Any, callback: ResponseCallback) -> SubscriptionRoom:
        """
        Replace the subscription with one matching filters.

        Any existing subscription is dropped first. callback is called with
        (error, data) for each notification received by the new subscription.
        """
        _require_callback("SubscriptionRoom.renew", callback)
        return self.apply(Renew(filters=filters, callback=callback))

    def count(self, callback: ResponseCallback) -> SubscriptionRoom:
        """Ask the backend how many subscriptions share this room. callback gets (error, count)."""
        _require_callback("SubscriptionRoom.count", callback)
        return self.apply(Count(callback=callback))

    def unsubscribe(self) -> SubscriptionRoom:
        """Drop the current subscription, if any."""
        return self.apply(Unsubscribe())

    def apply(self, command: Command) -> SubscriptionRoom:
        """Run command now, or queue it while a subscribe request is in flight."""
        if self.subscribing:
            self._queue.append(command)
            logger.debug(f"Queued {type(command).__name__} on {self._collection} ({len(self._queue)} pending)")
            return self

        if isinstance(command, Renew):
            self._renew(command)
        elif isinstance(command, Count):
            self._count(command)
        elif isinstance(command, Unsubscribe):
            self._unsubscribe()
        else:
            raise TypeError(f"Unknown room command: {command!r}")

        return self

    async def settled(self) -> SubscriptionRoom:
        """
        Wait until no subscribe request is in flight.

        Raises:
            SubscriptionError: If the last renew failed (reported once)
        """
        while self.subscribing:
            await self._idle.wait()

        if self._failure is not None:
            failure, self._failure = self._failure, None
            raise failure

        return self

    async def close(self) -> None:
        """Unsubscribe and wait for outstanding requests."""
        while self.subscribing:
            await self._idle.wait()

        self.unsubscribe()

        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    # ------------------------------------------------------------------
    # Subscribe / unsubscribe
    # ------------------------------------------------------------------

    def _renew(self, command: Renew) -> None:
        self._unsubscribe()
        self.filters = command.filters
        self._failure = None

        request = self._client.add_headers(
            {
                "body": command.filters,
                "subscribeToSelf": self.subscribe_to_self,
                "metadata": self.metadata,
            },
            self.headers,
        )

        self._set_phase(Subscribing(since=time.time()))
        self._spawn(self._subscribe(command, request))

    async def _subscribe(self, command: Renew, request: dict[str, Any]) -> None:
        try:
            result = await self._client.gateway.query(self._collection, CONTROLLER, "on", request)
            subscribed = SubscribeResult.model_validate(result)
        except asyncio.CancelledError:
            self._set_phase(IDLE)
            self._queue.clear()
            raise
        except Exception as e:
            logger.error(f"Subscription to {self._collection} failed: {e}", exc_info=True)
            self._fail(command, e)
            return

        self._set_phase(Active(
            room_id=subscribed.room_id,
            subscription_id=subscribed.room_name,
            since=time.time(),
        ))
        self._client.transport.on(subscribed.room_id, self._notification_handler(command.callback))
        logger.info(f"Subscribed to {self._collection}: room {subscribed.room_id}")

        self._dequeue()

    def _fail(self, command: Renew, error: Exception) -> None:
        """Return to Idle and reject everything queued behind the failed renew."""
        failure = SubscriptionError(self._collection, str(error))
        failure.__cause__ = error

        self._set_phase(IDLE)
        self._failure = failure

        rejected, self._queue = self._queue, deque()

        self._invoke(command.callback, failure, None)
        for queued in rejected:
            if isinstance(queued, (Renew, Count)):
                self._invoke(queued.callback, failure, None)

    def _dequeue(self) -> None:
        """Replay queued commands in arrival order."""
        pending, self._queue = self._queue, deque()
        for command in pending:
            self.apply(command)

    def _unsubscribe(self) -> None:
        phase = self._phase
        if not isinstance(phase, Active):
            return

        request = self._client.add_headers({"body": {"requestId": phase.subscription_id}}, self.headers)
        self._spawn(self._send_unsubscribe(request, phase.room_id))
        self._client.transport.off(phase.room_id)
        self._set_phase(IDLE)
        logger.info(f"Unsubscribed from {self._collection}: room {phase.room_id}")

    async def _send_unsubscribe(self, request: dict[str, Any], room_id: str) -> None:
        # local state is already cleared
        try:
            await self._client.gateway.query(self._collection, CONTROLLER, "off", request)
        except Exception as e:
            logger.debug(f"Ignoring unsubscribe failure for room {room_id}: {e}")

    # ------------------------------------------------------------------
    # Count
    # ------------------------------------------------------------------

    def _count(self, command: Count) -> None:
        request = self._client.add_headers({"body": {"roomId": self.room_id}}, self.headers)
        self._spawn(self._send_count(request, command.callback))

    async def _send_count(self, request: dict[str, Any], callback: ResponseCallback) -> None:
        try:
            result = await self._client.gateway.query(self._collection, CONTROLLER, "count", request)
            count = CountResult.model_validate(result).count
        except ProtocolError as e:
            self._invoke(callback, e, None)
            return
        except ValidationError as e:
            self._invoke(callback, ProtocolError(CONTROLLER, "count", f"malformed response: {e}"), None)
            return
        except Exception as e:
            logger.error(f"Count on {self._collection} failed: {e}", exc_info=True)
            error = ProtocolError(CONTROLLER, "count", str(e))
            error.__cause__ = e
            self._invoke(callback, error, None)
            return

        self._invoke(callback, None, count)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def _notification_handler(self, callback: ResponseCallback) -> Callable[[dict[str, Any]], None]:
        def handle(message: dict[str, Any]) -> None:
            self._dispatch(message, callback)
        return handle

    def _dispatch(self, message: dict[str, Any], callback: ResponseCallback) -> None:
        """Classify an inbound message and route it to callback and/or global listeners."""
        try:
            notification = Notification.model_validate(message)
        except ValidationError as e:
            logger.warning(f"Dropping malformed notification on room {self.room_id}: {e}")
            return

        if notification.error is not None:
            self._invoke(callback, NotificationError(notification.error, self.room_id), None)
            return

        action = notification.action
        if action == "on":
            event = RoomEvent.SUBSCRIBED
            listening = self.listening_to_connections
        elif action == "off":
            event = RoomEvent.UNSUBSCRIBED
            listening = self.listening_to_disconnections
        else:
            self._invoke(callback, None, notification.result)
            return

        listeners = self._client.listeners
        if not listening and not listeners.has_listeners(event):
            return

        result = notification.result

        def on_count(error: Optional[Exception], count: Any) -> None:
            if error is not None:
                if listening:
                    self._invoke(callback, error, None)
                return

            result["count"] = count
            if listening:
                self._invoke(callback, None, result)
            listeners.emit(event, self.subscription_id, result)

        self.count(on_count)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    @staticmethod
    def _invoke(callback: ResponseCallback, error: Optional[Exception], data: Any) -> None:
        try:
            callback(error, data)
        except Exception as e:
            logger.error(f"Error in room callback: {e}", exc_info=True)

    def __repr__(self) -> str:
        return f"SubscriptionRoom(collection={self._collection!r}, phase={self._phase!r})"
