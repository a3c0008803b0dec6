"""Fan-out of live notification events to connected websocket sessions."""

from __future__ import annotations

import asyncio
import copy
import logging
import threading
from collections import defaultdict
from enum import Enum
from typing import Any, DefaultDict
from uuid import uuid4

import anyio

from app.domain.entities import Owner, OwnerKind

logger = logging.getLogger(__name__)

_STOP = object()


class HubState(str, Enum):
    """Lifecycle of a :class:`LiveUpdateHub`."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class Subscription:
    """Handle for one live session listening to a single owner.

    Iterate it with ``async for`` to receive messages; iteration ends once the
    hub closes the subscription and its buffered messages are consumed.
    """

    def __init__(self, owner: Owner, buffer_size: int) -> None:
        self.owner = owner
        self.id = uuid4().hex
        self._send, self._receive = anyio.create_memory_object_stream(
            max_buffer_size=buffer_size
        )
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def offer(self, message: dict[str, Any]) -> bool:
        """Buffer ``message`` without waiting; ``False`` when full or closed."""

        if self._closed:
            return False
        try:
            self._send.send_nowait(message)
        except (anyio.WouldBlock, anyio.BrokenResourceError, anyio.ClosedResourceError):
            return False
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._send.close()

    async def get(self) -> dict[str, Any] | None:
        """Return the next message, or ``None`` once the subscription is closed."""

        try:
            return await self._receive.receive()
        except anyio.EndOfStream:
            self._receive.close()
            return None
        except anyio.ClosedResourceError:
            return None

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> dict[str, Any]:
        message = await self.get()
        if message is None:
            raise StopAsyncIteration
        return message


class LiveUpdateHub:
    """Deliver messages to every live subscription of an owner.

    ``register``, ``unregister``, ``publish`` and ``publish_to_kind`` only
    enqueue a command and may be called from any thread. A single worker task
    consumes the commands in order and is the only code that touches the
    subscriber table, so messages for one owner arrive in the order they were
    published.

    Delivery is best effort: before :meth:`start` and after :meth:`stop` these
    calls are silently ignored, and a subscriber whose buffer is full is
    closed instead of slowing anyone else down.
    """

    def __init__(self, *, buffer_size: int = 100) -> None:
        if buffer_size < 1:
            raise ValueError("buffer_size must be positive")
        self._buffer_size = buffer_size
        self._state = HubState.IDLE
        self._state_lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._commands: asyncio.Queue[Any] | None = None
        self._worker: asyncio.Task[None] | None = None
        self._subscribers: DefaultDict[Owner, dict[str, Subscription]] = defaultdict(dict)

    @property
    def state(self) -> HubState:
        return self._state

    @property
    def connection_count(self) -> int:
        return sum(len(subscriptions) for subscriptions in list(self._subscribers.values()))

    def is_connected(self, owner: Owner) -> bool:
        return bool(self._subscribers.get(owner))

    async def start(self) -> None:
        """Start the worker on the running event loop."""

        with self._state_lock:
            if self._state is not HubState.IDLE:
                raise RuntimeError(f"Cannot start a hub that is {self._state.value}")
            self._loop = asyncio.get_running_loop()
            self._commands = asyncio.Queue()
            self._state = HubState.RUNNING
        self._worker = asyncio.create_task(self._run(), name="live-update-hub")
        logger.info("Live update hub started")

    async def stop(self) -> None:
        """Drain queued commands, close every subscription and refuse new work."""

        with self._state_lock:
            was_running = self._state is HubState.RUNNING
            self._state = HubState.STOPPED
            if was_running:
                self._loop.call_soon_threadsafe(self._commands.put_nowait, _STOP)
        if was_running and self._worker is not None:
            await self._worker
            logger.info("Live update hub stopped")

    def register(self, owner: Owner) -> Subscription:
        """Return a subscription that will receive messages published to ``owner``.

        When the hub is not running the subscription comes back already closed.
        """

        subscription = Subscription(owner, self._buffer_size)
        if not self._submit(("register", subscription)):
            subscription.close()
        return subscription

    def unregister(self, subscription: Subscription) -> None:
        self._submit(("unregister", subscription))

    def publish(self, owner: Owner, message: dict[str, Any]) -> None:
        """Schedule ``message`` for every subscription of ``owner``."""

        self._submit(("publish", owner, copy.deepcopy(message)))

    def publish_to_kind(self, owner_kind: OwnerKind, message: dict[str, Any]) -> None:
        """Schedule ``message`` for every connected owner of ``owner_kind``."""

        self._submit(("broadcast", OwnerKind(owner_kind), copy.deepcopy(message)))

    def _submit(self, command: tuple[Any, ...]) -> bool:
        with self._state_lock:
            if self._state is not HubState.RUNNING:
                logger.debug("Live update hub is %s, ignoring %s", self._state.value, command[0])
                return False
            try:
                self._loop.call_soon_threadsafe(self._commands.put_nowait, command)
            except RuntimeError:
                logger.warning("Live update hub loop is closed, ignoring %s", command[0])
                return False
        return True

    async def _run(self) -> None:
        try:
            while True:
                command = await self._commands.get()
                if command is _STOP:
                    break
                self._handle(command)
        finally:
            for subscriptions in self._subscribers.values():
                for subscription in subscriptions.values():
                    subscription.close()
            self._subscribers.clear()

    def _handle(self, command: tuple[Any, ...]) -> None:
        action = command[0]
        if action == "register":
            subscription = command[1]
            self._subscribers[subscription.owner][subscription.id] = subscription
            logger.debug(
                "Live subscriber registered for %s (total: %d)",
                subscription.owner,
                self.connection_count,
            )
        elif action == "unregister":
            self._remove(command[1])
        elif action == "publish":
            self._fan_out(command[1], command[2])
        elif action == "broadcast":
            for owner in [owner for owner in self._subscribers if owner.kind is command[1]]:
                self._fan_out(owner, command[2])

    def _fan_out(self, owner: Owner, message: dict[str, Any]) -> None:
        for subscription in list(self._subscribers.get(owner, {}).values()):
            if subscription.offer(message):
                continue
            if not subscription.closed:
                logger.warning(
                    "Dropping live subscriber %s of %s: buffer full", subscription.id, owner
                )
            self._remove(subscription)

    def _remove(self, subscription: Subscription) -> None:
        subscriptions = self._subscribers.get(subscription.owner)
        if subscriptions is not None:
            subscriptions.pop(subscription.id, None)
            if not subscriptions:
                self._subscribers.pop(subscription.owner, None)
        subscription.close()


__all__ = ["HubState", "LiveUpdateHub", "Subscription"]
