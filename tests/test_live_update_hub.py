from __future__ import annotations

import asyncio

import pytest

from app.domain.entities import Notification, NotificationKind, Owner, OwnerKind
from app.infrastructure.notifications import (
    HubState,
    LiveUpdateHub,
    NotificationPublisher,
    serialize_notification,
)
from app.utils import now_in_app_timezone

pytestmark = pytest.mark.anyio


async def _settle() -> None:
    """Let the hub worker process every queued command."""

    for _ in range(5):
        await asyncio.sleep(0)


async def _next(subscription):
    return await asyncio.wait_for(subscription.get(), timeout=1)


@pytest.fixture()
async def hub():
    live_hub = LiveUpdateHub(buffer_size=3)
    await live_hub.start()
    yield live_hub
    await live_hub.stop()


async def test_publish_without_subscribers_is_ignored(hub):
    hub.publish(Owner.user(1), {"type": "notification"})
    await _settle()

    assert hub.connection_count == 0


async def test_publish_reaches_every_session_of_the_owner(hub):
    first = hub.register(Owner.user(1))
    second = hub.register(Owner.user(1))
    other = hub.register(Owner.user(2))
    admin = hub.register(Owner.admin(1))
    await _settle()

    hub.publish(Owner.user(1), {"type": "notification", "data": {"id": "a"}})

    assert await _next(first) == {"type": "notification", "data": {"id": "a"}}
    assert await _next(second) == {"type": "notification", "data": {"id": "a"}}
    hub.publish(Owner.user(2), {"marker": "user-2"})
    hub.publish(Owner.admin(1), {"marker": "admin-1"})
    assert await _next(other) == {"marker": "user-2"}
    assert await _next(admin) == {"marker": "admin-1"}
    assert hub.connection_count == 4
    assert hub.is_connected(Owner.admin(1))


async def test_messages_keep_publish_order(hub):
    subscription = hub.register(Owner.admin(5))
    await _settle()

    for index in range(3):
        hub.publish(Owner.admin(5), {"seq": index})

    assert [(await _next(subscription))["seq"] for _ in range(3)] == [0, 1, 2]


async def test_published_message_is_copied(hub):
    subscription = hub.register(Owner.user(1))
    await _settle()
    message = {"data": {"title": "original"}}

    hub.publish(Owner.user(1), message)
    message["data"]["title"] = "changed"

    assert (await _next(subscription))["data"]["title"] == "original"


async def test_unregister_stops_delivery(hub):
    subscription = hub.register(Owner.user(1))
    await _settle()

    hub.unregister(subscription)
    await _settle()
    hub.publish(Owner.user(1), {"type": "notification"})
    await _settle()

    assert subscription.closed
    assert await _next(subscription) is None
    assert not hub.is_connected(Owner.user(1))


async def test_slow_subscriber_is_dropped_without_affecting_others(hub):
    slow = hub.register(Owner.user(1))
    fast = hub.register(Owner.user(1))
    await _settle()

    received = []
    for index in range(4):
        hub.publish(Owner.user(1), {"seq": index})
        await _settle()
        received.append((await _next(fast))["seq"])

    assert received == [0, 1, 2, 3]
    assert slow.closed
    assert [message["seq"] async for message in slow] == [0, 1, 2]
    assert hub.connection_count == 1


async def test_stop_closes_subscriptions_and_ignores_later_calls(hub):
    subscription = hub.register(Owner.user(1))
    await _settle()
    hub.publish(Owner.user(1), {"seq": 1})

    await hub.stop()

    assert hub.state is HubState.STOPPED
    assert [message async for message in subscription] == [{"seq": 1}]
    late = hub.register(Owner.user(1))
    hub.publish(Owner.user(1), {"seq": 2})
    assert late.closed
    assert await _next(late) is None
    assert hub.connection_count == 0

    await hub.stop()


async def test_calls_before_start_are_ignored():
    live_hub = LiveUpdateHub()

    subscription = live_hub.register(Owner.user(1))
    live_hub.publish(Owner.user(1), {"seq": 1})

    assert live_hub.state is HubState.IDLE
    assert subscription.closed
    await live_hub.stop()
    assert live_hub.state is HubState.STOPPED


async def test_start_twice_fails(hub):
    with pytest.raises(RuntimeError):
        await hub.start()


async def test_publish_from_another_thread(hub):
    subscription = hub.register(Owner.user(9))
    await _settle()

    await asyncio.to_thread(hub.publish, Owner.user(9), {"seq": "threaded"})

    assert await _next(subscription) == {"seq": "threaded"}


async def test_publisher_sends_serialized_notification(hub):
    subscription = hub.register(Owner.admin(2))
    await _settle()
    notification = Notification(
        id="n-1",
        owner=Owner.admin(2),
        kind=NotificationKind.SECURITY,
        title="New login",
        message="A new device signed in.",
        created_at=now_in_app_timezone(),
    )

    NotificationPublisher(hub).dispatch(notification)

    message = await _next(subscription)
    assert message == {"type": "notification", "data": serialize_notification(notification)}
    assert message["data"]["admin_id"] == 2
    assert message["data"]["user_id"] is None
    assert message["data"]["kind"] == "security"


async def test_publisher_without_hub_is_a_no_op():
    notification = Notification(
        id="n-1",
        owner=Owner.user(1),
        kind=NotificationKind.INFO,
        title="t",
        message="m",
    )

    NotificationPublisher(None).dispatch(notification)


async def test_publish_to_kind_reaches_every_owner_of_that_kind(hub):
    first_user = hub.register(Owner.user(1))
    second_user = hub.register(Owner.user(2))
    admin = hub.register(Owner.admin(1))
    await _settle()

    hub.publish_to_kind(OwnerKind.USER, {"type": "maintenance"})
    hub.publish(Owner.admin(1), {"type": "marker"})

    assert await _next(first_user) == {"type": "maintenance"}
    assert await _next(second_user) == {"type": "maintenance"}
    assert await _next(admin) == {"type": "marker"}


async def test_publish_to_kind_after_stop_is_ignored(hub):
    subscription = hub.register(Owner.admin(1))
    await _settle()

    await hub.stop()
    hub.publish_to_kind(OwnerKind.ADMIN, {"type": "maintenance"})

    assert await _next(subscription) is None
