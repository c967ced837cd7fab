"""Pending order queue: refresh, completion, deactivation."""

import asyncio

import pytest
from conftest import FakeStore, make_order

from table_orders.errors import NotFoundError, PersistenceError
from table_orders.models import OrderStatus
from table_orders.pending import PendingOrderQueue

T1 = "2026-01-01T12:00:01+00:00"
T2 = "2026-01-01T12:00:02+00:00"
T3 = "2026-01-01T12:00:03+00:00"


@pytest.fixture
def store() -> FakeStore:
    store = FakeStore()
    # Inserted out of order on purpose.
    store.orders = [make_order("B", T2, table_number=2), make_order("A", T1, table_number=1)]
    return store


@pytest.fixture
def queue(store) -> PendingOrderQueue:
    queue = PendingOrderQueue(store)
    queue.activate()
    return queue


def ids(queue: PendingOrderQueue) -> list[str]:
    return [order.id for order in queue.orders]


def test_refresh_orders_oldest_first(queue):
    assert asyncio.run(queue.refresh()) is True
    assert ids(queue) == ["A", "B"]


def test_complete_then_failed_refresh_keeps_remaining(store, queue):
    asyncio.run(queue.refresh())

    asyncio.run(queue.complete("A"))
    assert ids(queue) == ["B"]

    store.fail_with = PersistenceError("network down")
    assert asyncio.run(queue.refresh()) is False
    assert ids(queue) == ["B"]
    assert queue.last_error is store.fail_with


def test_failed_refresh_never_clears_cache(store, queue):
    asyncio.run(queue.refresh())
    store.fail_with = PersistenceError("timeout")

    asyncio.run(queue.refresh())

    assert ids(queue) == ["A", "B"]


def test_successful_refresh_clears_last_error(store, queue):
    store.fail_with = PersistenceError("timeout")
    asyncio.run(queue.refresh())
    store.fail_with = None

    asyncio.run(queue.refresh())

    assert queue.last_error is None


def test_complete_failure_keeps_order(store, queue):
    asyncio.run(queue.refresh())
    store.fail_with = PersistenceError("rejected")

    with pytest.raises(PersistenceError):
        asyncio.run(queue.complete("A"))

    assert ids(queue) == ["A", "B"]


def test_complete_absent_id_is_a_local_noop(store, queue):
    asyncio.run(queue.refresh())
    store.orders.append(make_order("C", T3))

    asyncio.run(queue.complete("C"))

    assert ids(queue) == ["A", "B"]


def test_complete_already_completed_drops_locally(store, queue):
    asyncio.run(queue.refresh())
    asyncio.run(store.update_order_status("A", OrderStatus.COMPLETED, expected=OrderStatus.PENDING))

    with pytest.raises(NotFoundError):
        asyncio.run(queue.complete("A"))

    assert ids(queue) == ["B"]


def test_refresh_resolving_after_deactivate_is_dropped(store, queue):
    async def scenario():
        store.gate = asyncio.Event()
        pending = asyncio.create_task(queue.refresh())
        await asyncio.sleep(0)
        queue.deactivate()
        store.gate.set()
        return await pending

    assert asyncio.run(scenario()) is False
    assert queue.orders == []


def test_refresh_from_previous_activation_is_dropped(store, queue):
    async def scenario():
        store.gate = asyncio.Event()
        stale = asyncio.create_task(queue.refresh())
        await asyncio.sleep(0)
        queue.deactivate()
        queue.activate()
        store.gate.set()
        return await stale

    assert asyncio.run(scenario()) is False
    assert queue.orders == []



def test_complete_during_slow_refresh_is_corrected_by_next_poll(store, queue):
    asyncio.run(queue.refresh())
    original_select = store.select_orders

    async def scenario():
        release = asyncio.Event()

        async def slow_select(status):
            # Read happens now; the response arrives later.
            rows = await original_select(status)
            await release.wait()
            return rows

        store.select_orders = slow_select
        in_flight = asyncio.create_task(queue.refresh())
        await asyncio.sleep(0)

        await queue.complete("A")
        after_complete = ids(queue)
        release.set()
        await in_flight
        after_stale = ids(queue)

        store.select_orders = original_select
        await queue.refresh()
        return after_complete, after_stale, ids(queue)

    after_complete, after_stale, after_next = asyncio.run(scenario())

    assert after_complete == ["B"]
    assert after_stale == ["A", "B"]
    assert after_next == ["B"]
    assert store.updates == [("A", OrderStatus.COMPLETED)]
