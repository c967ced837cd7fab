"""Order submission: validation gate, single flight, failure handling."""

import asyncio
from decimal import Decimal

import pytest

from table_orders.errors import PersistenceError, ValidationError
from table_orders.models import OrderLine, OrderStatus
from table_orders.submitter import OrderSubmitter, parse_table_number

SODA_X3 = [OrderLine(menu_item_id="soda", name="Soda", price=Decimal("2.50"), quantity=3)]


def test_soda_order_is_pending_with_computed_total(fake_store):
    submitter = OrderSubmitter(fake_store)

    order = asyncio.run(submitter.submit("4", SODA_X3))

    assert order.table_number == 4
    assert order.total == Decimal("7.50")
    assert order.status is OrderStatus.PENDING
    assert fake_store.inserted[0].total == Decimal("7.50")
    assert fake_store.inserted[0].status is OrderStatus.PENDING


@pytest.mark.parametrize(
    "table, reason",
    [(None, "missing_table_number"), ("", "missing_table_number"), ("  ", "missing_table_number"),
     ("abc", "invalid_table_number"), ("0", "invalid_table_number"), ("-2", "invalid_table_number")],
)
def test_bad_table_number_never_reaches_store(fake_store, table, reason):
    submitter = OrderSubmitter(fake_store)

    with pytest.raises(ValidationError) as info:
        asyncio.run(submitter.submit(table, SODA_X3))

    assert info.value.reason == reason
    assert fake_store.inserted == []


def test_empty_order_never_reaches_store(fake_store):
    submitter = OrderSubmitter(fake_store)

    with pytest.raises(ValidationError) as info:
        asyncio.run(submitter.submit("3", []))

    assert info.value.reason == "empty_order"
    assert fake_store.inserted == []


def test_table_is_checked_before_lines(fake_store):
    submitter = OrderSubmitter(fake_store)

    with pytest.raises(ValidationError) as info:
        asyncio.run(submitter.submit("", []))

    assert info.value.reason == "missing_table_number"


def test_double_submit_inserts_once(fake_store):
    submitter = OrderSubmitter(fake_store)

    async def scenario():
        fake_store.gate = asyncio.Event()
        first = asyncio.create_task(submitter.submit("4", SODA_X3))
        await asyncio.sleep(0)
        assert submitter.in_flight
        second = await submitter.submit("4", SODA_X3)
        fake_store.gate.set()
        return await first, second

    first, second = asyncio.run(scenario())

    assert first is not None
    assert second is None
    assert len(fake_store.inserted) == 1
    assert not submitter.in_flight


def test_store_failure_propagates_and_releases_guard(fake_store):
    submitter = OrderSubmitter(fake_store)
    fake_store.fail_with = PersistenceError("disk full")

    with pytest.raises(PersistenceError):
        asyncio.run(submitter.submit("4", SODA_X3))
    assert not submitter.in_flight

    fake_store.fail_with = None
    order = asyncio.run(submitter.submit("4", SODA_X3))
    assert order is not None


def test_total_is_recomputed_from_lines(fake_store):
    submitter = OrderSubmitter(fake_store)
    lines = SODA_X3 + [OrderLine(menu_item_id="fries", name="Fries", price=Decimal("5.00"), quantity=2)]

    order = asyncio.run(submitter.submit(7, lines))

    assert order.total == Decimal("17.50")
    assert [line.name for line in order.items] == ["Soda", "Fries"]


def test_parse_table_number_accepts_padded_digits():
    assert parse_table_number(" 12 ") == 12
