from __future__ import annotations

import asyncio
from dataclasses import replace
from decimal import Decimal

import pytest

from table_orders.errors import NotFoundError, PersistenceError
from table_orders.models import MenuItem, NewOrder, Order, OrderStatus
from table_orders.persistence import OrderStore


class FakeStore:
    """In-memory store that records calls and can fail or block on demand."""

    def __init__(self, menu: list[MenuItem] | None = None) -> None:
        self.menu = list(menu or [])
        self.orders: list[Order] = []
        self.inserted: list[NewOrder] = []
        self.updates: list[tuple[str, OrderStatus]] = []
        self.fail_with: PersistenceError | None = None
        self.gate: asyncio.Event | None = None
        self._seq = 0

    async def _maybe_block_or_fail(self) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with

    async def select_menu_items(self, active_only: bool = False) -> list[MenuItem]:
        await self._maybe_block_or_fail()
        return [item for item in self.menu if item.active or not active_only]

    async def insert_order(self, new_order: NewOrder) -> Order:
        self.inserted.append(new_order)
        await self._maybe_block_or_fail()
        self._seq += 1
        order = Order(
            id=f"order-{self._seq}",
            table_number=new_order.table_number,
            items=list(new_order.items),
            status=new_order.status,
            total=new_order.total,
            created_at=f"2026-01-01T12:00:{self._seq:02d}+00:00",
        )
        self.orders.append(order)
        return order

    async def select_orders(self, status: OrderStatus) -> list[Order]:
        await self._maybe_block_or_fail()
        matching = [order for order in self.orders if order.status == status]
        return sorted(matching, key=lambda order: order.created_at)

    async def update_order_status(self, order_id: str, status: OrderStatus, expected: OrderStatus) -> None:
        self.updates.append((order_id, status))
        await self._maybe_block_or_fail()
        for idx, order in enumerate(self.orders):
            if order.id == order_id and order.status == expected:
                self.orders[idx] = replace(order, status=status)
                return
        raise NotFoundError(f"Order {order_id} is not {expected.value}")


def make_item(item_id: str, name: str, price: str, category: str = "", active: bool = True) -> MenuItem:
    return MenuItem(id=item_id, name=name, price=Decimal(price), category=category, active=active)


def make_order(order_id: str, created_at: str, table_number: int = 1) -> Order:
    return Order(
        id=order_id,
        table_number=table_number,
        items=[],
        status=OrderStatus.PENDING,
        total=Decimal("0.00"),
        created_at=created_at,
    )


@pytest.fixture
def menu() -> list[MenuItem]:
    return [
        make_item("burger", "Burger", "10.00", category="Mains"),
        make_item("fries", "Fries", "5.00", category="Sides"),
        make_item("soda", "Soda", "2.50", category="Drinks"),
        make_item("salad", "Salad", "7.00", category="Mains", active=False),
    ]


@pytest.fixture
def fake_store(menu) -> FakeStore:
    return FakeStore(menu)


@pytest.fixture
def sqlite_store(tmp_path) -> OrderStore:
    store = OrderStore(tmp_path / "orders.db")
    store.bootstrap_schema()
    return store
