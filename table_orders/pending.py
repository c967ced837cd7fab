"""Locally cached, periodically refreshed view of pending orders."""

from __future__ import annotations

import logging
from typing import Protocol

from table_orders.errors import NotFoundError, PersistenceError
from table_orders.models import Order, OrderStatus

logger = logging.getLogger(__name__)


class PendingSource(Protocol):
    async def select_orders(self, status: OrderStatus) -> list[Order]: ...

    async def update_order_status(self, order_id: str, status: OrderStatus, expected: OrderStatus) -> None: ...


class PendingOrderQueue:
    """Pending orders, oldest first.

    ``refresh`` replaces the cache wholesale and only on success. ``complete``
    removes an order locally once the store update succeeds. A refresh that
    resolves after ``deactivate`` (or after a later ``activate``) is dropped.
    """

    def __init__(self, store: PendingSource) -> None:
        self._store = store
        self.orders: list[Order] = []
        self.active = False
        self.last_error: PersistenceError | None = None
        self._epoch = 0

    def activate(self) -> None:
        self._epoch += 1
        self.active = True

    def deactivate(self) -> None:
        self._epoch += 1
        self.active = False

    async def refresh(self) -> bool:
        """Reload pending orders. Returns False if the result was not applied."""
        epoch = self._epoch
        try:
            orders = await self._store.select_orders(OrderStatus.PENDING)
        except PersistenceError as exc:
            if epoch == self._epoch and self.active:
                self.last_error = exc
            logger.warning("refresh_failed error=%r cached=%d", exc, len(self.orders))
            return False

        if epoch != self._epoch or not self.active:
            logger.debug("refresh_dropped reason=inactive")
            return False

        self.orders = sorted(orders, key=lambda order: order.created_at)
        self.last_error = None
        return True

    async def complete(self, order_id: str) -> None:
        """Mark an order completed, then drop it from the cache.

        A ``PersistenceError`` leaves the cache untouched. ``NotFoundError``
        means the order already left the pending set elsewhere, so it is
        dropped locally before re-raising.
        """
        try:
            await self._store.update_order_status(order_id, OrderStatus.COMPLETED, expected=OrderStatus.PENDING)
        except NotFoundError:
            self._remove(order_id)
            raise
        self._remove(order_id)
        logger.info("order_completed order_id=%s remaining=%d", order_id, len(self.orders))

    def _remove(self, order_id: str) -> None:
        self.orders = [order for order in self.orders if order.id != order_id]
