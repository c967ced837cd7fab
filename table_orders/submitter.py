"""Single-flight order submission."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Protocol, Sequence

from table_orders.errors import ValidationError
from table_orders.models import NewOrder, Order, OrderLine, OrderStatus, order_total

logger = logging.getLogger(__name__)


class OrderSink(Protocol):
    async def insert_order(self, new_order: NewOrder) -> Order: ...


def parse_table_number(raw: object) -> int:
    if raw is None or not str(raw).strip():
        raise ValidationError("missing_table_number", "Enter the table number.")
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise ValidationError("invalid_table_number", "Table number must be a whole number.") from None
    if value < 1:
        raise ValidationError("invalid_table_number", "Table number must be positive.")
    return value


class OrderSubmitter:
    def __init__(self, store: OrderSink) -> None:
        self._store = store
        self.in_flight = False

    @contextmanager
    def _single_flight(self) -> Iterator[None]:
        self.in_flight = True
        try:
            yield
        finally:
            self.in_flight = False

    async def submit(self, table_number: object, lines: Sequence[OrderLine]) -> Order | None:
        """Validate and insert a pending order.

        Returns ``None`` without touching the store if another submission is
        still in flight. Store failures propagate as ``PersistenceError``.
        """
        if self.in_flight:
            logger.info("submit_rejected reason=in_flight")
            return None

        table = parse_table_number(table_number)
        if not lines:
            raise ValidationError("empty_order", "Add at least one item to the order.")

        with self._single_flight():
            snapshot = list(lines)
            new_order = NewOrder(
                table_number=table,
                items=snapshot,
                total=order_total(snapshot),
                status=OrderStatus.PENDING,
            )
            order = await self._store.insert_order(new_order)

        logger.info("submit_saved order_id=%s table=%d lines=%d total=%s", order.id, table, len(snapshot), order.total)
        return order
