"""Domain models for table orders."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Iterable

CENT = Decimal("0.01")


class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


def to_money(value: object) -> Decimal:
    """Convert a price-like value to a Decimal with currency precision.

    Floats go through ``str`` first so ``2.5`` becomes ``Decimal("2.50")``
    rather than its binary approximation.
    """
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, float):
        amount = Decimal(str(value))
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"not a monetary amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"not a monetary amount: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class MenuItem:
    """A purchasable catalog entry."""

    id: str
    name: str
    price: Decimal
    description: str = ""
    category: str = ""
    active: bool = True
    created_at: str = ""


@dataclass(frozen=True)
class OrderLine:
    """Snapshot of a menu item at selection time plus the chosen quantity."""

    menu_item_id: str
    name: str
    price: Decimal
    quantity: int

    @classmethod
    def from_menu_item(cls, item: MenuItem, quantity: int) -> OrderLine:
        return cls(menu_item_id=item.id, name=item.name, price=item.price, quantity=quantity)

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class Order:
    """A persisted order as read back from the store."""

    id: str
    table_number: int
    items: list[OrderLine]
    status: OrderStatus
    total: Decimal
    created_at: str


@dataclass
class NewOrder:
    """An order ready to be inserted; the store assigns id and created_at."""

    table_number: int
    items: list[OrderLine]
    total: Decimal
    status: OrderStatus = OrderStatus.PENDING


def order_total(lines: Iterable[OrderLine]) -> Decimal:
    """Sum of price x quantity over lines; zero for no lines."""
    return sum((line.subtotal for line in lines), Decimal("0.00")).quantize(CENT)
