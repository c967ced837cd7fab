"""In-progress order assembly."""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from table_orders.catalog import MenuCatalog
from table_orders.errors import ValidationError
from table_orders.models import OrderLine, order_total


def parse_quantity(raw: object) -> int:
    """Parse operator-typed quantity; anything non-numeric or below 1 becomes 1."""
    try:
        value = int(str(raw).strip())
    except ValueError:
        return 1
    return max(1, value)


class CartBuilder:
    """Owns the unsaved line list and the transient selection state."""

    def __init__(self, catalog: MenuCatalog) -> None:
        self.catalog = catalog
        self.lines: list[OrderLine] = []
        self.selected_item_id: str | None = None
        self.pending_quantity = 1
        self.table_number = ""

    def select(self, menu_item_id: str | None) -> None:
        self.selected_item_id = menu_item_id or None

    def set_quantity(self, raw: object) -> int:
        self.pending_quantity = parse_quantity(raw)
        return self.pending_quantity

    def set_table_number(self, raw: str) -> None:
        self.table_number = raw.strip()

    def add_line(self, menu_item_id: str | None = None, quantity: int | None = None) -> OrderLine:
        """Append a snapshot of the selected item.

        Same-item selections are kept as separate lines. Raises
        ``ValidationError`` for a missing selection or a quantity below 1 and
        ``NotFoundError`` when the item is no longer selectable.
        """
        if menu_item_id is None:
            menu_item_id = self.selected_item_id
        if quantity is None:
            quantity = self.pending_quantity

        if not menu_item_id:
            raise ValidationError("no_item_selected", "Select a menu item first.")
        if quantity < 1:
            raise ValidationError("invalid_quantity", "Quantity must be at least 1.")

        item = self.catalog.get(menu_item_id)
        line = OrderLine.from_menu_item(item, quantity)
        self.lines.append(line)
        self.selected_item_id = None
        self.pending_quantity = 1
        return line

    def remove_line(self, index: int) -> OrderLine:
        if not (0 <= index < len(self.lines)):
            raise IndexError(f"cart line {index} out of range (0..{len(self.lines) - 1})")
        return self.lines.pop(index)

    def total(self) -> Decimal:
        return order_total(self.lines)

    def clear_submitted(self, submitted: Sequence[OrderLine]) -> None:
        """Drop the lines that went into a saved order.

        Lines added while the insert was in flight stay, together with the
        table number, so they can be sent next.
        """
        pending = list(submitted)
        kept: list[OrderLine] = []
        for line in self.lines:
            match = next((idx for idx, sent in enumerate(pending) if sent is line), None)
            if match is None:
                kept.append(line)
            else:
                del pending[match]
        self.lines = kept
        if not self.lines:
            self.table_number = ""

    def reset(self) -> None:
        self.lines.clear()
        self.selected_item_id = None
        self.pending_quantity = 1
        self.table_number = ""
