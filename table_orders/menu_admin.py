"""Menu catalog maintenance: list, add, soft delete."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from table_orders.errors import ValidationError
from table_orders.models import MenuItem, to_money
from table_orders.persistence import OrderStore

logger = logging.getLogger(__name__)


def parse_price(raw: object) -> Decimal:
    if raw is None or not str(raw).strip():
        raise ValidationError("invalid_price", "Enter a price.")
    try:
        price = to_money(str(raw).strip().replace(",", "."))
    except ValueError:
        raise ValidationError("invalid_price", "Price must be a number.") from None
    if price < 0:
        raise ValidationError("invalid_price", "Price cannot be negative.")
    return price


class MenuAdmin:
    def __init__(self, store: OrderStore) -> None:
        self._store = store

    async def list_all(self) -> list[MenuItem]:
        return await self._store.select_menu_items(active_only=False)

    async def add_item(self, name: str, price: Any, description: str = "", category: str = "") -> MenuItem:
        name = (name or "").strip()
        if not name:
            raise ValidationError("missing_name", "Enter a name for the item.")
        item = await self._store.insert_menu_item(
            name=name,
            price=parse_price(price),
            description=(description or "").strip(),
            category=(category or "").strip(),
        )
        logger.info("menu_item_added item_id=%s name=%r price=%s", item.id, item.name, item.price)
        return item

    async def deactivate(self, item_id: str) -> None:
        # Soft delete: historical orders still reference the id.
        await self._store.update_menu_item(item_id, {"active": False})
        logger.info("menu_item_deactivated item_id=%s", item_id)
