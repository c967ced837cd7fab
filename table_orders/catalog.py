"""Read-only view of selectable menu items."""

from __future__ import annotations

import logging
from typing import Protocol

from table_orders.errors import NotFoundError
from table_orders.models import MenuItem

logger = logging.getLogger(__name__)


class MenuSource(Protocol):
    async def select_menu_items(self, active_only: bool = False) -> list[MenuItem]: ...


def matches_query(item: MenuItem, query: str) -> bool:
    """Case-insensitive substring match against name or category."""
    q = query.strip().lower()
    if not q:
        return True
    return q in item.name.lower() or q in item.category.lower()


class MenuCatalog:
    """Snapshot of active menu items, ordered by category."""

    def __init__(self, store: MenuSource) -> None:
        self._store = store
        self._items: list[MenuItem] = []

    @property
    def items(self) -> list[MenuItem]:
        return list(self._items)

    async def list_selectable(self) -> list[MenuItem]:
        items = await self._store.select_menu_items(active_only=True)
        return sorted(
            (item for item in items if item.active),
            key=lambda item: (item.category.lower(), item.name.lower()),
        )

    async def load(self) -> list[MenuItem]:
        """Replace the snapshot; a store failure leaves it untouched."""
        items = await self.list_selectable()
        self._items = items
        logger.info("catalog_loaded items=%d", len(items))
        return self.items

    def filter(self, query: str) -> list[MenuItem]:
        return [item for item in self._items if matches_query(item, query)]

    def get(self, item_id: str) -> MenuItem:
        for item in self._items:
            if item.id == item_id:
                return item
        raise NotFoundError(f"Menu item {item_id} is no longer available")
