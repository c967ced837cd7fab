"""SQLite persistence for menu items and table orders."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterator, TypeVar
from uuid import uuid4

from table_orders.config import DB_PATH
from table_orders.errors import NotFoundError, PersistenceError
from table_orders.models import MenuItem, NewOrder, Order, OrderLine, OrderStatus, to_money

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MENU_PATCH_COLUMNS = ("name", "price", "description", "category", "active")


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _menu_item_from_row(row: sqlite3.Row) -> MenuItem:
    return MenuItem(
        id=row["id"],
        name=row["name"],
        price=to_money(row["price"]),
        description=row["description"] or "",
        category=row["category"] or "",
        active=bool(row["active"]),
        created_at=row["created_at"],
    )


class OrderStore:
    """Record store over the ``menu_items`` and ``orders`` tables.

    Every public operation is a coroutine: the blocking sqlite work runs in a
    worker thread with its own connection, and any ``sqlite3.Error`` or
    filesystem ``OSError`` is re-raised as :class:`PersistenceError`.
    """

    def __init__(self, db_path: str | Path = DB_PATH) -> None:
        self.db_path = Path(db_path)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()

    async def _run(self, operation: str, fn: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(fn, *args)
        except (sqlite3.Error, OSError) as exc:
            logger.error("store_failed operation=%s error=%r", operation, exc)
            raise PersistenceError(f"Could not {operation.replace('_', ' ')}: {exc}", cause=exc) from exc

    def bootstrap_schema(self) -> None:
        """Create persistence schema if it does not already exist."""
        try:
            with self._connect() as conn:
                conn.executescript(
                    """
                    CREATE TABLE IF NOT EXISTS menu_items (
                        id TEXT PRIMARY KEY,
                        name TEXT NOT NULL,
                        price TEXT NOT NULL,
                        description TEXT NOT NULL DEFAULT '',
                        category TEXT NOT NULL DEFAULT '',
                        active INTEGER NOT NULL DEFAULT 1,
                        created_at TEXT NOT NULL
                    );

                    CREATE TABLE IF NOT EXISTS orders (
                        id TEXT PRIMARY KEY,
                        table_number INTEGER NOT NULL,
                        status TEXT NOT NULL,
                        total TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    );

                    CREATE TABLE IF NOT EXISTS order_items (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        order_id TEXT NOT NULL,
                        line_index INTEGER NOT NULL,
                        menu_item_id TEXT NOT NULL,
                        name TEXT NOT NULL,
                        quantity INTEGER NOT NULL,
                        price TEXT NOT NULL,
                        FOREIGN KEY(order_id) REFERENCES orders(id) ON DELETE CASCADE
                    );

                    CREATE INDEX IF NOT EXISTS idx_orders_status_created
                        ON orders(status, created_at);

                    CREATE INDEX IF NOT EXISTS idx_order_items_order_id_line
                        ON order_items(order_id, line_index);
                    """
                )
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(f"Could not prepare database at {self.db_path}: {exc}", cause=exc) from exc

    # -- menu_items ---------------------------------------------------------

    async def select_menu_items(self, active_only: bool = False) -> list[MenuItem]:
        """Menu items ordered by category, then name."""
        return await self._run("load_menu", self._select_menu_items, active_only)

    def _select_menu_items(self, active_only: bool) -> list[MenuItem]:
        query = "SELECT * FROM menu_items"
        if active_only:
            query += " WHERE active = 1"
        query += " ORDER BY category ASC, name ASC, rowid ASC"
        with self._connect() as conn:
            return [_menu_item_from_row(row) for row in conn.execute(query)]

    async def insert_menu_item(
        self, name: str, price: Any, description: str = "", category: str = ""
    ) -> MenuItem:
        item = MenuItem(
            id=uuid4().hex,
            name=name,
            price=to_money(price),
            description=description,
            category=category,
            active=True,
            created_at=_utc_now_iso(),
        )
        await self._run("add_menu_item", self._insert_menu_item, item)
        return item

    def _insert_menu_item(self, item: MenuItem) -> None:
        with self._connect() as conn:
            with conn:
                conn.execute(
                    """
                    INSERT INTO menu_items (id, name, price, description, category, active, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        item.id,
                        item.name,
                        str(item.price),
                        item.description,
                        item.category,
                        int(item.active),
                        item.created_at,
                    ),
                )

    async def update_menu_item(self, item_id: str, patch: dict[str, Any]) -> None:
        unknown = set(patch) - set(_MENU_PATCH_COLUMNS)
        if unknown:
            raise ValueError(f"unknown menu_items columns: {sorted(unknown)}")
        if not patch:
            return
        await self._run("update_menu_item", self._update_menu_item, item_id, patch)

    def _update_menu_item(self, item_id: str, patch: dict[str, Any]) -> None:
        columns = [column for column in _MENU_PATCH_COLUMNS if column in patch]
        values: list[Any] = []
        for column in columns:
            value = patch[column]
            if column == "price":
                value = str(to_money(value))
            elif column == "active":
                value = int(bool(value))
            values.append(value)
        assignments = ", ".join(f"{column} = ?" for column in columns)
        with self._connect() as conn:
            with conn:
                cur = conn.execute(f"UPDATE menu_items SET {assignments} WHERE id = ?", (*values, item_id))
                if cur.rowcount == 0:
                    raise NotFoundError(f"Menu item {item_id} not found")

    # -- orders -------------------------------------------------------------

    async def select_orders(self, status: OrderStatus) -> list[Order]:
        """Orders in ``status``, oldest first."""
        return await self._run("load_orders", self._select_orders, status)

    def _select_orders(self, status: OrderStatus) -> list[Order]:
        with self._connect() as conn:
            order_rows = conn.execute(
                """
                SELECT id, table_number, status, total, created_at FROM orders
                WHERE status = ?
                ORDER BY created_at ASC, rowid ASC
                """,
                (status.value,),
            ).fetchall()
            if not order_rows:
                return []

            lines_by_order: dict[str, list[OrderLine]] = {row["id"]: [] for row in order_rows}
            placeholders = ", ".join("?" for _ in order_rows)
            for row in conn.execute(
                f"""
                SELECT order_id, menu_item_id, name, quantity, price FROM order_items
                WHERE order_id IN ({placeholders})
                ORDER BY order_id, line_index
                """,
                list(lines_by_order),
            ):
                lines_by_order[row["order_id"]].append(
                    OrderLine(
                        menu_item_id=row["menu_item_id"],
                        name=row["name"],
                        price=to_money(row["price"]),
                        quantity=int(row["quantity"]),
                    )
                )

        return [
            Order(
                id=row["id"],
                table_number=int(row["table_number"]),
                items=lines_by_order[row["id"]],
                status=OrderStatus(row["status"]),
                total=to_money(row["total"]),
                created_at=row["created_at"],
            )
            for row in order_rows
        ]

    async def insert_order(self, new_order: NewOrder) -> Order:
        """Persist an order and its lines in a single transaction."""
        order = Order(
            id=uuid4().hex,
            table_number=new_order.table_number,
            items=list(new_order.items),
            status=new_order.status,
            total=new_order.total,
            created_at=_utc_now_iso(),
        )
        await self._run("save_order", self._insert_order, order)
        return order

    def _insert_order(self, order: Order) -> None:
        with self._connect() as conn:
            with conn:
                conn.execute(
                    "INSERT INTO orders (id, table_number, status, total, created_at) VALUES (?, ?, ?, ?, ?)",
                    (order.id, order.table_number, order.status.value, str(order.total), order.created_at),
                )
                conn.executemany(
                    """
                    INSERT INTO order_items (order_id, line_index, menu_item_id, name, quantity, price)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (order.id, idx, line.menu_item_id, line.name, line.quantity, str(line.price))
                        for idx, line in enumerate(order.items)
                    ],
                )

    async def update_order_status(self, order_id: str, status: OrderStatus, expected: OrderStatus) -> None:
        """Move an order from ``expected`` to ``status``.

        Raises :class:`NotFoundError` when no order with that id is in the
        expected status, so a completed order is never written back.
        """
        await self._run("update_order", self._update_order_status, order_id, status, expected)

    def _update_order_status(self, order_id: str, status: OrderStatus, expected: OrderStatus) -> None:
        with self._connect() as conn:
            with conn:
                cur = conn.execute(
                    "UPDATE orders SET status = ? WHERE id = ? AND status = ?",
                    (status.value, order_id, expected.value),
                )
                if cur.rowcount == 0:
                    raise NotFoundError(f"Order {order_id} is not {expected.value}")
