"""Main Textual app class."""

from __future__ import annotations

import logging
from pathlib import Path

from textual.app import App
from textual.binding import Binding
from textual.screen import ModalScreen

from table_orders.cart import CartBuilder
from table_orders.catalog import MenuCatalog
from table_orders.config import DB_PATH
from table_orders.menu_admin import MenuAdmin
from table_orders.menu_screen import MenuScreen
from table_orders.new_order_screen import NewOrderScreen
from table_orders.pending import PendingOrderQueue
from table_orders.pending_screen import PendingOrdersScreen
from table_orders.persistence import OrderStore
from table_orders.submitter import OrderSubmitter

logger = logging.getLogger(__name__)


class TableOrdersApp(App):
    """Take table orders, follow the kitchen queue and keep the menu."""

    TITLE = "Table Orders"

    BINDINGS = [
        Binding("f1", "show_new_order", "New order", priority=True),
        Binding("f2", "show_pending", "Pending orders", priority=True),
        Binding("f3", "show_menu", "Menu", priority=True),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, db_path: str | Path = DB_PATH) -> None:
        super().__init__()
        self.store = OrderStore(db_path)
        self.catalog = MenuCatalog(self.store)
        self.cart = CartBuilder(self.catalog)
        self.submitter = OrderSubmitter(self.store)
        self.queue = PendingOrderQueue(self.store)
        self.admin = MenuAdmin(self.store)
        self.current_view = ""

    def on_mount(self) -> None:
        self.store.bootstrap_schema()
        logger.info("app_started db=%s", self.store.db_path)
        self.current_view = "new_order"
        self.sub_title = "New order"
        self.push_screen(NewOrderScreen(self.catalog, self.cart, self.submitter))

    def _switch(self, view: str) -> None:
        if view == self.current_view or isinstance(self.screen, ModalScreen):
            return
        if view == "new_order":
            screen = NewOrderScreen(self.catalog, self.cart, self.submitter)
        elif view == "pending":
            screen = PendingOrdersScreen(self.queue)
        else:
            screen = MenuScreen(self.admin)
        self.current_view = view
        self.sub_title = {"new_order": "New order", "pending": "Pending orders", "menu": "Menu"}[view]
        self.switch_screen(screen)

    def action_show_new_order(self) -> None:
        self._switch("new_order")

    def action_show_pending(self) -> None:
        self._switch("pending")

    def action_show_menu(self) -> None:
        self._switch("menu")
