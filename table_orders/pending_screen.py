"""Kitchen view of pending orders, refreshed on a timer."""

from __future__ import annotations

import logging

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.reactive import reactive
from textual.screen import Screen
from textual.timer import Timer
from textual.widgets import Footer, Header, Static

from table_orders.config import POLL_INTERVAL_SECONDS
from table_orders.errors import OrderError
from table_orders.models import Order
from table_orders.pending import PendingOrderQueue
from table_orders.rendering import format_order_card, render_window, visible_rows

logger = logging.getLogger(__name__)

# Order cards span several terminal lines each.
_CARD_HEIGHT = 5


class PendingOrdersScreen(Screen):
    """Pending orders, oldest first. Enter/C completes the highlighted order."""

    CSS = """
    #orders-pane {
        height: 1fr;
        border: round $primary;
        padding: 1;
    }

    #orders-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #orders-status {
        height: 1;
        color: $text-muted;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    selected_index = reactive(None)

    BINDINGS = [
        ("j", "move_selection(1)", "Next"),
        ("k", "move_selection(-1)", "Previous"),
        ("down", "move_selection(1)", "Next"),
        ("up", "move_selection(-1)", "Previous"),
        ("enter", "complete_selected", "Complete"),
        ("c", "complete_selected", "Complete"),
        ("r", "refresh_now", "Refresh"),
    ]

    def __init__(self, queue: PendingOrderQueue) -> None:
        super().__init__()
        self.queue = queue
        self.system_status = ""
        self._poll_timer: Timer | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="orders-pane"):
            yield Static("Pending Orders", classes="pane-title")
            yield Static("No pending orders", id="orders-list")
            yield Static(id="orders-status")
        yield Footer()

    def on_mount(self) -> None:
        self.queue.activate()
        self.call_later(self._poll)
        self._poll_timer = self.set_interval(POLL_INTERVAL_SECONDS, self._poll)

    def on_unmount(self) -> None:
        if self._poll_timer is not None:
            self._poll_timer.stop()
            self._poll_timer = None
        self.queue.deactivate()

    async def _poll(self) -> None:
        applied = await self.queue.refresh()
        if not self.queue.active:
            return
        if applied:
            self.system_status = ""
        elif self.queue.last_error is not None:
            self.system_status = f"Refresh failed, showing last known orders: {self.queue.last_error}"
        self._refresh_orders()

    def action_refresh_now(self) -> None:
        self.run_worker(self._poll(), group="refresh")

    def action_move_selection(self, delta: int) -> None:
        orders = self.queue.orders
        if not orders:
            return
        if self.selected_index is None:
            self.selected_index = 0 if delta > 0 else len(orders) - 1
        else:
            self.selected_index = (self.selected_index + delta) % len(orders)
        self._refresh_orders()

    def action_complete_selected(self) -> None:
        order = self._selected_order()
        if order is None:
            return
        self.run_worker(self._complete(order), group="complete")

    async def _complete(self, order: Order) -> None:
        try:
            await self.queue.complete(order.id)
        except OrderError as exc:
            logger.warning("complete_failed order_id=%s error=%r", order.id, exc)
            self.system_status = f"Could not complete table {order.table_number}: {exc}"
        else:
            self.system_status = f"Completed table {order.table_number}"
        self._refresh_orders()

    def _selected_order(self) -> Order | None:
        orders = self.queue.orders
        if self.selected_index is None or not (0 <= self.selected_index < len(orders)):
            return None
        return orders[self.selected_index]

    def _refresh_orders(self) -> None:
        try:
            orders_widget = self.query_one("#orders-list", Static)
            status_widget = self.query_one("#orders-status", Static)
        except NoMatches:
            return

        orders = self.queue.orders
        if not orders:
            self.selected_index = None
        elif self.selected_index is None:
            self.selected_index = 0
        elif self.selected_index >= len(orders):
            self.selected_index = len(orders) - 1

        rows = [format_order_card(order) for order in orders]
        height = visible_rows(orders_widget.size.height, default=_CARD_HEIGHT * 3) // _CARD_HEIGHT
        orders_widget.update(render_window(rows, self.selected_index, height, "No pending orders"))
        status_widget.update(self.system_status)
