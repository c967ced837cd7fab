"""Order entry screen: pick table, search menu, build the cart, submit."""

from __future__ import annotations

import logging

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.screen import Screen
from textual.widgets import Footer, Header, Static

from table_orders.cart import CartBuilder
from table_orders.catalog import MenuCatalog
from table_orders.errors import OrderError
from table_orders.models import MenuItem
from table_orders.rendering import format_cart_line, format_menu_item, format_money, render_window, visible_rows
from table_orders.submitter import OrderSubmitter

logger = logging.getLogger(__name__)


class NewOrderScreen(Screen):
    """Keyboard-driven order entry.

    States: ``normal`` (cart navigation), ``table`` (typing table number),
    ``search`` (typing a menu filter) and ``quantity`` (typing a quantity for
    the highlighted item).
    """

    CSS = """
    #main-layout {
        height: 1fr;
    }

    #cart-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #menu-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #input-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #menu-results {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #cart-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #cart-total {
        text-style: bold;
        margin-top: 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    input_state = reactive("normal")
    search_text = reactive("")
    typed = reactive("")
    selected_index = reactive(0)
    line_selected_index = reactive(None)

    BINDINGS = [
        ("tab", "cycle_results(1)", "Next result"),
        ("up", "cycle_results(-1)", "Previous result"),
        ("down", "cycle_results(1)", "Next result"),
        ("enter", "confirm", "Confirm"),
        ("backspace", "backspace", "Delete char"),
        ("escape", "cancel_input", "Cancel"),
        Binding("ctrl+s", "submit", "Submit order", priority=True),
        Binding("ctrl+r", "reload_menu", "Reload menu"),
    ]

    def __init__(self, catalog: MenuCatalog, cart: CartBuilder, submitter: OrderSubmitter) -> None:
        super().__init__()
        self.catalog = catalog
        self.cart = cart
        self.submitter = submitter
        self.system_status = ""

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="cart-pane"):
                yield Static("New Order", classes="pane-title")
                yield Static(id="table-line")
                yield Static("(no items yet)", id="cart-list")
                yield Static(id="cart-total")
            with Vertical(id="menu-pane"):
                yield Static(id="input-bar")
                yield Static(id="menu-results")
        yield Footer()

    def on_mount(self) -> None:
        self._refresh_all()
        self.run_worker(self._load_menu(), group="menu", exclusive=True)

    async def _load_menu(self) -> None:
        try:
            await self.catalog.load()
        except OrderError as exc:
            self.system_status = f"Could not load the menu: {exc}"
        else:
            self.system_status = f"Menu loaded ({len(self.catalog.items)} items)"
        self._refresh_all()

    def on_key(self, event: Key) -> None:
        if not event.is_printable or not event.character or len(event.character) != 1:
            return

        char = event.character
        if self.input_state == "normal":
            key = char.lower()
            if key == "t":
                self._enter_state("table", self.cart.table_number)
            elif key in {"s", "/"}:
                self._enter_state("search", "")
            elif key == "j":
                self._move_line_selection(1)
            elif key == "k":
                self._move_line_selection(-1)
            elif key == "d":
                self._delete_selected_line()
            else:
                return
            event.stop()
            return

        if self.input_state == "search":
            self.search_text += char
            self.selected_index = 0
        elif char.isdigit() and len(self.typed) < 4:
            self.typed += char
        self._refresh_all()
        event.stop()

    def _enter_state(self, state: str, typed: str) -> None:
        self.input_state = state
        self.typed = typed
        if state == "search":
            self.search_text = ""
            self.selected_index = 0
        self._refresh_all()

    def action_cancel_input(self) -> None:
        if self.input_state == "normal":
            return
        if self.input_state == "quantity":
            self.cart.select(None)
        self.input_state = "normal"
        self.typed = ""
        self.search_text = ""
        self._refresh_all()

    def action_backspace(self) -> None:
        if self.input_state == "search":
            self.search_text = self.search_text[:-1]
            self.selected_index = 0
        elif self.input_state in {"table", "quantity"}:
            self.typed = self.typed[:-1]
        self._refresh_all()

    def action_cycle_results(self, delta: int) -> None:
        if self.input_state != "search":
            return
        results = self._filtered_results()
        if not results:
            self.selected_index = 0
        else:
            self.selected_index = (self.selected_index + delta) % len(results)
        self._refresh_results(results)

    def action_confirm(self) -> None:
        if self.input_state == "table":
            self.cart.set_table_number(self.typed)
            self.input_state = "normal"
            self.typed = ""
        elif self.input_state == "search":
            results = self._filtered_results()
            if not results:
                return
            item = results[self.selected_index]
            self.cart.select(item.id)
            self._enter_state("quantity", str(self.cart.pending_quantity))
            return
        elif self.input_state == "quantity":
            self._add_selected(self.typed)
        self._refresh_all()

    def _add_selected(self, raw_quantity: str) -> None:
        self.cart.set_quantity(raw_quantity)
        try:
            line = self.cart.add_line()
        except OrderError as exc:
            self.system_status = str(exc)
            self.cart.select(None)
        else:
            self.line_selected_index = len(self.cart.lines) - 1
            self.system_status = f"Added {line.quantity}x {line.name}"
        self.input_state = "normal"
        self.typed = ""
        self.search_text = ""

    def action_submit(self) -> None:
        if self.input_state != "normal":
            self.system_status = "Finish or cancel the current input first (Esc)"
            self._refresh_all()
            return
        self.run_worker(self._submit(), group="submit")

    async def _submit(self) -> None:
        try:
            order = await self.submitter.submit(self.cart.table_number, self.cart.lines)
        except OrderError as exc:
            logger.warning("submit_failed table=%r lines=%d error=%r", self.cart.table_number, len(self.cart.lines), exc)
            self.system_status = str(exc)
            self._refresh_all()
            return

        if order is None:
            return
        self.cart.clear_submitted(order.items)
        self.line_selected_index = None
        self.system_status = f"Order sent: table {order.table_number}, {format_money(order.total)}"
        self._refresh_all()

    def action_reload_menu(self) -> None:
        self.run_worker(self._load_menu(), group="menu", exclusive=True)

    def _filtered_results(self) -> list[MenuItem]:
        return self.catalog.filter(self.search_text)

    def _move_line_selection(self, delta: int) -> None:
        if not self.cart.lines:
            return
        if self.line_selected_index is None:
            self.line_selected_index = 0 if delta > 0 else len(self.cart.lines) - 1
        else:
            self.line_selected_index = (self.line_selected_index + delta) % len(self.cart.lines)
        self._refresh_cart()

    def _delete_selected_line(self) -> None:
        idx = self.line_selected_index
        if idx is None or not (0 <= idx < len(self.cart.lines)):
            return
        self.cart.remove_line(idx)
        self.line_selected_index = min(idx, len(self.cart.lines) - 1) if self.cart.lines else None
        self._refresh_cart()

    def _refresh_all(self) -> None:
        try:
            self._refresh_cart()
            self._refresh_input_bar()
            self._refresh_results(self._filtered_results() if self.input_state == "search" else [])
        except NoMatches:
            return

    def _refresh_cart(self) -> None:
        table_widget = self.query_one("#table-line", Static)
        cart_widget = self.query_one("#cart-list", Static)
        total_widget = self.query_one("#cart-total", Static)

        table = self.cart.table_number or "-"
        table_widget.update(Text.assemble(("Table: ", "dim"), (table, "bold")))

        if self.line_selected_index is not None and self.line_selected_index >= len(self.cart.lines):
            self.line_selected_index = len(self.cart.lines) - 1 if self.cart.lines else None

        rows = [format_cart_line(line) for line in self.cart.lines]
        cart_widget.update(
            render_window(rows, self.line_selected_index, visible_rows(cart_widget.size.height), "(no items yet)")
        )
        total_widget.update(f"Total: {format_money(self.cart.total())}")

    def _refresh_input_bar(self) -> None:
        bar = self.query_one("#input-bar", Static)
        status = self.system_status or "Ready"
        if self.input_state == "normal":
            bar.update(f"T table, S search menu, J/K/D edit lines, Ctrl+S submit.\n{status}")
        elif self.input_state == "table":
            bar.update(f"Table number: {self.typed}|\nEnter confirm, Esc cancel")
        elif self.input_state == "quantity":
            bar.update(f"Quantity: {self.typed}|\nEnter add to order, Esc cancel")
        else:
            bar.update(f"Search: {self.search_text}|\nEnter pick item, Esc cancel")

    def _refresh_results(self, results: list[MenuItem]) -> None:
        results_widget = self.query_one("#menu-results", Static)
        if self.input_state != "search":
            results_widget.update("")
            return
        if self.selected_index >= len(results):
            self.selected_index = 0
        rows = [format_menu_item(item) for item in results]
        results_widget.update(
            render_window(rows, self.selected_index, visible_rows(results_widget.size.height), "No results")
        )
