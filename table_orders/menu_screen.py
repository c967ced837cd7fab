"""Menu maintenance screen."""

from __future__ import annotations

import logging

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.reactive import reactive
from textual.screen import Screen
from textual.widgets import Footer, Header, Static

from table_orders.errors import OrderError
from table_orders.menu_admin import MenuAdmin
from table_orders.menu_item_modal import MenuItemModal
from table_orders.models import MenuItem
from table_orders.rendering import format_menu_item, render_window, visible_rows

logger = logging.getLogger(__name__)


class MenuScreen(Screen):
    """All menu items, active or not. A adds, X deactivates."""

    CSS = """
    #menu-pane {
        height: 1fr;
        border: round $secondary;
        padding: 1;
    }

    #menu-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #menu-status {
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
        ("a", "add_item", "Add item"),
        ("x", "deactivate_selected", "Remove item"),
    ]

    def __init__(self, admin: MenuAdmin) -> None:
        super().__init__()
        self.admin = admin
        self.items: list[MenuItem] = []
        self.system_status = ""

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="menu-pane"):
            yield Static("Menu", classes="pane-title")
            yield Static("(menu is empty)", id="menu-list")
            yield Static(id="menu-status")
        yield Footer()

    def on_mount(self) -> None:
        self.run_worker(self._reload(), group="menu", exclusive=True)

    async def _reload(self) -> None:
        try:
            self.items = await self.admin.list_all()
        except OrderError as exc:
            self.system_status = f"Could not load the menu: {exc}"
        self._refresh_menu()

    def action_move_selection(self, delta: int) -> None:
        if not self.items:
            return
        if self.selected_index is None:
            self.selected_index = 0 if delta > 0 else len(self.items) - 1
        else:
            self.selected_index = (self.selected_index + delta) % len(self.items)
        self._refresh_menu()

    def action_add_item(self) -> None:
        self.app.push_screen(MenuItemModal(), callback=self._on_item_entered)

    def _on_item_entered(self, values: dict[str, str] | None) -> None:
        if values is None:
            return
        self.run_worker(self._add(values), group="menu-write")

    async def _add(self, values: dict[str, str]) -> None:
        try:
            item = await self.admin.add_item(
                name=values["name"],
                price=values["price"],
                description=values["description"],
                category=values["category"],
            )
        except OrderError as exc:
            self.system_status = str(exc)
            self._refresh_menu()
            return
        self.system_status = f"Added {item.name}"
        await self._reload()

    def action_deactivate_selected(self) -> None:
        if self.selected_index is None or not (0 <= self.selected_index < len(self.items)):
            return
        item = self.items[self.selected_index]
        if not item.active:
            self.system_status = f"{item.name} is already inactive"
            self._refresh_menu()
            return
        self.run_worker(self._deactivate(item), group="menu-write")

    async def _deactivate(self, item: MenuItem) -> None:
        try:
            await self.admin.deactivate(item.id)
        except OrderError as exc:
            logger.warning("deactivate_failed item_id=%s error=%r", item.id, exc)
            self.system_status = f"Could not remove {item.name}: {exc}"
            self._refresh_menu()
            return
        self.system_status = f"Removed {item.name} from the menu"
        await self._reload()

    def _refresh_menu(self) -> None:
        try:
            menu_widget = self.query_one("#menu-list", Static)
            status_widget = self.query_one("#menu-status", Static)
        except NoMatches:
            return

        if not self.items:
            self.selected_index = None
        elif self.selected_index is None:
            self.selected_index = 0
        elif self.selected_index >= len(self.items):
            self.selected_index = len(self.items) - 1

        rows = [format_menu_item(item, show_active=True) for item in self.items]
        menu_widget.update(
            render_window(rows, self.selected_index, visible_rows(menu_widget.size.height), "(menu is empty)")
        )
        status_widget.update(self.system_status)
