"""New menu item entry modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from table_orders.errors import ValidationError
from table_orders.menu_admin import parse_price

FIELDS: tuple[tuple[str, str], ...] = (
    ("name", "Name"),
    ("price", "Price"),
    ("category", "Category"),
    ("description", "Description"),
)


class MenuItemModal(ModalScreen[dict[str, str] | None]):
    """Collect name, price, category and description for a new menu item."""

    CSS = """
    MenuItemModal {
        align: center middle;
        background: $background 60%;
    }

    #menu-item-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #menu-item-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #menu-item-fields {
        color: white;
        margin-bottom: 1;
    }

    #menu-item-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #menu-item-help {
        color: #dddddd;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self.values = {key: "" for key, _ in FIELDS}
        self.field_index = 0
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="menu-item-dialog"):
            yield Static("New Menu Item", id="menu-item-title")
            yield Static(id="menu-item-fields")
            yield Static(id="menu-item-error")
            yield Static("Tab/↑/↓ switch field. Enter confirm. Esc cancel.", id="menu-item-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        key = FIELDS[self.field_index][0]

        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            self._confirm()
            event.stop()
            return

        if event.key in {"tab", "down"}:
            self.field_index = (self.field_index + 1) % len(FIELDS)
        elif event.key in {"shift+tab", "up"}:
            self.field_index = (self.field_index - 1) % len(FIELDS)
        elif event.key == "backspace":
            self.values[key] = self.values[key][:-1]
        elif event.is_printable and event.character:
            self.values[key] += event.character
            self.error = ""
        else:
            return
        event.stop()
        self._refresh_content()

    def _confirm(self) -> None:
        if not self.values["name"].strip():
            self.error = "Name is required."
            self.field_index = 0
            self._refresh_content()
            return
        try:
            parse_price(self.values["price"])
        except ValidationError as exc:
            self.error = str(exc)
            self.field_index = 1
            self._refresh_content()
            return
        self.dismiss(dict(self.values))

    def _refresh_content(self) -> None:
        content = Text(style="white")
        for idx, (key, label) in enumerate(FIELDS):
            if idx > 0:
                content.append("\n")
            active = idx == self.field_index
            pointer = "➤ " if active else "  "
            cursor = "|" if active else ""
            content.append(f"{pointer}{label}: ", style="bold white" if active else "white")
            content.append(f"{self.values[key]}{cursor}")
        self.query_one("#menu-item-fields", Static).update(content)
        self.query_one("#menu-item-error", Static).update(self.error)
