"""Rendering helpers shared by the screens."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from rich.text import Text

from table_orders.config import CURRENCY_SYMBOL
from table_orders.models import MenuItem, Order, OrderLine


def format_money(amount: Decimal) -> str:
    return f"{CURRENCY_SYMBOL} {amount:.2f}"


def category_style(category: str) -> str:
    """Return a stable badge style per category name."""
    palette = (
        "bold #ffffff on #b23a48",
        "bold #0b1f0f on #5fbf72",
        "bold #ffffff on #2f6db5",
        "bold #1f1600 on #e0b84c",
    )
    if not category:
        return "dim"
    return palette[sum(map(ord, category.lower())) % len(palette)]


def format_menu_item(item: MenuItem, show_active: bool = False) -> Text:
    text = Text()
    if item.category:
        text.append(f" {item.category} ", style=category_style(item.category))
        text.append(" ")
    text.append(item.name, style="bold" if item.active else "dim strike")
    text.append(f"  {format_money(item.price)}", style="dim" if not item.active else "")
    if show_active and not item.active:
        text.append("  (inactive)", style="italic dim")
    return text


def format_cart_line(line: OrderLine) -> Text:
    text = Text()
    text.append(line.name, style="bold")
    text.append(f"  {line.quantity}x {format_money(line.price)}", style="dim")
    text.append(f"  = {format_money(line.subtotal)}")
    return text


def format_created_time(created_at: str) -> str:
    try:
        return datetime.fromisoformat(created_at).astimezone().strftime("%H:%M:%S")
    except ValueError:
        return created_at


def format_order_card(order: Order) -> Text:
    text = Text()
    text.append(f"Table {order.table_number}", style="bold")
    text.append(f"  {format_created_time(order.created_at)}", style="dim")
    for line in order.items:
        text.append("\n    ")
        text.append(f"x{line.quantity} ", style="bold")
        text.append(line.name)
        text.append(f" ({format_money(line.price)})", style="dim")
    text.append("\n    ")
    text.append(f"Total: {format_money(order.total)}", style="bold green")
    return text


def visible_rows(height: int, default: int = 8) -> int:
    if height <= 0:
        return default
    return max(1, height)


def window_bounds(total: int, rows: int, selected: int | None) -> tuple[int, int]:
    """Slice of a list that keeps the selected row roughly centred."""
    if total <= 0:
        return (0, 0)

    rows = max(1, rows)
    if total <= rows:
        return (0, total)

    if selected is None:
        start = 0
    else:
        half = rows // 2
        start = selected - half
        start = max(0, start)
        start = min(start, total - rows)

    return (start, start + rows)


def render_window(rows: list[Text], selected: int | None, height: int, empty: str) -> Text | str:
    """Render a pointer list clipped to the widget height."""
    if not rows:
        return empty

    start, end = window_bounds(len(rows), height, selected)
    lines = Text()
    if start > 0:
        lines.append("⋮\n", style="dim")

    for idx in range(start, end):
        if idx > start:
            lines.append("\n")
        pointer = "➤ " if idx == selected else "  "
        lines.append(pointer)
        lines.append_text(rows[idx])

    if end < len(rows):
        lines.append("\n⋮", style="dim")
    return lines
