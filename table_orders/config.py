"""Runtime configuration defaults for persistence, polling and logging."""

from __future__ import annotations

import logging
import os

DB_PATH = os.environ.get("TABLE_ORDERS_DB_PATH", "data/table_orders.db")

# Pending-order queue refresh cadence.
POLL_INTERVAL_SECONDS = 3.0

LOG_PATH = os.environ.get("TABLE_ORDERS_LOG_PATH", "/tmp/table-orders.log")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] %(message)s"

CURRENCY_SYMBOL = "R$"


def init_log(log_name: str = "table_orders") -> logging.Logger:
    """Route application logs to LOG_PATH; the TUI owns the terminal."""
    root = logging.getLogger("table_orders")
    if not root.handlers:
        try:
            handler: logging.Handler = logging.FileHandler(LOG_PATH, encoding="utf-8")
        except OSError:
            handler = logging.NullHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(LOG_LEVEL)
        root.propagate = False
    return logging.getLogger(log_name)
