"""Entry point for the table-orders Textual app."""

from __future__ import annotations

import argparse

from table_orders.config import DB_PATH, init_log
from table_orders.order_app import TableOrdersApp


def main(argv: list[str] | None = None) -> None:
    """Run the Textual application."""
    parser = argparse.ArgumentParser(prog="table-orders", description="Restaurant table orders")
    parser.add_argument("--db", default=DB_PATH, help=f"SQLite database path (default: {DB_PATH})")
    args = parser.parse_args(argv)

    logger = init_log()
    logger.info("startup db=%s", args.db)
    TableOrdersApp(db_path=args.db).run()


if __name__ == "__main__":
    main()
