import asyncio

import pytest

from table_orders.catalog import MenuCatalog, matches_query
from table_orders.errors import NotFoundError, PersistenceError


@pytest.fixture
def catalog(fake_store) -> MenuCatalog:
    catalog = MenuCatalog(fake_store)
    asyncio.run(catalog.load())
    return catalog


def test_only_active_items_ordered_by_category(catalog):
    assert [item.name for item in catalog.items] == ["Soda", "Burger", "Fries"]


def test_filter_matches_name_or_category_case_insensitively(catalog):
    assert [item.id for item in catalog.filter("BUR")] == ["burger"]
    assert [item.id for item in catalog.filter("drinks")] == ["soda"]
    assert [item.id for item in catalog.filter("  ")] == ["soda", "burger", "fries"]


def test_filter_does_not_discard_loaded_items(catalog):
    catalog.filter("fries")

    assert len(catalog.items) == 3


def test_get_unknown_or_inactive_raises(catalog):
    with pytest.raises(NotFoundError):
        catalog.get("salad")
    with pytest.raises(NotFoundError):
        catalog.get("nope")


def test_failed_load_keeps_previous_snapshot(fake_store, catalog):
    fake_store.fail_with = PersistenceError("offline")

    with pytest.raises(PersistenceError):
        asyncio.run(catalog.load())

    assert len(catalog.items) == 3


def test_matches_query_handles_missing_category(menu):
    burger = menu[0]
    assert matches_query(burger, "main")
    assert not matches_query(burger, "dessert")
