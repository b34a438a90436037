"""Mutation API tests.

Covers the add/adjust/remove walkthrough, the non-negativity guarantees,
and the low-stock and summary reports.
"""

from decimal import Decimal

import pytest

from stockroom.errors import (
    InvalidQuantityError,
    InventoryError,
    ItemNotFoundError,
    NegativePriceError,
    NegativeQuantityError,
)
from stockroom.models import ItemPatch
from stockroom.service import Inventory
from stockroom.storage import InventoryStore


def test_widget_walkthrough(inv):
    """Add, over-adjust, adjust, remove, then look it up again."""
    item = inv.add_item("Widget", 10, "Hardware", Decimal("2.50"))
    assert item.id == 1

    with pytest.raises(InvalidQuantityError):
        inv.adjust_quantity(1, -15)
    assert inv.get_item(1).quantity == 10

    assert inv.adjust_quantity(1, -5).quantity == 5

    inv.remove_item(1)
    with pytest.raises(ItemNotFoundError):
        inv.get_item(1)


def test_add_returns_stored_copy(inv):
    item = inv.add_item(" Bolt ", 100, None, "0.25")
    assert item == inv.get_item(item.id)
    assert item.name == "Bolt"
    assert item.category is None


def test_add_invalid_input_stores_nothing(inv):
    with pytest.raises(NegativeQuantityError):
        inv.add_item("Widget", -1)
    with pytest.raises(NegativePriceError):
        inv.add_item("Widget", 1, unit_price="-2")
    assert list(inv.list_items()) == []
    # Failed adds do not burn ids
    assert inv.add_item("Widget", 1).id == 1


def test_adjust_to_exactly_zero(inv):
    item = inv.add_item("LastOne", 3)
    assert inv.adjust_quantity(item.id, -3).quantity == 0


def test_adjust_positive_and_zero_delta(inv):
    item = inv.add_item("Widget", 3)
    assert inv.adjust_quantity(item.id, 7).quantity == 10
    assert inv.adjust_quantity(item.id, 0).quantity == 10


def test_invalid_quantity_error_details(inv):
    item = inv.add_item("Widget", 2)
    with pytest.raises(InvalidQuantityError) as exc:
        inv.adjust_quantity(item.id, -3)
    assert (exc.value.item_id, exc.value.current, exc.value.delta) == (item.id, 2, -3)


def test_adjust_missing_item(inv):
    with pytest.raises(ItemNotFoundError):
        inv.adjust_quantity(99, 1)


def test_update_with_keywords_and_patch(inv):
    item = inv.add_item("Widget", 10, "Hardware", "2.50")
    updated = inv.update_item(item.id, unit_price="2.75", category=None)
    assert updated.unit_price == Decimal("2.75")
    assert updated.category is None
    assert updated.quantity == 10

    renamed = inv.update_item(item.id, ItemPatch(name="Sprocket"))
    assert renamed.name == "Sprocket"
    assert renamed.unit_price == Decimal("2.75")


def test_update_with_nothing_changes_nothing(inv):
    item = inv.add_item("Widget", 10)
    assert inv.update_item(item.id) == item


def test_every_failure_is_an_inventory_error(inv):
    failures = [
        lambda: inv.add_item("", 1),
        lambda: inv.get_item(5),
        lambda: inv.remove_item(5),
        lambda: inv.update_item(5, quantity=1),
        lambda: inv.adjust_quantity(5, 1),
    ]
    for call in failures:
        with pytest.raises(InventoryError):
            call()


def test_quantity_never_negative_after_mixed_operations(inv):
    a = inv.add_item("A", 5)
    b = inv.add_item("B", 0)
    for delta in (-3, -3, 4, -6, -1, 10, -20):
        for item_id in (a.id, b.id):
            try:
                inv.adjust_quantity(item_id, delta)
            except InvalidQuantityError:
                pass
    assert all(i.quantity >= 0 for i in inv.list_items())


def test_list_items_by_category(inv):
    inv.add_item("Bolt", 100, "Hardware")
    inv.add_item("Paint", 5, "Supplies")
    assert [i.name for i in inv.list_items("hardware")] == ["Bolt"]
    assert len(list(inv.list_items())) == 2


def test_separate_inventories_do_not_share_state():
    one = Inventory(InventoryStore())
    two = Inventory(InventoryStore())
    one.add_item("Widget", 1)
    assert len(list(one.list_items())) == 1
    assert list(two.list_items()) == []


# ===========================================================================
# Reports
# ===========================================================================

def test_low_stock_is_strictly_below_threshold(inv):
    inv.add_item("Abundant", 100)
    inv.add_item("Scarce", 3)
    inv.add_item("Borderline", 5)
    inv.add_item("Empty", 0)
    assert [i.name for i in inv.low_stock(5)] == ["Scarce", "Empty"]
    assert inv.low_stock(0) == []


def test_summary_totals_and_grouping(inv):
    inv.add_item("Bolt", 100, "Hardware", "0.25")
    inv.add_item("Nut", 200, "hardware", "0.10")
    inv.add_item("Paint", 4, "Supplies", "15")
    inv.add_item("Mystery", 1, None, "1.50")

    summary = inv.summary()
    assert summary.items == 4
    assert summary.units == 305
    assert summary.value == Decimal("106.50")

    assert [c.category for c in summary.by_category] == ["Hardware", "Supplies", None]
    hardware = summary.by_category[0]
    assert (hardware.items, hardware.units, hardware.value) == (2, 300, Decimal("45.00"))


def test_summary_of_empty_inventory(inv):
    summary = inv.summary()
    assert summary.items == 0
    assert summary.value == 0
    assert summary.by_category == []


def test_add_returns_item_without_reading_back(store, monkeypatch):
    """A concurrent remove after insert cannot turn a successful add into an error."""
    inv = Inventory(store)

    def gone(item_id):
        raise ItemNotFoundError(item_id)

    monkeypatch.setattr(store, "get", gone)
    item = inv.add_item("Widget", 3, "Hardware", "1.25")
    assert (item.id, item.name, item.quantity) == (1, "Widget", 3)
    assert item.unit_price == Decimal("1.25")
