"""Mutation API: the operations the CLI (or any other caller) invokes.

Each method composes Item Model validation with InventoryStore calls and
raises only InventoryError subclasses. The store is passed in explicitly;
there is no module-level catalog.
"""

from __future__ import annotations

from typing import Optional

from stockroom.errors import InvalidQuantityError
from stockroom.models import (
    UNSET,
    CategoryTotals,
    InventoryItem,
    InventorySummary,
    ItemPatch,
    Price,
    validate,
)
from stockroom.storage import InventoryStore, ItemListing


class Inventory:
    """Operation-level surface over one InventoryStore."""

    def __init__(self, store: InventoryStore) -> None:
        self.store = store

    def add_item(
        self,
        name: str,
        quantity: int,
        category: Optional[str] = None,
        unit_price: Price = 0,
    ) -> InventoryItem:
        checked = validate(name, quantity, category, unit_price)
        item_id = self.store.insert(checked)
        return InventoryItem.from_validated(item_id, checked)

    def get_item(self, item_id: int) -> InventoryItem:
        return self.store.get(item_id)

    def remove_item(self, item_id: int) -> None:
        self.store.remove(item_id)

    def adjust_quantity(self, item_id: int, delta: int) -> InventoryItem:
        """Add `delta` (may be negative) to an item's quantity.

        Fails with InvalidQuantityError, leaving the item untouched, if the
        result would drop below zero.
        """
        with self.store.locked():
            item = self.store.get(item_id)
            new_quantity = item.quantity + delta
            if new_quantity < 0:
                raise InvalidQuantityError(item_id, item.quantity, delta)
            return self.store.update(item_id, ItemPatch(quantity=new_quantity))

    def update_item(
        self,
        item_id: int,
        patch: Optional[ItemPatch] = None,
        *,
        name=UNSET,
        quantity=UNSET,
        category=UNSET,
        unit_price=UNSET,
    ) -> InventoryItem:
        """Apply a partial change, given as an ItemPatch or as keyword fields."""
        if patch is None:
            patch = ItemPatch(
                name=name, quantity=quantity, category=category, unit_price=unit_price
            )
        return self.store.update(item_id, patch)

    def list_items(self, category: Optional[str] = None) -> ItemListing:
        return self.store.list(category)

    def low_stock(self, threshold: int) -> list[InventoryItem]:
        """Items whose quantity is strictly below `threshold`, by ascending id."""
        return [item for item in self.store.list() if item.quantity < threshold]

    def summary(self) -> InventorySummary:
        """Totals over the whole catalog, broken down by category.

        Categories are ordered alphabetically (case-insensitive) with
        uncategorized items last.
        """
        result = InventorySummary()
        groups: dict[Optional[str], CategoryTotals] = {}
        for item in self.store.list():
            key = item.category.casefold() if item.category else None
            totals = groups.get(key)
            if totals is None:
                # First spelling seen names the group
                totals = groups[key] = CategoryTotals(category=item.category)
            totals.items += 1
            totals.units += item.quantity
            totals.value += item.total_value

            result.items += 1
            result.units += item.quantity
            result.value += item.total_value

        named = sorted((k for k in groups if k is not None))
        result.by_category = [groups[k] for k in named]
        if None in groups:
            result.by_category.append(groups[None])
        return result
