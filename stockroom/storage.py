"""Storage engine: the single owner of the live catalog.

InventoryStore holds the authoritative items in memory, assigns ids, and
commits every change through a Backend before making it visible. One
re-entrant lock serializes all access; a mutation holds it across lookup,
validation, backend commit and the in-memory swap, so no caller ever sees a
half-applied change.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from stockroom.backends import Backend, MemoryBackend, backend_for
from stockroom.errors import ItemNotFoundError
from stockroom.models import Catalog, InventoryItem, ItemPatch, ValidatedItem


def _category_key(category: Optional[str]) -> Optional[str]:
    if category is None:
        return None
    return category.strip().casefold() or None


class ItemListing:
    """Lazy, restartable view over the catalog.

    Nothing is read until iteration starts. Each iteration snapshots the
    current items under the store lock and yields them by ascending id, so
    two passes with no mutation in between produce identical sequences.
    """

    def __init__(self, store: InventoryStore, category: Optional[str] = None) -> None:
        self._store = store
        self.category = category

    def __iter__(self) -> Iterator[InventoryItem]:
        wanted = _category_key(self.category)
        for item in self._store._snapshot():
            if wanted is not None and _category_key(item.category) != wanted:
                continue
            yield item

    def __repr__(self) -> str:
        return f"ItemListing(category={self.category!r})"


class InventoryStore:
    """Key-indexed item store with atomic insert/update/remove."""

    def __init__(self, backend: Backend | None = None) -> None:
        self.backend = backend if backend is not None else MemoryBackend()
        self._lock = threading.RLock()
        self._catalog: Catalog = self.backend.load()

    @classmethod
    def open(cls, location: str | Path) -> InventoryStore:
        """Open the store at a path; see backends.backend_for for the rules."""
        return cls(backend_for(location))

    @contextmanager
    def locked(self) -> Iterator[InventoryStore]:
        """Hold exclusive access across a multi-step read-modify-write."""
        with self._lock:
            yield self

    def insert(self, item: ValidatedItem) -> int:
        with self._lock:
            item_id = self._catalog.next_id
            record = InventoryItem.from_validated(item_id, item)
            self.backend.write(record, item_id + 1)
            self._catalog.items[item_id] = record
            self._catalog.next_id = item_id + 1
            return item_id

    def get(self, item_id: int) -> InventoryItem:
        with self._lock:
            try:
                return self._catalog.items[item_id]
            except KeyError:
                raise ItemNotFoundError(item_id) from None

    def update(self, item_id: int, patch: ItemPatch) -> InventoryItem:
        """Merge `patch` into the item, re-validate, and commit."""
        with self._lock:
            current = self.get(item_id)
            merged = patch.apply(current)
            record = InventoryItem.from_validated(item_id, merged)
            if record != current:
                self.backend.write(record, self._catalog.next_id)
                self._catalog.items[item_id] = record
            return record

    def remove(self, item_id: int) -> None:
        with self._lock:
            self.get(item_id)
            self.backend.delete(item_id)
            del self._catalog.items[item_id]

    def list(self, category: Optional[str] = None) -> ItemListing:
        return ItemListing(self, category)

    def __len__(self) -> int:
        with self._lock:
            return len(self._catalog.items)

    def _snapshot(self) -> list[InventoryItem]:
        with self._lock:
            return [self._catalog.items[i] for i in sorted(self._catalog.items)]
