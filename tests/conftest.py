"""Shared fixtures for stockroom tests."""

from pathlib import Path

import pytest

from stockroom.service import Inventory
from stockroom.storage import InventoryStore


@pytest.fixture
def store() -> InventoryStore:
    """Fresh in-memory store."""
    return InventoryStore()


@pytest.fixture
def inv(store: InventoryStore) -> Inventory:
    return Inventory(store)


@pytest.fixture(params=["inventory.json", "inventory.db"])
def db_path(request, tmp_path: Path) -> Path:
    """A not-yet-existing data file, once per file backend."""
    return tmp_path / request.param
