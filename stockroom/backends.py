"""Persistence backends beneath the InventoryStore.

A backend only moves records to and from durable storage. It never decides
ids or checks invariants; InventoryStore does that and calls the backend to
commit. Every backend failure surfaces as StorageIOError.

Three implementations:
- MemoryBackend    dict-backed, nothing survives the process
- JsonFileBackend  one JSON document, rewritten atomically per commit
- SqliteBackend    items + meta tables, one transaction per commit
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Iterator, Protocol

from stockroom.errors import StorageIOError, ValidationError
from stockroom.models import Catalog, InventoryItem

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

SQLITE_SUFFIXES = (".db", ".sqlite", ".sqlite3")


class Backend(Protocol):
    def load(self) -> Catalog:
        """Read the whole catalog. A store that was never written is empty."""
        ...

    def write(self, item: InventoryItem, next_id: int) -> None:
        """Insert or replace one item and record the id counter, in one commit."""
        ...

    def delete(self, item_id: int) -> None:
        """Drop one item. The id counter is left untouched."""
        ...


class MemoryBackend:
    """Keeps the catalog in a dict. Used in tests and for `--db :memory:`."""

    def __init__(self, catalog: Catalog | None = None) -> None:
        self._catalog = catalog.copy() if catalog else Catalog()

    def load(self) -> Catalog:
        return self._catalog.copy()

    def write(self, item: InventoryItem, next_id: int) -> None:
        self._catalog.items[item.id] = item
        self._catalog.next_id = next_id

    def delete(self, item_id: int) -> None:
        self._catalog.items.pop(item_id, None)


class JsonFileBackend:
    """Whole-catalog JSON document.

    Layout:
        {"version": 1, "next_id": 4, "items": [{"id": 1, ...}, ...]}

    Each commit writes a temp file in the same directory and renames it over
    the target, so a crash mid-write leaves the previous document intact.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._catalog: Catalog | None = None

    def load(self) -> Catalog:
        if not self.path.exists():
            logger.debug("No catalog at %s, starting empty", self.path)
            self._catalog = Catalog()
            return self._catalog.copy()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            catalog = self._decode(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError, ValidationError) as e:
            raise StorageIOError(f"cannot read {self.path}", e) from e
        logger.debug("Loaded %d items from %s", len(catalog.items), self.path)
        self._catalog = catalog
        return catalog.copy()

    def write(self, item: InventoryItem, next_id: int) -> None:
        catalog = self._current().copy()
        catalog.items[item.id] = item
        catalog.next_id = next_id
        self._commit(catalog)

    def delete(self, item_id: int) -> None:
        catalog = self._current().copy()
        catalog.items.pop(item_id, None)
        self._commit(catalog)

    def _current(self) -> Catalog:
        if self._catalog is None:
            self.load()
        return self._catalog

    @staticmethod
    def _decode(data: dict) -> Catalog:
        version = data.get("version", FORMAT_VERSION)
        if version != FORMAT_VERSION:
            raise ValueError(f"unsupported catalog version {version}")
        items = {}
        for raw in data.get("items", []):
            item = InventoryItem.from_dict(raw)
            items[item.id] = item
        return Catalog(next_id=int(data.get("next_id", 1)), items=items)

    @staticmethod
    def _encode(catalog: Catalog) -> dict:
        return {
            "version": FORMAT_VERSION,
            "next_id": catalog.next_id,
            "items": [catalog.items[i].to_dict() for i in sorted(catalog.items)],
        }

    def _commit(self, catalog: Catalog) -> None:
        payload = json.dumps(self._encode(catalog), indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload + "\n")
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageIOError(f"cannot write {self.path}", e) from e
        self._catalog = catalog
        logger.debug("Committed %d items to %s", len(catalog.items), self.path)


class SqliteBackend:
    """Embedded SQLite database.

    Tables:
        items(id INTEGER PRIMARY KEY, name, quantity, category, unit_price TEXT)
        meta(key TEXT PRIMARY KEY, value)  -- holds next_id
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._initialized = False

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection for one operation; always closed on exit."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with closing(sqlite3.connect(self.path)) as conn:
                conn.row_factory = sqlite3.Row
                if not self._initialized:
                    self._init_schema(conn)
                yield conn
        except (sqlite3.Error, OSError) as e:
            raise StorageIOError(f"database error at {self.path}", e) from e

    def _init_schema(self, conn: sqlite3.Connection) -> None:
        with conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS items (
                    id INTEGER PRIMARY KEY,
                    name TEXT NOT NULL,
                    quantity INTEGER NOT NULL CHECK (quantity >= 0),
                    category TEXT,
                    unit_price TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS meta (
                    key TEXT PRIMARY KEY,
                    value INTEGER NOT NULL
                )
            """)
            conn.execute("INSERT OR IGNORE INTO meta (key, value) VALUES ('next_id', 1)")
        self._initialized = True

    def load(self) -> Catalog:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT id, name, quantity, category, unit_price FROM items ORDER BY id"
            ).fetchall()
            next_id = conn.execute(
                "SELECT value FROM meta WHERE key = 'next_id'"
            ).fetchone()["value"]
        items = {}
        try:
            for row in rows:
                item = InventoryItem.from_dict(dict(row))
                items[item.id] = item
        except (ValueError, TypeError, KeyError, ValidationError) as e:
            raise StorageIOError(f"corrupt record in {self.path}", e) from e
        logger.debug("Loaded %d items from %s", len(items), self.path)
        return Catalog(next_id=next_id, items=items)

    def write(self, item: InventoryItem, next_id: int) -> None:
        with self._connect() as conn, conn:
            conn.execute(
                "INSERT OR REPLACE INTO items (id, name, quantity, category, unit_price) "
                "VALUES (?, ?, ?, ?, ?)",
                (item.id, item.name, item.quantity, item.category, str(item.unit_price)),
            )
            conn.execute("UPDATE meta SET value = ? WHERE key = 'next_id'", (next_id,))
        logger.debug("Committed item %d to %s", item.id, self.path)

    def delete(self, item_id: int) -> None:
        with self._connect() as conn, conn:
            conn.execute("DELETE FROM items WHERE id = ?", (item_id,))
        logger.debug("Deleted item %d from %s", item_id, self.path)


def backend_for(location: str | Path) -> Backend:
    """Pick a backend from a data location.

    ':memory:' gives a MemoryBackend, a .db/.sqlite/.sqlite3 path gives
    SqliteBackend, anything else is a JSON file.
    """
    if str(location) == ":memory:":
        return MemoryBackend()
    path = Path(location).expanduser()
    if path.suffix.lower() in SQLITE_SUFFIXES:
        return SqliteBackend(path)
    return JsonFileBackend(path)
