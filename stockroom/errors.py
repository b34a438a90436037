"""Error taxonomy for stockroom.

Everything the inventory core raises derives from InventoryError, so callers
(the CLI, tests, scripts) only ever need one except clause:

    InventoryError
    ├── ValidationError          bad caller input, fix and retry by hand
    │   ├── EmptyNameError
    │   ├── NegativeQuantityError
    │   └── NegativePriceError
    ├── StorageError
    │   ├── ItemNotFoundError    expected outcome for a missing id
    │   └── StorageIOError       backend unavailable, never retried
    └── InvalidQuantityError     adjustment would drive quantity below zero
"""

from __future__ import annotations


class InventoryError(Exception):
    """Base class for every error raised by the inventory core."""


class ValidationError(InventoryError):
    """A candidate item failed Item Model checks."""

    field: str = ""

    def __init__(self, message: str, field: str = "") -> None:
        super().__init__(message)
        if field:
            self.field = field


class EmptyNameError(ValidationError):
    field = "name"

    def __init__(self) -> None:
        super().__init__("name must not be empty")


class NegativeQuantityError(ValidationError):
    field = "quantity"

    def __init__(self, quantity: int) -> None:
        super().__init__(f"quantity must be >= 0 (got {quantity})")
        self.quantity = quantity


class NegativePriceError(ValidationError):
    field = "unit_price"

    def __init__(self, unit_price: object) -> None:
        super().__init__(f"unit_price must be a non-negative amount (got {unit_price})")
        self.unit_price = unit_price


class StorageError(InventoryError):
    """The Storage Engine could not satisfy a request."""


class ItemNotFoundError(StorageError):
    def __init__(self, item_id: int) -> None:
        super().__init__(f"no item with id {item_id}")
        self.item_id = item_id


class StorageIOError(StorageError):
    """The persistence backend failed. The original exception is kept as `cause`."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message if cause is None else f"{message}: {cause}")
        self.cause = cause


class InvalidQuantityError(InventoryError):
    def __init__(self, item_id: int, current: int, delta: int) -> None:
        super().__init__(
            f"cannot adjust item {item_id} by {delta}: only {current} in stock"
        )
        self.item_id = item_id
        self.current = current
        self.delta = delta
