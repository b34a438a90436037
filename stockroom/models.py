"""Data models for the stockroom inventory core.

InventoryItem, ValidatedItem, ItemPatch, Catalog, and the validate() gate
that every record passes before it reaches storage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from stockroom.errors import EmptyNameError, NegativePriceError, NegativeQuantityError

Price = Union[Decimal, int, float, str]


class _Unset:
    """Marker for ItemPatch fields that were not given."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


def _to_decimal(value: Price) -> Decimal:
    """Coerce a price to Decimal, raising NegativePriceError on garbage."""
    if isinstance(value, bool):
        raise NegativePriceError(value)
    if isinstance(value, Decimal):
        price = value
    else:
        # str() first so 2.3 becomes Decimal('2.3'), not the binary expansion
        try:
            price = Decimal(str(value).strip())
        except InvalidOperation:
            raise NegativePriceError(value) from None
    if not price.is_finite() or price < 0:
        raise NegativePriceError(value)
    if price.is_zero():
        # -0 is a valid spelling of zero; store it unsigned
        price = abs(price)
    return price


def _stored_int(value: object, name: str) -> int:
    """Read an integer field from storage without truncating."""
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("+-").isdigit():
        return int(value)
    raise ValueError(f"{name} must be an integer, got {value!r}")


def _normalize_category(category: Optional[str]) -> Optional[str]:
    if category is None:
        return None
    category = category.strip()
    return category or None


@dataclass(frozen=True)
class ValidatedItem:
    """An item's user-supplied fields after passing validate()."""

    name: str
    quantity: int
    category: Optional[str] = None
    unit_price: Decimal = Decimal("0")


def validate(
    name: str,
    quantity: int,
    category: Optional[str] = None,
    unit_price: Price = 0,
) -> ValidatedItem:
    """Check a candidate record and return its normalized form.

    Raises EmptyNameError, NegativeQuantityError or NegativePriceError,
    in that order of precedence.
    """
    name = (name or "").strip()
    if not name:
        raise EmptyNameError()
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise TypeError(f"quantity must be an int, not {type(quantity).__name__}")
    if quantity < 0:
        raise NegativeQuantityError(quantity)
    price = _to_decimal(unit_price)
    return ValidatedItem(
        name=name,
        quantity=quantity,
        category=_normalize_category(category),
        unit_price=price,
    )


@dataclass(frozen=True)
class InventoryItem:
    """One record in the catalog. Frozen: callers can never mutate store state."""

    id: int
    name: str
    quantity: int
    category: Optional[str] = None
    unit_price: Decimal = Decimal("0")

    @classmethod
    def from_validated(cls, item_id: int, item: ValidatedItem) -> InventoryItem:
        return cls(
            id=item_id,
            name=item.name,
            quantity=item.quantity,
            category=item.category,
            unit_price=item.unit_price,
        )

    def fields(self) -> ValidatedItem:
        """The record without its id."""
        return ValidatedItem(
            name=self.name,
            quantity=self.quantity,
            category=self.category,
            unit_price=self.unit_price,
        )

    @property
    def total_value(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict. Price is kept as a string."""
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "category": self.category,
            "unit_price": str(self.unit_price),
        }

    @classmethod
    def from_dict(cls, d: dict) -> InventoryItem:
        """Deserialize and re-validate a stored record."""
        item_id = _stored_int(d["id"], "id")
        if item_id <= 0:
            raise ValueError(f"id must be positive, got {item_id}")
        checked = validate(
            d.get("name", ""),
            _stored_int(d.get("quantity", 0), "quantity"),
            d.get("category"),
            d.get("unit_price", "0"),
        )
        return cls.from_validated(item_id, checked)


@dataclass(frozen=True)
class ItemPatch:
    """A partial change to an item. Fields left UNSET are not touched.

    `category=None` clears the category; leaving it UNSET keeps it.
    """

    name: Union[str, _Unset] = UNSET
    quantity: Union[int, _Unset] = UNSET
    category: Union[Optional[str], _Unset] = UNSET
    unit_price: Union[Price, _Unset] = UNSET

    @property
    def is_empty(self) -> bool:
        return all(
            v is UNSET for v in (self.name, self.quantity, self.category, self.unit_price)
        )

    def apply(self, item: InventoryItem) -> ValidatedItem:
        """Merge this patch over `item` and re-validate the result."""
        current = item.fields()
        return validate(
            current.name if self.name is UNSET else self.name,
            current.quantity if self.quantity is UNSET else self.quantity,
            current.category if self.category is UNSET else self.category,
            current.unit_price if self.unit_price is UNSET else self.unit_price,
        )


@dataclass
class Catalog:
    """Everything a backend persists: the live items and the id counter."""

    next_id: int = 1
    items: dict[int, InventoryItem] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Ids are never reused, even if the stored counter lags behind.
        if self.items:
            self.next_id = max(self.next_id, max(self.items) + 1)

    def copy(self) -> Catalog:
        return Catalog(next_id=self.next_id, items=dict(self.items))


@dataclass
class CategoryTotals:
    """Per-category line in an InventorySummary."""

    category: Optional[str]
    items: int = 0
    units: int = 0
    value: Decimal = Decimal("0")


@dataclass
class InventorySummary:
    """Aggregate figures over the whole catalog."""

    items: int = 0
    units: int = 0
    value: Decimal = Decimal("0")
    by_category: list[CategoryTotals] = field(default_factory=list)

