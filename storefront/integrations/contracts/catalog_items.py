"""
Catalogue item contract.

Upstream product records are heterogeneous: the same value can live under
several keys depending on which endpoint produced the record (``defaultPrice``
on listing payloads, ``price`` on older documents, ``starRating`` on imported
items, ...). ``FIELD_CHAINS`` is the single place where the lookup order for
every such value is declared; ``CatalogItem.from_record`` walks those chains
so the filter and sort stages only ever see normalised attributes.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
DEFAULT_WEIGHT = 100
BESTSELLER_BADGE = "Best Seller"

# Candidate keys per normalised attribute, highest priority first.
FIELD_CHAINS: Dict[str, Tuple[str, ...]] = {
    "id": ("_id", "id"),
    "name": ("name", "title"),
    "description": ("description",),
    "short_description": ("shortDescription", "short_description"),
    "price": ("defaultPrice", "price"),
    "original_price": ("defaultOriginalPrice", "originalPrice"),
    "stock": ("stock", "countInStock"),
    "rating": ("averageRating", "rating", "starRating"),
    "category": ("category", "categoryId"),
    "is_bestseller": ("isBestseller", "bestseller", "is_bestseller"),
    "weight": ("weight",),
    "created_at": ("createdAt", "created_at", "launchedAt"),
    "sales": ("totalSales", "purchases", "sales"),
}

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _is_blank(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (int, float)) and value == 0:
        return True
    return False


def first_present(record: Mapping[str, Any], keys: Sequence[str], default: Any = None) -> Any:
    """Return the first candidate that is not None, blank, zero or False."""
    for key in keys:
        value = record.get(key)
        if _is_blank(value):
            continue
        return value
    return default


def resolve(record: Mapping[str, Any], attribute: str, default: Any = None) -> Any:
    return first_present(record, FIELD_CHAINS[attribute], default)


def parse_float(value: Any, default: float = 0.0) -> float:
    """Lenient float parsing: ``"4.5 stars"`` -> 4.5, garbage -> ``default``."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match:
            return float(match.group(1))
    return default


def parse_timestamp(value: Any) -> datetime:
    """ISO-8601 strings or epoch milliseconds; anything else maps to the epoch."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return EPOCH
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return EPOCH
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return EPOCH


def normalize_weight(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _string_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if isinstance(v, (str, int, float))]
    return []


def _is_bestseller_badge(badge: str) -> bool:
    return re.sub(r"[\s_-]+", "", badge).casefold() == "bestseller"


class CatalogItem(BaseModel):
    """One product as seen by the storefront after normalisation.

    Instances are immutable; the untouched upstream record is kept on ``raw``
    so presentation code can still reach fields this model does not lift.
    """

    model_config = ConfigDict(frozen=True)

    id: str = ""
    name: str = ""
    description: str = ""
    short_description: str = ""
    price: float = 0.0
    original_price: Optional[float] = None
    stock: int = 0
    rating: float = 0.0
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    badges: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    is_bestseller: bool = False
    weight: str = str(DEFAULT_WEIGHT)
    created_at: datetime = EPOCH
    sales: float = 0.0
    raw: Dict[str, Any] = Field(default_factory=dict)

    @property
    def on_sale(self) -> bool:
        return bool(self.original_price) and self.original_price != self.price

    @property
    def bestseller(self) -> bool:
        return self.is_bestseller or any(_is_bestseller_badge(b) for b in [*self.badges, *self.tags])

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CatalogItem":
        category = resolve(record, "category")
        category_id: Optional[str] = None
        category_name: Optional[str] = None
        if isinstance(category, Mapping):
            cat_id = first_present(category, ("_id", "id", "slug"))
            category_id = str(cat_id) if cat_id is not None else None
            cat_name = category.get("name")
            category_name = str(cat_name) if cat_name else None
        elif category is not None:
            category_id = str(category)

        original_price = resolve(record, "original_price")
        identifier = resolve(record, "id", "")

        return cls(
            id=str(identifier),
            name=str(resolve(record, "name", "")),
            description=str(resolve(record, "description", "")),
            short_description=str(resolve(record, "short_description", "")),
            price=parse_float(resolve(record, "price", 0)),
            original_price=parse_float(original_price) if original_price is not None else None,
            stock=int(parse_float(resolve(record, "stock", 0))),
            rating=parse_float(resolve(record, "rating", 0)),
            category_id=category_id,
            category_name=category_name,
            badges=_string_list(record.get("badges")),
            tags=_string_list(record.get("tags")),
            is_bestseller=bool(resolve(record, "is_bestseller", False)),
            weight=normalize_weight(resolve(record, "weight", DEFAULT_WEIGHT)),
            created_at=parse_timestamp(resolve(record, "created_at")),
            sales=parse_float(resolve(record, "sales", 0)),
            raw=dict(record),
        )
