"""
Filter criteria and sort specifications for the query pipeline.

Both are immutable so a caller's criteria can be reused across requests
without the pipeline or the service ever changing them. ``from_params`` /
``parse`` accept the storefront's URL parameter vocabulary.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

_BRACKET_RANGE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)\s*$")
_BRACKET_OPEN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*\+\s*$")

# Rating tokens offered by the storefront rating filter.
RATING_TOKENS = {"4+": 4.0, "4.5+": 4.5, "5": 5.0}


class Availability(str, Enum):
    IN_STOCK = "in-stock"
    ON_SALE = "on-sale"
    BESTSELLER = "bestseller"


class SortField(str, Enum):
    NAME = "name"
    PRICE = "price"
    RATING = "rating"
    RECENCY = "recency"
    POPULARITY = "popularity"


@dataclass(frozen=True)
class PriceBracket:
    """Lower bound inclusive, upper bound exclusive; ``upper=None`` is open-ended."""

    lower: float
    upper: Optional[float] = None

    def contains(self, price: float) -> bool:
        if price < self.lower:
            return False
        return self.upper is None or price < self.upper

    @classmethod
    def parse(cls, token: str) -> "PriceBracket":
        match = _BRACKET_OPEN.match(token)
        if match:
            return cls(lower=float(match.group(1)))
        match = _BRACKET_RANGE.match(token)
        if match:
            lower, upper = float(match.group(1)), float(match.group(2))
            if upper <= lower:
                raise ValueError(f"Empty price bracket: {token!r}")
            return cls(lower=lower, upper=upper)
        raise ValueError(f"Unrecognised price bracket: {token!r}")

    def __str__(self) -> str:
        lower = _fmt(self.lower)
        return f"{lower}+" if self.upper is None else f"{lower}-{_fmt(self.upper)}"


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_rating(token: Union[str, float, int]) -> float:
    if isinstance(token, (int, float)) and not isinstance(token, bool):
        return float(token)
    text = str(token).strip()
    if text in RATING_TOKENS:
        return RATING_TOKENS[text]
    value = float(text.rstrip("+"))
    if math.isnan(value):
        raise ValueError(f"Unrecognised rating threshold: {token!r}")
    return value


def _parse_availability(value: Any) -> Tuple[Availability, ...]:
    if isinstance(value, Availability):
        return (value,)
    if isinstance(value, str):
        tokens: Iterable[Any] = [t for t in value.split(",")]
    else:
        tokens = value
    classes = []
    for token in tokens:
        if isinstance(token, Availability):
            classes.append(token)
            continue
        text = str(token).strip().lower()
        if not text:
            continue
        try:
            classes.append(Availability(text))
        except ValueError:
            logger.warning("Ignoring unknown availability class %r", token)
    return tuple(dict.fromkeys(classes))


@dataclass(frozen=True)
class FilterCriteria:
    search: Optional[str] = None
    price_range: Optional[PriceBracket] = None
    availability: Tuple[Availability, ...] = ()
    min_rating: Optional[float] = None
    weight: Optional[str] = None
    category: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.active_names()

    def active_names(self) -> Tuple[str, ...]:
        names = []
        if self.search:
            names.append("search")
        if self.price_range is not None:
            names.append("price_range")
        if self.availability:
            names.append("availability")
        if self.min_rating is not None:
            names.append("min_rating")
        if self.weight:
            names.append("weight")
        if self.category:
            names.append("category")
        return tuple(names)

    @classmethod
    def from_params(cls, params: Optional[Mapping[str, Any]] = None) -> "FilterCriteria":
        """Build criteria from storefront URL parameters.

        Empty values are inactive. Unknown tokens are logged and ignored, the
        same way the storefront treats an unmatched filter option.
        """
        params = params or {}

        search = params.get("search")
        search = None if _blank(search) else str(search).strip()

        price_range = None
        price_token = params.get("priceRange", params.get("price"))
        if not _blank(price_token):
            try:
                price_range = PriceBracket.parse(str(price_token))
            except ValueError:
                logger.warning("Ignoring unknown price bracket %r", price_token)

        availability: Tuple[Availability, ...] = ()
        if not _blank(params.get("availability")):
            availability = _parse_availability(params["availability"])

        min_rating = None
        rating_token = params.get("rating", params.get("minRating"))
        if not _blank(rating_token):
            try:
                min_rating = parse_rating(rating_token)
            except ValueError:
                logger.warning("Ignoring unknown rating threshold %r", rating_token)

        weight = params.get("weight")
        weight = None if _blank(weight) else str(weight).strip()

        category = params.get("category")
        category = None if _blank(category) else str(category).strip()

        return cls(
            search=search,
            price_range=price_range,
            availability=availability,
            min_rating=min_rating,
            weight=weight,
            category=category,
        )


_SORT_TOKENS = {
    "name-asc": (SortField.NAME, False),
    "name-desc": (SortField.NAME, True),
    "price-asc": (SortField.PRICE, False),
    "price-low": (SortField.PRICE, False),
    "price-desc": (SortField.PRICE, True),
    "price-high": (SortField.PRICE, True),
    "rating-desc": (SortField.RATING, True),
    "rating": (SortField.RATING, True),
    "rating-asc": (SortField.RATING, False),
    "newest": (SortField.RECENCY, True),
    "oldest": (SortField.RECENCY, False),
    "popular": (SortField.POPULARITY, True),
    "popular-asc": (SortField.POPULARITY, False),
}

# Tokens meaning "keep the source order".
NATURAL_ORDER_TOKENS = frozenset({"", "relevance", "default", "featured"})


@dataclass(frozen=True)
class SortSpec:
    field: SortField
    descending: bool = False

    @classmethod
    def parse(cls, token: Optional[str]) -> Optional["SortSpec"]:
        """``None`` means natural order; unknown tokens raise ``ValueError``."""
        if token is None:
            return None
        text = str(token).strip().lower()
        if text in NATURAL_ORDER_TOKENS:
            return None
        if text not in _SORT_TOKENS:
            raise ValueError(f"Unknown sort option: {token!r}")
        field, descending = _SORT_TOKENS[text]
        return cls(field=field, descending=descending)

    def __str__(self) -> str:
        return f"{self.field.value}-{'desc' if self.descending else 'asc'}"
