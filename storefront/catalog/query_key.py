"""
Deterministic identifiers for catalogue queries.

A ``QueryKey`` addresses both the TTL cache and the coalescer's pending
index, so two callers asking for the same collection must always build equal
keys. Inputs are normalised (stripped, empty values dropped, extras sorted)
before the frozen dataclass is created.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class QueryKey:
    category: Optional[str] = None
    search: Optional[str] = None
    limit: Optional[int] = None
    extra: Tuple[Tuple[str, str], ...] = ()

    @classmethod
    def from_params(
        cls,
        category: Any = None,
        search: Any = None,
        limit: Any = None,
        extra: Optional[Mapping[str, Any]] = None,
        **kwargs: Any,
    ) -> "QueryKey":
        params: Dict[str, Any] = dict(extra or {})
        params.update(kwargs)
        pairs = []
        for name, value in params.items():
            cleaned = _clean(value)
            if cleaned is not None:
                pairs.append((str(name), cleaned))

        limit_value: Optional[int] = None
        if limit is not None and str(limit).strip():
            limit_value = int(limit)
            if limit_value < 1:
                raise ValueError(f"limit must be >= 1, got {limit_value}")

        return cls(
            category=_clean(category),
            search=_clean(search),
            limit=limit_value,
            extra=tuple(sorted(pairs)),
        )

    @classmethod
    def for_category(cls, category_id: Any, limit: Optional[int] = None) -> "QueryKey":
        return cls.from_params(category=category_id, limit=limit)

    def to_request_params(self) -> Dict[str, str]:
        params: Dict[str, str] = {}
        if self.category is not None:
            params["category"] = self.category
        if self.search is not None:
            params["search"] = self.search
        if self.limit is not None:
            params["limit"] = str(self.limit)
        for name, value in self.extra:
            params.setdefault(name, value)
        return params

    def __str__(self) -> str:
        parts = [
            f"category={self.category or ''}",
            f"search={self.search or ''}",
            f"limit={self.limit if self.limit is not None else ''}",
        ]
        parts.extend(f"{name}={value}" for name, value in self.extra)
        return "|".join(parts)
