from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from storefront.integrations.contracts.catalog_items import CatalogItem

logger = logging.getLogger(__name__)

# Envelope keys the catalogue API has used for product lists, in lookup order.
ENVELOPE_KEYS = ("products", "data")


class IntegrationResponseError(ValueError):
    def __init__(self, message: str, *, payload: Optional[Any] = None) -> None:
        super().__init__(message)
        self.payload = payload


class CollectionResponseModel(BaseModel):
    records: List[Dict[str, Any]] = Field(default_factory=list)
    envelope: Optional[str] = None
    skipped: int = 0


def unwrap_collection(raw: Any) -> CollectionResponseModel:
    """Accept a bare list or a ``{products: [...]}`` / ``{data: [...]}`` envelope."""
    envelope: Optional[str] = None
    if isinstance(raw, list):
        entries = raw
    elif isinstance(raw, dict):
        entries = None
        for key in ENVELOPE_KEYS:
            if isinstance(raw.get(key), list):
                entries = raw[key]
                envelope = key
                break
        if entries is None:
            raise IntegrationResponseError(
                f"Collection payload has none of the keys: {', '.join(ENVELOPE_KEYS)}",
                payload=raw,
            )
    else:
        raise IntegrationResponseError(
            f"Collection payload must be a list or an object, got {type(raw).__name__}",
            payload=raw,
        )

    records = [entry for entry in entries if isinstance(entry, dict)]
    skipped = len(entries) - len(records)
    if skipped:
        logger.warning("Skipped %s non-object entries in catalogue payload", skipped)

    return _build_model(
        CollectionResponseModel,
        {"records": records, "envelope": envelope, "skipped": skipped},
        raw,
    )


def normalize_collection_response(raw: Any) -> List[CatalogItem]:
    collection = unwrap_collection(raw)
    items: List[CatalogItem] = []
    for record in collection.records:
        try:
            items.append(CatalogItem.from_record(record))
        except ValidationError as exc:
            raise IntegrationResponseError(f"Catalogue item validation failed: {exc}", payload=record) from exc
    return items


def _build_model(model_type, payload: Dict[str, Any], raw: Any):
    try:
        return model_type(**payload)
    except ValidationError as exc:
        raise IntegrationResponseError(f"Response validation failed: {exc}", payload=raw) from exc
