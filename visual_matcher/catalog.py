"""
Catalog providers.

The engine only needs a list of CatalogItem records. Where they come from
(a database, an API, a file) is up to the provider. Providers return items
ordered by name.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Protocol, Union

from .models import CatalogItem

logger = logging.getLogger(__name__)


class CatalogProvider(Protocol):
    def load(self) -> List[CatalogItem]:
        ...


def _to_items(records: Iterable[Union[CatalogItem, Dict[str, Any]]]) -> List[CatalogItem]:
    items = [
        r if isinstance(r, CatalogItem) else CatalogItem.from_record(r)
        for r in records
    ]
    return sorted(items, key=lambda x: x.name)


class StaticCatalogProvider:
    """In-memory catalog built from items or plain record dicts."""

    def __init__(self, records: Iterable[Union[CatalogItem, Dict[str, Any]]]):
        self._items = _to_items(records)

    def load(self) -> List[CatalogItem]:
        return list(self._items)


class JsonCatalogProvider:
    """
    Catalog read from a JSON file holding an array of product records.

    Each record needs id, name, category, price and image_url; brand is
    optional. Records missing required fields are skipped with a warning.
    """

    def __init__(self, path: str):
        self.path = path

    def load(self) -> List[CatalogItem]:
        with open(self.path, "r", encoding="utf-8") as f:
            records = json.load(f)

        if not isinstance(records, list):
            raise ValueError(f"Catalog file {self.path} must contain a JSON array")

        items = []
        for i, record in enumerate(records):
            try:
                items.append(CatalogItem.from_record(record))
            except (TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping catalog record {i}: {e}")

        logger.info(f"Loaded {len(items)} catalog items from {self.path}")
        return _to_items(items)


def available_categories(items: Iterable[CatalogItem]) -> List[str]:
    """Sorted unique category labels, for the category filter control."""
    return sorted({x.category for x in items})
