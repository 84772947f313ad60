"""
Data types shared by the extractor, engine and filter.

Catalog records are owned by the catalog provider and only read here;
ScoredItem wraps one record with the similarity from a single matching run.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .errors import DimensionMismatchError


@dataclass(frozen=True, eq=False)
class Fingerprint:
    """
    Per-channel color distribution of an image.

    Each channel is a float64 vector of bin frequencies summing to 1.
    """

    red: np.ndarray
    green: np.ndarray
    blue: np.ndarray

    def __post_init__(self):
        lengths = {len(self.red), len(self.green), len(self.blue)}
        if len(lengths) != 1:
            raise DimensionMismatchError(
                f"Fingerprint channel dimensions differ: {sorted(lengths)}"
            )

    @property
    def bins(self) -> int:
        return len(self.red)

    def channels(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        return self.red, self.green, self.blue

    def as_array(self) -> np.ndarray:
        """Stack channels into a (3, bins) array."""
        return np.vstack(self.channels())


_REQUIRED_FIELDS = ("id", "name", "category", "price", "image_url")


@dataclass(frozen=True)
class CatalogItem:
    id: str
    name: str
    category: str
    price: float
    image_url: str
    brand: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CatalogItem":
        """
        Build an item from a provider record (e.g. a JSON object).

        Raises:
            ValueError: If a required field is missing.
        """
        missing = [k for k in _REQUIRED_FIELDS if record.get(k) is None]
        if missing:
            raise ValueError(f"Catalog record missing fields: {', '.join(missing)}")

        return cls(
            id=str(record["id"]),
            name=str(record["name"]),
            category=str(record["category"]),
            price=float(record["price"]),
            image_url=str(record["image_url"]),
            brand=record.get("brand") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "price": self.price,
            "brand": self.brand,
            "image_url": self.image_url,
        }


@dataclass(frozen=True)
class ScoredItem:
    item: CatalogItem
    similarity: int = field(default=0)

    @property
    def id(self) -> str:
        return self.item.id

    @property
    def name(self) -> str:
        return self.item.name

    @property
    def category(self) -> str:
        return self.item.category

    def to_dict(self) -> Dict[str, Any]:
        result = self.item.to_dict()
        result["similarity"] = self.similarity
        return result
