"""
Histogram intersection scoring and result ranking.

Two fingerprints are compared by summing the per-bin minimum of their
distributions over all channels and averaging across the three channels.
Since each channel sums to 1 the result stays in [0, 1]: identical
fingerprints score 1, fingerprints with no overlapping bins score 0.
"""

import math
import logging
from typing import List, Sequence

import numpy as np

from .errors import DimensionMismatchError
from .models import Fingerprint, ScoredItem

logger = logging.getLogger(__name__)

N_CHANNELS = 3


def score(a: Fingerprint, b: Fingerprint) -> float:
    """
    Histogram intersection similarity of two fingerprints.

    Args:
        a: First fingerprint.
        b: Second fingerprint.

    Returns:
        Similarity in [0, 1]. Symmetric in its arguments.

    Raises:
        DimensionMismatchError: If the bin counts differ.
    """
    if a.bins != b.bins:
        raise DimensionMismatchError(
            f"Fingerprint dimension {a.bins} doesn't match "
            f"fingerprint dimension {b.bins}"
        )

    intersection = float(np.minimum(a.as_array(), b.as_array()).sum())
    similarity = intersection / N_CHANNELS

    # Guard against float drift past the bounds
    return min(1.0, max(0.0, similarity))


def to_percentage(similarity: float) -> int:
    """Scale a [0, 1] similarity to an integer percentage, rounding half up."""
    return int(math.floor(similarity * 100 + 0.5))


def rank_matches(items: Sequence[ScoredItem]) -> List[ScoredItem]:
    """
    Sort scored items by similarity, highest first.

    Equal scores keep their input (catalog) order.
    """
    return sorted(items, key=lambda x: -x.similarity)
