"""
Result filtering by minimum similarity and category.

Filtering is a pure view over an already ranked run. It never reloads
images or re-scores, so it can run on every change of a filter control.
"""

import logging
from typing import List, Optional, Sequence

from .models import ScoredItem

logger = logging.getLogger(__name__)

MIN_SIMILARITY = 0
MAX_SIMILARITY = 100


def clamp_similarity(value) -> int:
    """
    Coerce a user-supplied threshold to an integer in [0, 100].

    Non-numeric input falls back to 0 (no threshold).
    """
    try:
        value = int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        logger.debug(f"Ignoring non-numeric similarity threshold {value!r}")
        return MIN_SIMILARITY
    return max(MIN_SIMILARITY, min(MAX_SIMILARITY, value))


def filter_matches(items: Sequence[ScoredItem],
                   min_similarity: int = 0,
                   category: Optional[str] = "") -> List[ScoredItem]:
    """
    Keep items scoring at least min_similarity and in the given category.

    Args:
        items: Ranked results from a match run.
        min_similarity: Inclusive lower bound on similarity (0-100).
        category: Category label to keep; empty or None keeps all.

    Returns:
        Matching items in input order.
    """
    return [
        x for x in items
        if x.similarity >= min_similarity
        and (not category or x.category == category)
    ]
