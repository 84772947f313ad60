"""
Visual product match engine.

Runs one matching pass:
    1. Extract the reference image fingerprint
    2. Fan out extraction + scoring over every catalog item
    3. Join on all items and rank by similarity

Each catalog item is independent. If one image fails to load, that item
is scored 0 and the rest of the catalog is unaffected. Only a failure on
the reference image aborts the run.
"""

import os
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, NamedTuple, Optional, Sequence

from .errors import MatchError, ReferenceImageError
from .histograms import HIST_BINS, RESIZE_DIM, extract_features
from .models import CatalogItem, Fingerprint, ScoredItem
from .preprocessing import ImageLoader, ImageSource
from .scoring import rank_matches, score, to_percentage

logger = logging.getLogger(__name__)

# Upper bound on concurrent catalog image loads. 1 runs sequentially.
MAX_WORKERS = int(os.environ.get("MATCH_MAX_WORKERS", "8"))


class ItemOutcome(NamedTuple):
    """Result slot for one catalog item: a score, or a degraded 0 with the error."""
    scored: ScoredItem
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class MatchEngine:
    """
    Ranks a catalog by color similarity to a reference image.

    Holds configuration only; every call to find_matches is an
    independent run.
    """

    def __init__(self,
                 loader=None,
                 max_workers: int = MAX_WORKERS,
                 bins: int = HIST_BINS,
                 size: int = RESIZE_DIM):
        """
        Args:
            loader: Image source resolver with a ``load(source)`` method.
                    Defaults to ImageLoader.
            max_workers: Concurrent catalog extractions.
            bins: Histogram bins per channel.
            size: Resample resolution used before counting.
        """
        self.loader = loader or ImageLoader()
        self.max_workers = max_workers
        self.bins = bins
        self.size = size

    def extract(self, source: ImageSource) -> Fingerprint:
        return extract_features(source, loader=self.loader,
                                bins=self.bins, size=self.size)

    def find_matches(self,
                     reference: ImageSource,
                     catalog: Sequence[CatalogItem]) -> List[ScoredItem]:
        """
        Score every catalog item against a reference image.

        Args:
            reference: The user-submitted image.
            catalog: Items to rank.

        Returns:
            Every catalog item with its similarity (0-100), sorted highest
            first. Equal scores keep catalog order. Not filtered.

        Raises:
            ReferenceImageError: If the reference image cannot be extracted.
        """
        try:
            reference_fp = self.extract(reference)
        except Exception as e:
            logger.error(f"Reference image extraction failed: {e}")
            raise ReferenceImageError(f"Could not process reference image: {e}") from e

        outcomes = self._score_catalog(reference_fp, list(catalog))

        failed = [o for o in outcomes if not o.ok]
        results = rank_matches([o.scored for o in outcomes])

        logger.info(
            f"Match run complete: {len(results)} items scored, "
            f"{len(failed)} failed"
        )
        return results

    def _score_catalog(self,
                       reference_fp: Fingerprint,
                       catalog: List[CatalogItem]) -> List[ItemOutcome]:
        if not catalog:
            return []

        if self.max_workers <= 1 or len(catalog) == 1:
            return [self._score_item(reference_fp, item) for item in catalog]

        workers = min(self.max_workers, len(catalog))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map() yields in submission order once every task has settled
            return list(executor.map(
                lambda item: self._score_item(reference_fp, item), catalog
            ))

    def _score_item(self,
                    reference_fp: Fingerprint,
                    item: CatalogItem) -> ItemOutcome:
        try:
            similarity = score(reference_fp, self.extract(item.image_url))
        except Exception as e:
            logger.warning(f"Failed to process product {item.id}: {e}",
                           exc_info=not isinstance(e, MatchError))
            return ItemOutcome(ScoredItem(item, 0), e)

        return ItemOutcome(ScoredItem(item, to_percentage(similarity)))


def find_matches(reference: ImageSource,
                 catalog: Sequence[CatalogItem],
                 **engine_kwargs) -> List[ScoredItem]:
    """Run a single match pass with a default-configured MatchEngine."""
    return MatchEngine(**engine_kwargs).find_matches(reference, catalog)
