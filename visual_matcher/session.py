"""
Per-user matching state for a presentation layer.

Holds what a search page shows: the catalog, the current run's ranked
matches, an error message, and the filter selections. Every submitted
image starts a new run; results of a run that has since been superseded
are dropped instead of overwriting the newer one.
"""

import logging
import threading
from typing import List, Optional, Tuple

from .catalog import available_categories
from .engine import MatchEngine
from .errors import ReferenceImageError
from .filters import clamp_similarity, filter_matches
from .models import CatalogItem, ScoredItem
from .preprocessing import ImageSource

logger = logging.getLogger(__name__)

REFERENCE_ERROR_MESSAGE = "Failed to process image. Please try another image."


class MatchSession:
    """
    Search page state for one user.

    Filter selections are clamped on assignment. Matches are only replaced
    through begin_run / complete_run, so the filtered view is recomputed
    exactly when the run or a filter changes.
    """

    def __init__(self, catalog: List[CatalogItem], engine: MatchEngine = None):
        self.catalog = list(catalog)
        self.engine = engine or MatchEngine()
        self._matches: List[ScoredItem] = []
        self.error = ""
        self.loading = False

        self._min_similarity = 0
        self._category = ""
        self._run_id = 0
        self._version = 0
        self._lock = threading.Lock()
        self._view_key: Optional[Tuple[int, int, str]] = None
        self._view: List[ScoredItem] = []

    @property
    def matches(self) -> List[ScoredItem]:
        """Ranked, unfiltered results of the latest published run."""
        return list(self._matches)

    @property
    def min_similarity(self) -> int:
        return self._min_similarity

    @min_similarity.setter
    def min_similarity(self, value):
        self._min_similarity = clamp_similarity(value)

    @property
    def category(self) -> str:
        return self._category

    @category.setter
    def category(self, value: Optional[str]):
        self._category = value or ""

    @property
    def categories(self) -> List[str]:
        return available_categories(self.catalog)

    def begin_run(self) -> int:
        """Start a new run, invalidating any run still in flight."""
        with self._lock:
            self._run_id += 1
            self._matches = []
            self.error = ""
            self.loading = True
            self._version += 1
            return self._run_id

    def complete_run(self, run_id: int,
                     matches: List[ScoredItem] = None,
                     error: str = "") -> bool:
        """
        Publish a run's outcome if it is still the latest run.

        Returns:
            False if a newer run has started; the outcome is discarded.
        """
        with self._lock:
            if run_id != self._run_id:
                logger.info(f"Discarding results of superseded run {run_id}")
                return False
            self._matches = list(matches or [])
            self.error = error
            self.loading = False
            self._version += 1
            return True

    def submit(self, reference: ImageSource) -> bool:
        """
        Match a newly submitted image against the catalog.

        Returns:
            True if this run's outcome was published.
        """
        run_id = self.begin_run()
        matches, error = [], ""
        try:
            matches = self.engine.find_matches(reference, self.catalog)
        except ReferenceImageError as e:
            logger.error(f"Error finding similar products: {e}")
            error = REFERENCE_ERROR_MESSAGE
        except Exception:
            logger.exception("Unexpected error finding similar products")
            error = REFERENCE_ERROR_MESSAGE
        finally:
            published = self.complete_run(run_id, matches, error)
        return published

    @property
    def visible_matches(self) -> List[ScoredItem]:
        """Current matches narrowed by the filter selections."""
        with self._lock:
            key = (self._version, self._min_similarity, self._category)
            if key != self._view_key:
                self._view = filter_matches(self._matches,
                                            self._min_similarity,
                                            self._category)
                self._view_key = key
            return list(self._view)
