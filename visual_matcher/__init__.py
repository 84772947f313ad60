"""
visual_matcher — Color-distribution visual product matching.

Reduces a submitted image and every catalog product image to per-channel
RGB histograms, ranks products by histogram intersection, and filters the
ranked list by minimum similarity and category.

Modules:
    engine          MatchEngine and find_matches()
    histograms      RGB histogram fingerprint extraction
    scoring         Histogram intersection + ranking
    filters         Similarity / category filtering
    preprocessing   Image source loading and resampling
    catalog         Catalog providers
    session         Per-user run and filter state
    models          Fingerprint, CatalogItem, ScoredItem
    errors          Error types
"""

__version__ = "1.0.0"
