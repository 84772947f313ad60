"""
Error types raised by the matching pipeline.

Image-level failures (ImageLoadError, ExtractionError) are recoverable per
catalog item inside the engine. ReferenceImageError is fatal to a run.
"""


class MatchError(Exception):
    """Base class for all visual matching errors."""


class ImageLoadError(MatchError):
    """An image could not be fetched or decoded."""


class ExtractionError(MatchError):
    """The decoding surface used for resampling could not be acquired."""


class ReferenceImageError(MatchError):
    """The submitted reference image failed extraction."""


class DimensionMismatchError(MatchError, ValueError):
    """Two fingerprints with different bin counts were compared."""
