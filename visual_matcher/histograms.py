"""
RGB color histogram extraction.

Reduces an image to a per-channel color distribution: the image is
resampled to a small fixed square, each channel is counted into equal-width
bins, and counts are divided by the pixel total. The fingerprint ignores
where colors appear, only how much of each there is, so object shape and
position play no part in the comparison.

Bin count and resample size are configurable via environment variables
(MATCH_HIST_BINS, MATCH_RESIZE_DIM) or per call.
"""

import os
import logging

import cv2
import numpy as np

from .errors import ExtractionError
from .models import Fingerprint
from .preprocessing import ImageLoader, ImageSource, decoding_surface, normalize_image

logger = logging.getLogger(__name__)

# Bins per channel. Every fingerprint compared in one run must share this.
HIST_BINS = int(os.environ.get("MATCH_HIST_BINS", "8"))
# Side of the square every image is resampled to before counting.
RESIZE_DIM = int(os.environ.get("MATCH_RESIZE_DIM", "100"))

_default_loader = ImageLoader()


def compute_channel_histograms(pixels: np.ndarray,
                               bins: int = HIST_BINS) -> Fingerprint:
    """
    Compute normalized per-channel histograms of an RGB array.

    A channel value v lands in bin floor(v / (256 / bins)).

    Args:
        pixels: RGB uint8 array of shape (H, W, 3).
        bins: Number of equal-width bins spanning 0-255.

    Returns:
        Fingerprint whose channels each sum to 1.

    Raises:
        ExtractionError: If OpenCV rejects the pixel array.
    """
    total = pixels.shape[0] * pixels.shape[1]
    channels = []

    for c in range(3):
        try:
            hist = cv2.calcHist([pixels], [c], None, [bins], [0, 256])
        except cv2.error as e:
            raise ExtractionError(f"Histogram computation failed: {e}") from e
        channels.append(hist.flatten().astype(np.float64) / total)

    return Fingerprint(*channels)


def extract_features(source: ImageSource,
                     loader=None,
                     bins: int = HIST_BINS,
                     size: int = RESIZE_DIM) -> Fingerprint:
    """
    Load an image and reduce it to a color-distribution fingerprint.

    Process:
        1. Resolve the source to RGB pixels
        2. Resample onto a size x size surface
        3. Count each channel into equal-width bins
        4. Divide by pixel count

    Args:
        source: Image reference accepted by the loader (data URI, URL,
                path, encoded bytes or pixel array).
        loader: Object with a ``load(source)`` method. Defaults to ImageLoader.
        bins: Bins per channel.
        size: Resample resolution.

    Returns:
        Fingerprint with ``bins`` entries per channel.

    Raises:
        ImageLoadError: If the image cannot be fetched or decoded.
        ExtractionError: If the resampling surface cannot be acquired.
    """
    loader = loader or _default_loader
    # Custom loaders may hand back any dtype or channel layout
    image_np = normalize_image(np.asarray(loader.load(source)))

    with decoding_surface(image_np, size) as surface:
        fingerprint = compute_channel_histograms(surface, bins)

    logger.debug(
        f"Extracted {bins}-bin fingerprint from "
        f"{image_np.shape[1]}x{image_np.shape[0]} image"
    )
    return fingerprint
