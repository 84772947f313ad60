"""
Image loading and resampling for feature extraction.

Resolves the image references a catalog or a user upload can carry
(data URIs, HTTP(S) URLs, file paths, encoded bytes, decoded arrays) into
RGB uint8 pixel arrays, and provides the scoped resampling surface the
extractor draws into.
"""

import os
import base64
import binascii
import logging
from contextlib import contextmanager
from typing import Iterator, Union
from urllib.parse import unquote_to_bytes

import cv2
import numpy as np
import requests

from .errors import ExtractionError, ImageLoadError

logger = logging.getLogger(__name__)

# Seconds to wait for a remote image before treating it as unloadable.
FETCH_TIMEOUT = float(os.environ.get("IMAGE_FETCH_TIMEOUT", "10"))

ImageSource = Union[str, bytes, np.ndarray]


def normalize_image(image_np: np.ndarray) -> np.ndarray:
    """Ensure image is 3-channel uint8 RGB format."""
    if image_np.size == 0:
        raise ImageLoadError("Image has no pixels")

    if image_np.dtype != np.uint8:
        if image_np.max() <= 1.0:
            image_np = np.clip(image_np * 255, 0, 255).astype(np.uint8)
        else:
            image_np = np.clip(image_np, 0, 255).astype(np.uint8)

    if image_np.ndim == 2:
        return cv2.cvtColor(image_np, cv2.COLOR_GRAY2RGB)
    if image_np.ndim == 3 and image_np.shape[2] == 4:
        return cv2.cvtColor(image_np, cv2.COLOR_RGBA2RGB)
    if image_np.ndim == 3 and image_np.shape[2] == 3:
        return image_np

    raise ImageLoadError(f"Unsupported pixel array shape {image_np.shape}")


def decode_image_bytes(data: bytes) -> np.ndarray:
    """
    Decode an encoded image (PNG, JPEG, ...) into an RGB array.

    Raises:
        ImageLoadError: If the bytes are empty or not a decodable image.
    """
    if not data:
        raise ImageLoadError("Empty image data")

    try:
        buffer = np.frombuffer(data, dtype=np.uint8)
        image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise ImageLoadError(f"Image decode failed: {e}") from e

    if image is None:
        raise ImageLoadError("Image data is not a supported format")

    # OpenCV decodes to BGR
    return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)


def parse_data_uri(uri: str) -> bytes:
    """
    Extract the payload of a ``data:`` URI.

    Supports both base64 and percent-encoded payloads.
    """
    try:
        header, payload = uri.split(",", 1)
    except ValueError as e:
        raise ImageLoadError("Malformed data URI: missing ',' separator") from e

    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageLoadError(f"Invalid base64 image payload: {e}") from e

    return unquote_to_bytes(payload)


class ImageLoader:
    """
    Default image source resolver.

    Any object with a compatible ``load(source)`` method can be passed to
    the extractor or engine in its place.
    """

    def __init__(self, timeout: float = None, session: requests.Session = None):
        self.timeout = timeout or FETCH_TIMEOUT
        self.session = session

    def load(self, source: ImageSource) -> np.ndarray:
        """
        Resolve an image reference to an RGB uint8 array.

        Args:
            source: data URI, http(s) URL, file path, encoded bytes,
                    or an already decoded pixel array.

        Returns:
            Array of shape (H, W, 3).

        Raises:
            ImageLoadError: If the image cannot be fetched or decoded.
        """
        if isinstance(source, np.ndarray):
            return normalize_image(source)

        if isinstance(source, (bytes, bytearray, memoryview)):
            return decode_image_bytes(bytes(source))

        if not isinstance(source, str):
            raise ImageLoadError(f"Unsupported image source type: {type(source).__name__}")

        source = source.strip()
        if source.startswith("data:"):
            return decode_image_bytes(parse_data_uri(source))

        if source.startswith(("http://", "https://")):
            return decode_image_bytes(self._fetch(source))

        if source and os.path.isfile(source):
            try:
                with open(source, "rb") as f:
                    return decode_image_bytes(f.read())
            except OSError as e:
                raise ImageLoadError(f"Could not read {source}: {e}") from e

        raise ImageLoadError(f"Unrecognized image source: {source[:80]!r}")

    def _fetch(self, url: str) -> bytes:
        getter = self.session.get if self.session is not None else requests.get
        try:
            response = getter(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise ImageLoadError(f"Failed to download image {url}: {e}") from e

        logger.debug(f"Fetched {len(response.content)} bytes from {url}")
        return response.content


@contextmanager
def decoding_surface(image_np: np.ndarray, size: int) -> Iterator[np.ndarray]:
    """
    Resample an image onto a fixed ``size`` x ``size`` surface.

    Aspect ratio is not preserved. The surface is only valid inside the
    block; callers must not keep a reference to it after exit.

    Raises:
        ExtractionError: If the surface cannot be acquired.
    """
    if size <= 0:
        raise ExtractionError(f"Invalid surface size {size}")
    if image_np is None or image_np.ndim != 3 or 0 in image_np.shape[:2]:
        shape = None if image_np is None else image_np.shape
        raise ExtractionError(f"Cannot draw image of shape {shape} onto surface")

    try:
        surface = cv2.resize(image_np, (size, size), interpolation=cv2.INTER_AREA)
    except (cv2.error, MemoryError) as e:
        raise ExtractionError(f"Could not acquire {size}x{size} surface: {e}") from e

    try:
        yield surface
    finally:
        logger.debug(f"Left {size}x{size} decoding surface")
