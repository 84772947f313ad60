"""Shared test fixtures for visual matcher tests."""

import base64

import cv2
import numpy as np
import pytest

from visual_matcher.models import CatalogItem


def to_data_uri(image_rgb: np.ndarray, ext: str = ".png") -> str:
    """Encode an RGB array as a base64 data URI."""
    ok, encoded = cv2.imencode(ext, cv2.cvtColor(image_rgb, cv2.COLOR_RGB2BGR))
    assert ok
    mime = "png" if ext == ".png" else "jpeg"
    return f"data:image/{mime};base64," + base64.b64encode(encoded.tobytes()).decode("ascii")


def make_item(item_id, image_url, category="shoes", name=None, price=10.0, brand=None):
    return CatalogItem(
        id=str(item_id),
        name=name or f"Product {item_id}",
        category=category,
        price=price,
        image_url=image_url,
        brand=brand,
    )


@pytest.fixture
def red_image():
    """Generate a uniform 100x100 pure red image."""
    img = np.zeros((100, 100, 3), dtype=np.uint8)
    img[:, :] = [255, 0, 0]
    return img


@pytest.fixture
def blue_image():
    """Generate a uniform 100x100 pure blue image."""
    img = np.zeros((100, 100, 3), dtype=np.uint8)
    img[:, :] = [0, 0, 255]
    return img


@pytest.fixture
def red_blue_split_image():
    """Generate a 100x100 image, left half red and right half blue."""
    img = np.zeros((100, 100, 3), dtype=np.uint8)
    img[:, :50] = [255, 0, 0]
    img[:, 50:] = [0, 0, 255]
    return img


@pytest.fixture
def red_square_image():
    """Generate a 200x200 red square on white background."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 255
    img[40:160, 40:160] = [200, 30, 30]
    return img


@pytest.fixture
def noise_image():
    """Generate a 200x200 random noise image."""
    rng = np.random.RandomState(42)
    return rng.randint(0, 255, (200, 200, 3), dtype=np.uint8)


@pytest.fixture
def red_uri(red_image):
    return to_data_uri(red_image)


@pytest.fixture
def blue_uri(blue_image):
    return to_data_uri(blue_image)


@pytest.fixture
def split_uri(red_blue_split_image):
    return to_data_uri(red_blue_split_image)
