"""
Pytest configuration and shared fixtures for Region Blur tests.

This module provides small synthetic images and fake detectors used
across multiple test modules.
"""

import numpy as np
import pytest
from PIL import Image

from RB_Libs.FaceLib.face_detector import FaceDetector


def make_noise_image(width, height, seed=0):
    """Opaque RGBA image of random pixels."""
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    pixels[..., 3] = 255
    return Image.fromarray(pixels)


class StaticDetector(FaceDetector):
    """Returns the same faces for every image and counts calls."""

    def __init__(self, faces=()):
        self.faces = list(faces)
        self.calls = 0

    def detect(self, image):
        self.calls += 1
        return list(self.faces)


class FailingDetector(FaceDetector):
    """Raises on every call."""

    def detect(self, image):
        raise RuntimeError("detector unavailable")


@pytest.fixture
def white_image():
    """100x100 opaque white RGBA image."""
    return Image.new("RGBA", (100, 100), (255, 255, 255, 255))


@pytest.fixture
def noise_image():
    """200x200 opaque RGBA noise image."""
    return make_noise_image(200, 200)


@pytest.fixture
def settings_path(tmp_path):
    """Path for a settings file inside a temporary directory."""
    return tmp_path / "config" / "region_blur.json"
