"""
Tests for the Gaussian Blur Kernel.

Tests cover:
- No-op radius
- Output size and mode
- Flat regions under extended edges
- Transparent edge darkening
- Smoothing grows with radius
- Region blur
- Error handling
"""

import unittest
from unittest import mock

import numpy as np
from PIL import Image

from RB_Libs.errors import BlurFilterError
from RB_Libs.ImageEditingLib.blur_filter import (
    BlurKernelApplier,
    apply_gaussian_blur,
    blur_region,
)
from RB_Libs.ImageEditingLib.image_models import Rect


def checkerboard(size=64, cell=4):
    pixels = np.zeros((size, size, 4), dtype=np.uint8)
    for y in range(size):
        for x in range(size):
            if (x // cell + y // cell) % 2 == 0:
                pixels[y, x, :3] = 255
    pixels[..., 3] = 255
    return Image.fromarray(pixels)


class TestApplyGaussianBlur(unittest.TestCase):
    """Test whole-image blur."""

    def setUp(self):
        self.white = Image.new("RGBA", (100, 100), (255, 255, 255, 255))
        self.checker = checkerboard()

    def test_zero_radius_returns_copy(self):
        result = apply_gaussian_blur(self.checker, 0)
        self.assertIsNot(result, self.checker)
        self.assertEqual(result.tobytes(), self.checker.tobytes())

    def test_negative_radius_returns_copy(self):
        result = apply_gaussian_blur(self.checker, -3)
        self.assertEqual(result.tobytes(), self.checker.tobytes())

    def test_same_size_and_mode(self):
        for backend in ("pil", "scipy"):
            result = apply_gaussian_blur(self.checker, 5, backend=backend)
            self.assertEqual(result.size, self.checker.size)
            self.assertEqual(result.mode, "RGBA")

    def test_converts_other_modes(self):
        result = apply_gaussian_blur(Image.new("RGB", (10, 10), (1, 2, 3)), 2)
        self.assertEqual(result.mode, "RGBA")

    def test_flat_white_stays_flat_with_extended_edges(self):
        for radius in (1, 5, 20, 60):
            result = apply_gaussian_blur(self.white, radius, backend="scipy", edge_mode="extend")
            for low, high in result.getextrema():
                self.assertEqual((low, high), (255, 255))

    def test_transparent_edges_change_flat_image(self):
        result = apply_gaussian_blur(self.white, 20)
        center = result.getpixel((50, 50))
        edge = result.getpixel((0, 50))
        self.assertLess(center[0], 255)
        self.assertLess(edge[0], center[0])

    def test_larger_radius_smooths_more(self):
        small = np.asarray(apply_gaussian_blur(self.checker, 1, "scipy", "extend"), dtype=np.float32)
        large = np.asarray(apply_gaussian_blur(self.checker, 6, "scipy", "extend"), dtype=np.float32)
        self.assertGreater(small[..., 0].std(), large[..., 0].std())

    def test_deterministic(self):
        first = apply_gaussian_blur(self.checker, 7)
        second = apply_gaussian_blur(self.checker, 7)
        self.assertEqual(first.tobytes(), second.tobytes())

    def test_input_not_modified(self):
        before = self.checker.tobytes()
        apply_gaussian_blur(self.checker, 4)
        self.assertEqual(self.checker.tobytes(), before)


class TestBlurErrors(unittest.TestCase):
    """Test error handling."""

    def test_rejects_non_image(self):
        with self.assertRaises(TypeError):
            apply_gaussian_blur([[0]], 5)

    def test_rejects_unknown_backend(self):
        with self.assertRaises(ValueError):
            apply_gaussian_blur(Image.new("RGBA", (4, 4)), 5, backend="gpu")

    def test_rejects_unknown_edge_mode(self):
        with self.assertRaises(ValueError):
            BlurKernelApplier(edge_mode="wrap")

    def test_filter_failure_wrapped(self):
        with mock.patch(
            "RB_Libs.ImageEditingLib.blur_filter._pil_blur",
            side_effect=MemoryError("out of memory"),
        ):
            with self.assertRaises(BlurFilterError):
                apply_gaussian_blur(Image.new("RGBA", (4, 4)), 5)


class TestBlurRegion(unittest.TestCase):
    """Test cropped region blur."""

    def setUp(self):
        self.image = checkerboard(size=80)

    def test_returns_crop_of_rect(self):
        crop = blur_region(self.image, Rect(10, 20, 30, 15), 3)
        self.assertEqual(crop.size, (30, 15))

    def test_rect_clamped_to_image(self):
        crop = blur_region(self.image, Rect(70, 70, 30, 30), 3)
        self.assertEqual(crop.size, (10, 10))

    def test_rect_outside_image(self):
        self.assertIsNone(blur_region(self.image, Rect(200, 200, 10, 10), 3))

    def test_applier_uses_its_settings(self):
        applier = BlurKernelApplier(backend="scipy", edge_mode="extend")
        white = Image.new("RGBA", (30, 30), (255, 255, 255, 255))
        result = applier.blur(white, 10)
        self.assertEqual(result.getpixel((0, 0)), (255, 255, 255, 255))
