"""
Tests for the Photo Blur Pipeline.

Tests cover:
- Blurring a dot on a flat image
- The empty-shape fast path
- Working size cap and shape scaling
- Face blur
- Degradation on mask errors
- Propagation of dimension mismatches
"""

import unittest

import numpy as np
from PIL import Image

from conftest import make_noise_image
from RB_Libs.errors import CompositingDimensionMismatch
from RB_Libs.ImageEditingLib.image_models import BlurPath, FaceRegion, Rect
from RB_Libs.ImageEditingLib.image_pipeline import (
    ImagePipeline,
    MaskStrategy,
    PathMaskStrategy,
    apply_blur,
    apply_face_blur,
    apply_path_blur,
    downscale_to_cap,
)
from RB_Libs.ImageEditingLib.mask_rasterizer import rasterize_mask


class WrongSizeMaskStrategy(MaskStrategy):
    def build_mask(self, shapes, image_size):
        return Image.new("L", (image_size[0] + 1, image_size[1]), 255)


class TestDotOnFlatImage(unittest.TestCase):
    """A single dot on a solid white image."""

    def setUp(self):
        self.image = Image.new("RGBA", (100, 100), (255, 255, 255, 255))
        self.path = BlurPath(((50, 50),))

    def test_blurs_inside_dot_only(self):
        result = apply_path_blur(self.image, [self.path], radius=20)
        self.assertEqual(result.size, (100, 100))

        mask = np.asarray(rasterize_mask([self.path], (100, 100)))
        output = np.asarray(result)
        source = np.asarray(self.image)

        inside = mask > 0
        self.assertTrue(np.any(output[inside] != source[inside]))
        np.testing.assert_array_equal(output[~inside], source[~inside])

    def test_alpha_preserved(self):
        result = apply_path_blur(self.image, [self.path], radius=20)
        self.assertEqual(result.getchannel("A").getextrema(), (255, 255))


class TestEmptyShapes(unittest.TestCase):
    """No shapes returns the downscaled image unchanged."""

    def test_small_image_identical(self):
        image = make_noise_image(64, 48)
        result = apply_blur(image, [], radius=30)
        self.assertEqual(result.tobytes(), image.tobytes())
        self.assertIsNot(result, image)

    def test_large_image_downscaled_only(self):
        image = make_noise_image(2048, 1024)
        result = apply_blur(image, [])
        self.assertEqual(result.size, (1024, 512))
        self.assertEqual(result.tobytes(), downscale_to_cap(image).tobytes())


class TestWorkingSize(unittest.TestCase):
    """Test downscaling and shape scaling."""

    def test_downscale_never_upscales(self):
        image = make_noise_image(30, 20)
        self.assertEqual(downscale_to_cap(image, 1024).size, (30, 20))

    def test_downscale_keeps_aspect(self):
        self.assertEqual(downscale_to_cap(make_noise_image(1500, 3000), 1024).size, (512, 1024))

    def test_shapes_follow_downscale(self):
        image = make_noise_image(2000, 1000)
        result = apply_path_blur(image, [BlurPath(((1000, 500),))], radius=10)
        reference = downscale_to_cap(image)

        self.assertEqual(result.size, (1024, 512))
        self.assertNotEqual(result.getpixel((512, 256)), reference.getpixel((512, 256)))
        self.assertEqual(result.getpixel((10, 10)), reference.getpixel((10, 10)))

    def test_rejects_bad_cap(self):
        with self.assertRaises(ValueError):
            ImagePipeline(max_dimension=0)


class TestFaceBlur(unittest.TestCase):
    """Test face-shaped blur."""

    def test_face_center_blurred(self):
        image = make_noise_image(200, 200, seed=4)
        face = FaceRegion(Rect(80, 80, 40, 40), confidence=0.9)
        result = apply_face_blur(image, [face], radius=8)
        self.assertNotEqual(result.getpixel((100, 100)), image.getpixel((100, 100)))
        self.assertEqual(result.getpixel((5, 5)), image.getpixel((5, 5)))


class TestPipelineErrors(unittest.TestCase):
    """Test degradation and propagation."""

    def setUp(self):
        self.image = make_noise_image(50, 50, seed=5)

    def test_mixed_shapes_return_unblurred(self):
        shapes = [BlurPath(((25, 25),)), FaceRegion(Rect(10, 10, 10, 10))]
        with self.assertLogs("RB_Libs.ImageEditingLib.image_pipeline", level="WARNING"):
            result = apply_blur(self.image, shapes, radius=10)
        self.assertEqual(result.tobytes(), self.image.tobytes())

    def test_strategy_shape_mismatch_returns_unblurred(self):
        pipeline = ImagePipeline(mask_strategy=PathMaskStrategy())
        result = pipeline.apply_blur(self.image, [FaceRegion(Rect(10, 10, 10, 10))], radius=10)
        self.assertEqual(result.tobytes(), self.image.tobytes())

    def test_dimension_mismatch_propagates(self):
        pipeline = ImagePipeline(mask_strategy=WrongSizeMaskStrategy())
        with self.assertRaises(CompositingDimensionMismatch):
            pipeline.apply_blur(self.image, [BlurPath(((25, 25),))], radius=10)

    def test_rejects_non_image(self):
        with self.assertRaises(TypeError):
            apply_blur("photo.jpg", [])
