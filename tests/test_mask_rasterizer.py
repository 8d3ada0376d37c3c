"""
Tests for the Blur Mask Rasterizer.

Tests cover:
- Empty shape lists
- Freehand dots and polygons
- Feathered face ellipses
- Overlap saturation
- Mixed shape rejection
- Policy validation and serialization
"""

import unittest

import numpy as np

from RB_Libs.errors import MaskCreationError
from RB_Libs.ImageEditingLib.image_models import BlurPath, FaceRegion, Rect
from RB_Libs.ImageEditingLib.mask_rasterizer import (
    FaceMaskPolicy,
    MaskRasterizer,
    face_mask_rect,
    mask_statistics,
    rasterize_mask,
)


class TestPathMasks(unittest.TestCase):
    """Test masks built from freehand paths."""

    def setUp(self):
        self.rasterizer = MaskRasterizer()

    def test_empty_shapes_give_zero_mask(self):
        mask = self.rasterizer.rasterize([], (64, 32))
        self.assertEqual(mask.mode, "L")
        self.assertEqual(mask.size, (64, 32))
        self.assertEqual(mask.getextrema(), (0, 0))

    def test_single_point_is_dot(self):
        mask = self.rasterizer.rasterize([BlurPath(((50, 50),))], (100, 100))
        self.assertEqual(mask.getpixel((50, 50)), 255)
        self.assertEqual(mask.getpixel((10, 10)), 0)
        self.assertEqual(mask.getpixel((60, 60)), 0)

    def test_polygon_fill_hard_edge(self):
        square = BlurPath(((10, 10), (40, 10), (40, 40), (10, 40)))
        mask = self.rasterizer.rasterize([square], (100, 100))
        self.assertEqual(mask.getpixel((25, 25)), 255)
        self.assertEqual(mask.getpixel((60, 60)), 0)
        self.assertEqual(set(np.unique(np.asarray(mask)).tolist()), {0, 255})

    def test_empty_path_contributes_nothing(self):
        mask = self.rasterizer.rasterize([BlurPath()], (20, 20))
        self.assertEqual(mask.getextrema(), (0, 0))

    def test_overlapping_paths_saturate(self):
        first = BlurPath(((0, 0), (30, 0), (30, 30), (0, 30)))
        second = BlurPath(((10, 10), (40, 10), (40, 40), (10, 40)))
        mask = self.rasterizer.rasterize([first, second], (50, 50))
        self.assertEqual(mask.getpixel((20, 20)), 255)

    def test_path_outside_image_is_clipped(self):
        path = BlurPath(((-50, -50), (10, -50), (10, 10), (-50, 10)))
        mask = self.rasterizer.rasterize([path], (40, 40))
        self.assertEqual(mask.getpixel((5, 5)), 255)
        self.assertEqual(mask.getpixel((30, 30)), 0)


class TestFaceMasks(unittest.TestCase):
    """Test feathered face ellipse masks."""

    def setUp(self):
        self.rasterizer = MaskRasterizer()
        self.face = FaceRegion(Rect(40, 40, 20, 20))

    def test_fitted_rect(self):
        rect = face_mask_rect(self.face.rect, (100, 100), FaceMaskPolicy())
        self.assertAlmostEqual(rect.width, 26.0)
        self.assertAlmostEqual(rect.height, 32.5)
        self.assertAlmostEqual(rect.center[0], 50.0)
        self.assertAlmostEqual(rect.center[1], 50.0)

    def test_feather_levels(self):
        mask = self.rasterizer.rasterize([self.face], (100, 100))
        self.assertEqual(mask.getpixel((50, 50)), 230)
        self.assertEqual(mask.getpixel((50, 35)), 255)
        self.assertEqual(mask.getpixel((50, 40)), 204)
        self.assertEqual(mask.getpixel((0, 0)), 0)

    def test_mask_values_are_feather_levels(self):
        mask = self.rasterizer.rasterize([self.face], (100, 100))
        values = set(np.unique(np.asarray(mask)).tolist())
        self.assertTrue(values <= {0, 204, 230, 255})
        self.assertEqual(mask.getextrema()[1], 255)

    def test_overlapping_faces_take_maximum(self):
        single = np.asarray(self.rasterizer.rasterize([self.face], (100, 100)))
        double = np.asarray(self.rasterizer.rasterize([self.face, self.face], (100, 100)))
        np.testing.assert_array_equal(single, double)

    def test_face_outside_image_contributes_nothing(self):
        mask = self.rasterizer.rasterize([FaceRegion(Rect(200, 200, 10, 10))], (100, 100))
        self.assertEqual(mask.getextrema(), (0, 0))

    def test_region_ellipse_keeps_rect(self):
        mask = self.rasterizer.rasterize_ellipse_region(Rect(0, 0, 40, 20), (40, 20))
        self.assertEqual(mask.size, (40, 20))
        self.assertEqual(mask.getpixel((0, 0)), 0)
        self.assertGreater(mask.getpixel((20, 10)), 0)


class TestRasterizerErrors(unittest.TestCase):
    """Test error handling."""

    def test_mixed_shapes_rejected(self):
        shapes = [BlurPath(((1, 1),)), FaceRegion(Rect(0, 0, 5, 5))]
        with self.assertRaises(MaskCreationError):
            rasterize_mask(shapes, (10, 10))

    def test_mask_creation_error_is_value_error(self):
        with self.assertRaises(ValueError):
            rasterize_mask([object()], (10, 10))

    def test_invalid_size_rejected(self):
        with self.assertRaises(MaskCreationError):
            rasterize_mask([], (0, 10))


class TestFaceMaskPolicy(unittest.TestCase):
    """Test policy validation and serialization."""

    def test_inset_alpha_cannot_exceed_core(self):
        with self.assertRaises(ValueError):
            FaceMaskPolicy(core_alpha=200, middle_alpha=210)

    def test_rejects_non_positive_expansion(self):
        with self.assertRaises(ValueError):
            FaceMaskPolicy(expansion=0)

    def test_dict_roundtrip_ignores_unknown_keys(self):
        data = FaceMaskPolicy(expansion=1.5).to_dict()
        data["unknown"] = True
        self.assertEqual(FaceMaskPolicy.from_dict(data), FaceMaskPolicy(expansion=1.5))


class TestMaskStatistics(unittest.TestCase):
    """Test mask statistics."""

    def test_statistics(self):
        mask = rasterize_mask([BlurPath(((0, 0), (10, 0), (10, 10), (0, 10)))], (20, 20))
        stats = mask_statistics(mask)
        self.assertEqual(stats["max"], 255.0)
        self.assertGreater(stats["coverage"], 0.0)
        self.assertLess(stats["coverage"], 1.0)
