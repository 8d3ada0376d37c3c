"""
Tests for nearest-centroid face matching.

Tests cover:
- Choosing the nearest face
- Static fallback with no faces
- Distance cutoff
- Per-target strength passthrough
- Statelessness
"""

import unittest

from RB_Libs.FaceLib.face_matcher import FaceMatcher, MatchedRegion
from RB_Libs.ImageEditingLib.image_models import FaceRegion, Rect
from RB_Libs.VideoLib.video_models import BlurTarget


class TestFaceMatcher(unittest.TestCase):
    """Test FaceMatcher.match()."""

    def setUp(self):
        self.target = BlurTarget(Rect.from_center((100, 100), 20, 20), target_id="t1")
        self.near = FaceRegion(Rect.from_center((102, 98), 30, 30))
        self.far = FaceRegion(Rect.from_center((500, 500), 30, 30))

    def test_picks_nearest_face(self):
        regions = FaceMatcher().match([self.target], [self.far, self.near])
        self.assertEqual(len(regions), 1)
        self.assertEqual(regions[0].rect, self.near.rect)
        self.assertTrue(regions[0].tracked)
        self.assertAlmostEqual(regions[0].distance, 8 ** 0.5)

    def test_no_faces_uses_reference_rect(self):
        regions = FaceMatcher().match([self.target], [])
        self.assertEqual(
            regions,
            [MatchedRegion("t1", self.target.reference_rect, False, None, None)],
        )

    def test_unbounded_accepts_far_face(self):
        regions = FaceMatcher().match([self.target], [self.far])
        self.assertEqual(regions[0].rect, self.far.rect)

    def test_max_distance_rejects_far_face(self):
        regions = FaceMatcher(max_distance=50).match([self.target], [self.far])
        self.assertFalse(regions[0].tracked)
        self.assertEqual(regions[0].rect, self.target.reference_rect)

    def test_rejects_negative_max_distance(self):
        with self.assertRaises(ValueError):
            FaceMatcher(max_distance=-1)

    def test_one_region_per_target_in_order(self):
        other = BlurTarget(Rect.from_center((490, 510), 20, 20), strength=40, target_id="t2")
        regions = FaceMatcher().match([self.target, other], [self.near, self.far])
        self.assertEqual([r.target_id for r in regions], ["t1", "t2"])
        self.assertEqual(regions[1].rect, self.far.rect)
        self.assertEqual(regions[1].strength, 40)

    def test_stateless(self):
        matcher = FaceMatcher()
        first = matcher.match([self.target], [self.near, self.far], current_frame_time=1.0)
        matcher.match([self.target], [], current_frame_time=2.0)
        again = matcher.match([self.target], [self.near, self.far], current_frame_time=1.0)
        self.assertEqual(first, again)
