"""
Tests for video job models.

Tests cover:
- Job creation from targets, rects and dicts
- Validation
- Immutability
- Rescaling targets to the frame size
"""

import dataclasses

import pytest

from RB_Libs.errors import InvalidJobError
from RB_Libs.ImageEditingLib.image_models import Rect
from RB_Libs.VideoLib.video_models import BlurTarget, CompositeJob, create_job


class TestCreateJob:
    """Test create_job()."""

    def test_accepts_mixed_target_inputs(self):
        job = create_job(
            [
                Rect(0, 0, 10, 10),
                {"reference_rect": [5, 5, 20, 20], "strength": 30, "target_id": "kid"},
                BlurTarget(Rect(1, 1, 2, 2), target_id="fixed"),
            ],
            (640, 480),
        )
        assert len(job.targets) == 3
        assert job.targets[1].reference_rect == Rect(5, 5, 20, 20)
        assert job.targets[1].strength == 30
        assert job.targets[1].target_id == "kid"
        assert job.targets[2].target_id == "fixed"
        assert job.strength == 15
        assert job.reference_frame_size == (640, 480)

    def test_generates_target_ids(self):
        job = create_job([Rect(0, 0, 1, 1), Rect(0, 0, 1, 1)], (10, 10))
        assert job.targets[0].target_id != job.targets[1].target_id

    @pytest.mark.parametrize("strength", [0, -5])
    def test_rejects_non_positive_strength(self, strength):
        with pytest.raises(InvalidJobError):
            create_job([], (10, 10), strength=strength)

    def test_rejects_empty_frame_size(self):
        with pytest.raises(InvalidJobError):
            create_job([], (0, 10))

    def test_rejects_unknown_target_type(self):
        with pytest.raises(InvalidJobError):
            create_job(["face"], (10, 10))

    def test_rejects_empty_reference_rect(self):
        with pytest.raises(InvalidJobError):
            create_job([Rect(0, 0, 0, 10)], (10, 10))

    def test_invalid_job_error_is_value_error(self):
        with pytest.raises(ValueError):
            create_job([], (10, 10), strength=-1)


class TestCompositeJob:
    """Test CompositeJob behaviour."""

    def test_job_is_immutable(self):
        job = create_job([Rect(0, 0, 5, 5)], (10, 10))
        with pytest.raises(dataclasses.FrozenInstanceError):
            job.strength = 99
        assert isinstance(job.targets, tuple)

    def test_targets_for_same_size_unchanged(self):
        job = create_job([Rect(10, 10, 20, 20)], (100, 100))
        assert job.targets_for_frame((100, 100)) == job.targets

    def test_targets_rescaled_to_frame(self):
        job = create_job([BlurTarget(Rect(10, 20, 30, 40), strength=5, target_id="a")], (100, 100))
        scaled = job.targets_for_frame((200, 50))[0]
        assert scaled.reference_rect == Rect(20, 10, 60, 20)
        assert scaled.strength == 5
        assert scaled.target_id == "a"

    def test_strength_for_target(self):
        job = CompositeJob(
            strength=12,
            targets=(BlurTarget(Rect(0, 0, 1, 1)),),
            reference_frame_size=(10, 10),
        )
        assert job.strength_for(job.targets[0]) == 12
        assert job.strength_for(BlurTarget(Rect(0, 0, 1, 1), strength=3)) == 3
