"""
Tests for settings loading and saving.

Tests cover:
- Defaults
- Save/load roundtrip
- Missing files, bad JSON, non-object payloads
- Building components from settings
- Applying the configured log level
"""

import json
import logging

import pytest

from RB_Libs.ImageEditingLib.mask_rasterizer import FaceMaskPolicy
from RB_Libs.settings import BlurSettings, load_settings, save_settings, setup_logging
from RB_Libs.VideoLib.frame_compositor import FrameCompositorConfig


class TestBlurSettings:
    """Test BlurSettings."""

    def test_defaults(self):
        settings = BlurSettings()
        assert settings.photo_radius == 70
        assert settings.max_working_dimension == 1024
        assert settings.blur_backend == "pil"
        assert settings.face_mask == FaceMaskPolicy()

    def test_rejects_unknown_backend(self):
        with pytest.raises(ValueError):
            BlurSettings(blur_backend="metal")

    def test_from_dict_keeps_defaults_for_missing_keys(self):
        settings = BlurSettings.from_dict({"photo_radius": 50, "frame_compositor": {"region_inset": 10}})
        assert settings.photo_radius == 50
        assert settings.frame_compositor == FrameCompositorConfig(region_inset=10)
        assert settings.max_working_dimension == 1024

    def test_builds_components(self):
        settings = BlurSettings(photo_radius=40, max_working_dimension=512, blur_backend="scipy")
        pipeline = settings.build_image_pipeline()
        assert pipeline.default_radius == 40
        assert pipeline.max_dimension == 512
        assert pipeline.applier.backend == "scipy"

        compositor = settings.build_frame_compositor()
        assert compositor.config == settings.frame_compositor


class TestLoadSaveSettings:
    """Test JSON persistence helpers."""

    def test_roundtrip(self, settings_path):
        settings = BlurSettings(
            photo_radius=33,
            face_mask=FaceMaskPolicy(expansion=1.5),
            frame_compositor=FrameCompositorConfig(debug_center_blur=True),
        )
        save_settings(settings, settings_path)
        assert load_settings(settings_path) == settings

    def test_missing_file_gives_defaults(self, settings_path, caplog):
        with caplog.at_level(logging.WARNING):
            settings = load_settings(settings_path)
        assert settings == BlurSettings()
        assert "not found" in caplog.text

    def test_non_object_rejected(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
        with pytest.raises(ValueError):
            load_settings(path)

    def test_invalid_json_rejected(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError):
            load_settings(path)

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"theme": "dark", "face_quality": {"min_score": 0.5, "extra": 1}}), encoding="utf-8")
        assert load_settings(path).face_quality.min_score == 0.5


def test_setup_logging_accepts_names():
    root = logging.getLogger()
    previous = root.level
    try:
        setup_logging("debug")
        assert root.level == logging.DEBUG
        setup_logging(logging.INFO)
        assert root.level == logging.INFO
    finally:
        root.setLevel(previous)


def test_apply_logging_uses_log_level():
    root = logging.getLogger()
    previous = root.level
    try:
        BlurSettings(log_level="debug").apply_logging()
        assert root.level == logging.DEBUG
        BlurSettings.from_dict({"log_level": "WARNING"}).apply_logging()
        assert root.level == logging.WARNING
    finally:
        root.setLevel(previous)
