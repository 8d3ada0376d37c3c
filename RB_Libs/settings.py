"""
Settings for Region Blur.

BlurSettings aggregates every tunable policy so an application can keep
them in one JSON file. Settings are read once when components are built;
the engine itself never persists anything.

Example:
    >>> settings = load_settings(Path("region_blur.json"))
    >>> settings.apply_logging()
    >>> pipeline = settings.build_image_pipeline()
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Union

from RB_Libs.constants import (
    BLUR_BACKENDS,
    DEFAULT_BLUR_BACKEND,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PATH_BLUR_RADIUS,
    FIELD_BLUR_BACKEND,
    FIELD_FACE_MASK,
    FIELD_FACE_QUALITY,
    FIELD_FRAME_COMPOSITOR,
    FIELD_LOG_LEVEL,
    FIELD_MAX_WORKING_DIMENSION,
    FIELD_PHOTO_RADIUS,
    LOG_FORMAT,
    MAX_WORKING_DIMENSION,
)
from RB_Libs.FaceLib.face_quality import FaceQualityPolicy, FaceQualityScorer
from RB_Libs.ImageEditingLib.image_pipeline import ImagePipeline, ShapeTypeMaskStrategy
from RB_Libs.ImageEditingLib.mask_rasterizer import FaceMaskPolicy
from RB_Libs.VideoLib.frame_compositor import FrameCompositor, FrameCompositorConfig

logger = logging.getLogger(__name__)


@dataclass
class BlurSettings:
    """All user-tunable settings."""
    photo_radius: float = DEFAULT_PATH_BLUR_RADIUS
    max_working_dimension: int = MAX_WORKING_DIMENSION
    blur_backend: str = DEFAULT_BLUR_BACKEND
    log_level: str = DEFAULT_LOG_LEVEL
    face_mask: FaceMaskPolicy = field(default_factory=FaceMaskPolicy)
    face_quality: FaceQualityPolicy = field(default_factory=FaceQualityPolicy)
    frame_compositor: FrameCompositorConfig = field(default_factory=FrameCompositorConfig)

    def __post_init__(self):
        if self.photo_radius < 0:
            raise ValueError(f"photo_radius must be >= 0, got {self.photo_radius}")
        if self.max_working_dimension <= 0:
            raise ValueError(
                f"max_working_dimension must be > 0, got {self.max_working_dimension}"
            )
        if self.blur_backend not in BLUR_BACKENDS:
            raise ValueError(
                f"blur_backend must be one of {BLUR_BACKENDS}, got {self.blur_backend!r}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            FIELD_PHOTO_RADIUS: self.photo_radius,
            FIELD_MAX_WORKING_DIMENSION: self.max_working_dimension,
            FIELD_BLUR_BACKEND: self.blur_backend,
            FIELD_LOG_LEVEL: self.log_level,
            FIELD_FACE_MASK: self.face_mask.to_dict(),
            FIELD_FACE_QUALITY: self.face_quality.to_dict(),
            FIELD_FRAME_COMPOSITOR: self.frame_compositor.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BlurSettings":
        """Create from dictionary; missing keys keep their defaults."""
        kwargs: Dict[str, Any] = {}
        if FIELD_PHOTO_RADIUS in data:
            kwargs["photo_radius"] = float(data[FIELD_PHOTO_RADIUS])
        if FIELD_MAX_WORKING_DIMENSION in data:
            kwargs["max_working_dimension"] = int(data[FIELD_MAX_WORKING_DIMENSION])
        if FIELD_BLUR_BACKEND in data:
            kwargs["blur_backend"] = str(data[FIELD_BLUR_BACKEND])
        if FIELD_LOG_LEVEL in data:
            kwargs["log_level"] = str(data[FIELD_LOG_LEVEL])
        if FIELD_FACE_MASK in data:
            kwargs["face_mask"] = FaceMaskPolicy.from_dict(data[FIELD_FACE_MASK])
        if FIELD_FACE_QUALITY in data:
            kwargs["face_quality"] = FaceQualityPolicy.from_dict(data[FIELD_FACE_QUALITY])
        if FIELD_FRAME_COMPOSITOR in data:
            kwargs["frame_compositor"] = FrameCompositorConfig.from_dict(data[FIELD_FRAME_COMPOSITOR])
        return cls(**kwargs)

    def build_image_pipeline(self) -> ImagePipeline:
        return ImagePipeline(
            max_dimension=self.max_working_dimension,
            default_radius=self.photo_radius,
            mask_strategy=ShapeTypeMaskStrategy(self.face_mask),
            backend=self.blur_backend,
        )

    def build_frame_compositor(self) -> FrameCompositor:
        return FrameCompositor(
            config=self.frame_compositor,
            scorer=FaceQualityScorer(self.face_quality),
        )

    def apply_logging(self) -> None:
        """Configure root logging at log_level."""
        setup_logging(self.log_level)


def load_settings(path: Union[str, Path]) -> BlurSettings:
    """
    Load settings from a JSON file.

    A missing file gives default settings.

    Raises:
        ValueError: If the file is not valid JSON or its top level is not an object
    """
    settings_path = Path(path)
    try:
        payload = json.loads(settings_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning(f"Settings file not found, using defaults: {settings_path}")
        return BlurSettings()
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid settings JSON in {settings_path}: {e}") from e

    if not isinstance(payload, dict):
        raise ValueError(
            f"Settings file must contain a JSON object, got {type(payload).__name__}"
        )
    return BlurSettings.from_dict(payload)


def save_settings(settings: BlurSettings, path: Union[str, Path]) -> Path:
    """Write settings as JSON, creating parent directories."""
    settings_path = Path(path)
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    settings_path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
    return settings_path


def setup_logging(level: Union[str, int] = DEFAULT_LOG_LEVEL) -> None:
    """Configure root logging for an application embedding the engine."""
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
