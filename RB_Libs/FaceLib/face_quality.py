"""
Face Quality Scoring.

Consolidates face acceptance into one tunable policy. A face is scored
from five factors, each in [0, 1]:

- confidence: detector confidence
- landmarks: landmark completeness (0 when the detector gave none)
- aspect: 1 - |w/h - 1|, floored at 0
- size: (area fraction - 0.01) / 0.1, clamped
- position: 1 - 2 * max(|cx - 0.5|, |cy - 0.5|) on the normalized centre

A face passes when the weighted score, the confidence and (when landmark
data exists) the landmark completeness all clear their thresholds.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from RB_Libs.constants import (
    QUALITY_MIN_CONFIDENCE,
    QUALITY_MIN_LANDMARKS,
    QUALITY_MIN_SCORE,
    QUALITY_SIZE_MIN_FRACTION,
    QUALITY_SIZE_RAMP,
    QUALITY_WEIGHT_ASPECT,
    QUALITY_WEIGHT_CONFIDENCE,
    QUALITY_WEIGHT_LANDMARKS,
    QUALITY_WEIGHT_POSITION,
    QUALITY_WEIGHT_SIZE,
    REFINE_MIN_PADDING,
    REFINE_PADDING_FRACTION,
)
from RB_Libs.ImageEditingLib.image_models import FaceRegion, Rect, Size

logger = logging.getLogger(__name__)


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass(frozen=True)
class FaceQualityPolicy:
    """Weights and thresholds for FaceQualityScorer."""
    weight_confidence: float = QUALITY_WEIGHT_CONFIDENCE
    weight_landmarks: float = QUALITY_WEIGHT_LANDMARKS
    weight_aspect: float = QUALITY_WEIGHT_ASPECT
    weight_size: float = QUALITY_WEIGHT_SIZE
    weight_position: float = QUALITY_WEIGHT_POSITION
    min_score: float = QUALITY_MIN_SCORE
    min_confidence: float = QUALITY_MIN_CONFIDENCE
    min_landmarks: float = QUALITY_MIN_LANDMARKS
    size_min_fraction: float = QUALITY_SIZE_MIN_FRACTION
    size_ramp: float = QUALITY_SIZE_RAMP

    def __post_init__(self):
        for name in ("weight_confidence", "weight_landmarks", "weight_aspect",
                     "weight_size", "weight_position"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.size_ramp <= 0:
            raise ValueError(f"size_ramp must be > 0, got {self.size_ramp}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FaceQualityPolicy":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


@dataclass(frozen=True)
class FaceQualityResult:
    """Outcome of scoring one face.

    Attributes:
        passes: Whether the face clears every gate
        score: Weighted composite score
        factors: Per-factor values before weighting
    """
    passes: bool
    score: float
    factors: Dict[str, float] = field(default_factory=dict)


class FaceQualityScorer:
    """Scores and filters detector output with a single policy."""

    def __init__(self, policy: Optional[FaceQualityPolicy] = None):
        self.policy = policy or FaceQualityPolicy()

    def score(self, face: FaceRegion, image_size: Size) -> FaceQualityResult:
        """
        Score a face.

        Args:
            face: Detected face in image pixel coordinates
            image_size: (width, height) used to normalize size and position

        Returns:
            FaceQualityResult
        """
        width, height = image_size
        if width <= 0 or height <= 0:
            raise ValueError(f"image_size must be positive, got {width}x{height}")

        policy = self.policy
        rect = face.rect
        completeness = face.effective_landmark_completeness

        if rect.is_empty:
            aspect = 0.0
        else:
            aspect = max(0.0, 1.0 - abs(rect.width / rect.height - 1.0))

        area_fraction = rect.area / float(width * height)
        size = _clamp01((area_fraction - policy.size_min_fraction) / policy.size_ramp)

        cx, cy = rect.center
        offset = max(abs(cx / width - 0.5), abs(cy / height - 0.5))
        position = max(0.0, 1.0 - offset * 2.0)

        factors = {
            "confidence": face.confidence,
            "landmarks": completeness if completeness is not None else 0.0,
            "aspect": aspect,
            "size": size,
            "position": position,
        }
        total = (
            factors["confidence"] * policy.weight_confidence
            + factors["landmarks"] * policy.weight_landmarks
            + factors["aspect"] * policy.weight_aspect
            + factors["size"] * policy.weight_size
            + factors["position"] * policy.weight_position
        )

        passes = (
            total >= policy.min_score
            and face.confidence >= policy.min_confidence
            and (completeness is None or completeness >= policy.min_landmarks)
        )
        logger.debug(f"Face quality {total:.3f} (passes={passes}): {factors}")
        return FaceQualityResult(passes=passes, score=total, factors=factors)

    def filter_faces(self, faces: Sequence[FaceRegion], image_size: Size) -> List[FaceRegion]:
        """Keep the faces that pass, in input order."""
        kept = [face for face in faces if self.score(face, image_size).passes]
        if len(kept) != len(faces):
            logger.debug(f"Quality filter kept {len(kept)} of {len(faces)} face(s)")
        return kept

    @staticmethod
    def refine_face_bounds(face: FaceRegion, image_size: Size) -> FaceRegion:
        """
        Tighten a face box to its contour landmarks.

        The new box spans the contour extremes plus padding of
        max(20, 10% of the shorter side of the detected box), clamped to
        the image. Faces without a contour are returned unchanged.
        """
        landmarks = face.landmarks
        if landmarks is None or not landmarks.face_contour:
            return face

        xs = [p[0] for p in landmarks.face_contour]
        ys = [p[1] for p in landmarks.face_contour]
        padding = max(REFINE_MIN_PADDING, min(face.rect.width, face.rect.height) * REFINE_PADDING_FRACTION)
        refined = Rect.from_box((
            min(xs) - padding,
            min(ys) - padding,
            max(xs) + padding,
            max(ys) + padding,
        )).clamped_to(image_size)

        if refined.is_empty:
            return face
        return FaceRegion(
            rect=refined,
            confidence=face.confidence,
            landmark_completeness=face.landmark_completeness,
            landmarks=face.landmarks,
        )
