"""
Video blur job models.

A CompositeJob is the single immutable value shared by every concurrently
processed frame. It is built once per export and passed explicitly into
each process() call.

Classes:
    BlurTarget: One region chosen for blurring
    CompositeJob: Strength, targets and reference frame size for a job

Functions:
    create_job: Build a validated CompositeJob from loose inputs
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from RB_Libs.constants import DEFAULT_VIDEO_STRENGTH
from RB_Libs.errors import InvalidJobError
from RB_Libs.ImageEditingLib.image_models import Rect, Size


def _new_target_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class BlurTarget:
    """A region chosen for blurring.

    Attributes:
        reference_rect: Region in reference-frame pixel coordinates
        strength: Optional per-target blur strength overriding the job's
        target_id: Opaque identifier
    """
    reference_rect: Rect
    strength: Optional[float] = None
    target_id: Any = field(default_factory=_new_target_id)

    def __post_init__(self):
        if not isinstance(self.reference_rect, Rect):
            raise InvalidJobError(f"Expected Rect for reference_rect, got {type(self.reference_rect)}")
        if self.reference_rect.is_empty:
            raise InvalidJobError(f"reference_rect must not be empty, got {self.reference_rect}")
        if self.strength is not None and self.strength <= 0:
            raise InvalidJobError(f"strength must be > 0, got {self.strength}")

    def scaled(self, sx: float, sy: float) -> "BlurTarget":
        return BlurTarget(self.reference_rect.scaled(sx, sy), self.strength, self.target_id)


@dataclass(frozen=True)
class CompositeJob:
    """Immutable description of one video blur job.

    Attributes:
        strength: Default blur radius for every target
        targets: Targets in reference-frame coordinates
        reference_frame_size: (width, height) the targets were chosen on
    """
    strength: float = DEFAULT_VIDEO_STRENGTH
    targets: Tuple[BlurTarget, ...] = ()
    reference_frame_size: Size = (1, 1)

    def __post_init__(self):
        object.__setattr__(self, "targets", tuple(self.targets))
        if self.strength <= 0:
            raise InvalidJobError(f"strength must be > 0, got {self.strength}")
        width, height = self.reference_frame_size
        if width <= 0 or height <= 0:
            raise InvalidJobError(
                f"reference_frame_size must be positive, got {width}x{height}"
            )
        for target in self.targets:
            if not isinstance(target, BlurTarget):
                raise InvalidJobError(f"Expected BlurTarget, got {type(target)}")

    def targets_for_frame(self, frame_size: Size) -> Tuple[BlurTarget, ...]:
        """Targets rescaled from reference-frame to frame_size coordinates."""
        ref_w, ref_h = self.reference_frame_size
        if tuple(frame_size) == (ref_w, ref_h):
            return self.targets
        sx = frame_size[0] / float(ref_w)
        sy = frame_size[1] / float(ref_h)
        return tuple(target.scaled(sx, sy) for target in self.targets)

    def strength_for(self, target: Any) -> float:
        strength = getattr(target, "strength", None)
        return self.strength if strength is None else strength


def _coerce_target(value: Union[BlurTarget, Rect, Dict[str, Any]]) -> BlurTarget:
    if isinstance(value, BlurTarget):
        return value
    if isinstance(value, Rect):
        return BlurTarget(value)
    if isinstance(value, dict):
        rect = value.get("reference_rect")
        if isinstance(rect, (list, tuple)):
            rect = Rect(*rect)
        kwargs = {"reference_rect": rect, "strength": value.get("strength")}
        if value.get("target_id") is not None:
            kwargs["target_id"] = value["target_id"]
        return BlurTarget(**kwargs)
    raise InvalidJobError(f"Cannot build a BlurTarget from {type(value)}")


def create_job(
    targets: Sequence[Union[BlurTarget, Rect, Dict[str, Any]]],
    reference_frame_size: Size,
    strength: float = DEFAULT_VIDEO_STRENGTH,
) -> CompositeJob:
    """
    Build a CompositeJob.

    Args:
        targets: BlurTargets, Rects, or dicts with "reference_rect"
                 (Rect or [x, y, w, h]) and optional "strength"/"target_id"
        reference_frame_size: (width, height) of the frame targets were chosen on
        strength: Default blur strength

    Returns:
        CompositeJob

    Raises:
        InvalidJobError: If any value is invalid
    """
    try:
        width, height = (int(v) for v in reference_frame_size)
    except (TypeError, ValueError) as e:
        raise InvalidJobError(f"Invalid reference_frame_size {reference_frame_size!r}: {e}") from e
    return CompositeJob(
        strength=strength,
        targets=tuple(_coerce_target(t) for t in targets),
        reference_frame_size=(width, height),
    )
