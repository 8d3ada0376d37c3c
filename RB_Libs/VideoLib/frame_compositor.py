"""
Per-frame video blur compositor.

For each decoded frame:

1. Detect faces in this frame only
2. Optionally drop low-quality candidates
3. Match every job target to its nearest face (or its static rect)
4. Blur each matched region, expanded by a fixed inset, through a
   feathered ellipse
5. Optionally blur a centre square when nothing else was blurred

process() is reentrant: the only shared input is the frozen CompositeJob,
and the input frame is never modified. A failure inside a frame returns
that frame unblurred with a warning instead of failing the job.

Classes:
    FrameCompositorConfig: Tunables for FrameCompositor
    FrameResult: Output frame plus what was blurred and any warning
    FrameCompositor: Stateless per-frame processor
    FrameFilter: configure/process_frame interface for frame pumps
    FaceBlurFrameFilter: FrameFilter backed by FrameCompositor
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

from RB_Libs.constants import (
    DEBUG_CENTER_SIZE,
    DEFAULT_BLUR_BACKEND,
    DEFAULT_REGION_INSET,
    EDGE_MODE_EXTEND,
)
from RB_Libs.errors import (
    CompositingDimensionMismatch,
    FrameProcessingError,
    InvalidJobError,
)
from RB_Libs.FaceLib.face_detector import FaceDetector
from RB_Libs.FaceLib.face_matcher import FaceMatcher, MatchedRegion
from RB_Libs.FaceLib.face_quality import FaceQualityScorer
from RB_Libs.ImageEditingLib.blur_filter import blur_region
from RB_Libs.ImageEditingLib.compositor import composite_region
from RB_Libs.ImageEditingLib.image_models import Rect, Size, ensure_image_buffer
from RB_Libs.ImageEditingLib.mask_rasterizer import REGION_ELLIPSE_POLICY, MaskRasterizer
from RB_Libs.VideoLib.video_models import CompositeJob

logger = logging.getLogger(__name__)

DEBUG_CENTER_TARGET_ID = "debug-center"


@dataclass(frozen=True)
class FrameCompositorConfig:
    """Configuration for FrameCompositor.

    Attributes:
        region_inset: Pixels added on every side of a matched region
        filter_candidates: Run detected faces through FaceQualityScorer first
        debug_center_blur: Blur a centre square when nothing else was blurred
        debug_center_size: Side of that centre square
        max_match_distance: Reject faces farther than this from a target (None = never)
        blur_backend: "pil" or "scipy"
    """
    region_inset: float = DEFAULT_REGION_INSET
    filter_candidates: bool = False
    debug_center_blur: bool = False
    debug_center_size: float = DEBUG_CENTER_SIZE
    max_match_distance: Optional[float] = None
    blur_backend: str = DEFAULT_BLUR_BACKEND

    def __post_init__(self):
        if self.region_inset < 0:
            raise ValueError(f"region_inset must be >= 0, got {self.region_inset}")
        if self.debug_center_size <= 0:
            raise ValueError(f"debug_center_size must be > 0, got {self.debug_center_size}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FrameCompositorConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


@dataclass(frozen=True)
class FrameResult:
    """Outcome of processing one frame.

    Attributes:
        frame: Output RGBA frame (a new buffer)
        blurred_regions: Regions that were blurred
        warning: Why the frame passed through unblurred, if it did
        error: FrameProcessingError wrapping the failure, if any
    """
    frame: Any
    blurred_regions: Tuple[MatchedRegion, ...] = ()
    warning: Optional[str] = None
    error: Optional[FrameProcessingError] = None

    @property
    def has_warning(self) -> bool:
        return self.warning is not None


class FrameCompositor:
    """Blurs job targets in one frame at a time."""

    def __init__(
        self,
        config: Optional[FrameCompositorConfig] = None,
        scorer: Optional[FaceQualityScorer] = None,
    ):
        self.config = config or FrameCompositorConfig()
        self.scorer = scorer or FaceQualityScorer()
        self.matcher = FaceMatcher(self.config.max_match_distance)
        self._rasterizer = MaskRasterizer(REGION_ELLIPSE_POLICY)

    def process(self, frame: Any, job: CompositeJob, detector: FaceDetector) -> Any:
        """
        Blur every target of job in frame.

        Returns:
            New RGBA frame; the unblurred frame if processing failed
        """
        return self.process_with_result(frame, job, detector).frame

    def process_with_result(
        self,
        frame: Any,
        job: CompositeJob,
        detector: FaceDetector,
        frame_time: Optional[float] = None,
    ) -> FrameResult:
        """
        Blur every target of job in frame and report what happened.

        Args:
            frame: Decoded frame (PIL Image, any mode)
            job: Immutable job shared by all frames
            detector: Synchronous face detector
            frame_time: Presentation time in seconds, for diagnostics

        Returns:
            FrameResult

        Raises:
            TypeError: If frame is not a PIL Image
            CompositingDimensionMismatch: On internal buffer size disagreement
        """
        source = ensure_image_buffer(frame)
        try:
            output, regions = self._composite_frame(source, job, detector, frame_time)
        except CompositingDimensionMismatch:
            raise
        except Exception as e:
            warning = f"{type(e).__name__}: {e}"
            error = FrameProcessingError(f"Frame at t={frame_time} passed through unblurred: {warning}")
            error.__cause__ = e
            logger.warning(str(error))
            return FrameResult(frame=source, blurred_regions=(), warning=warning, error=error)
        return FrameResult(frame=output, blurred_regions=tuple(regions))

    def _composite_frame(
        self,
        frame: Any,
        job: CompositeJob,
        detector: FaceDetector,
        frame_time: Optional[float],
    ) -> Tuple[Any, List[MatchedRegion]]:
        size = frame.size
        faces = list(detector.detect(frame))
        if self.config.filter_candidates and faces:
            faces = self.scorer.filter_faces(faces, size)

        targets = job.targets_for_frame(size)
        matched = self.matcher.match(targets, faces, frame_time)

        output = frame
        blurred: List[MatchedRegion] = []
        for region in matched:
            radius = job.strength if region.strength is None else region.strength
            output, applied = self._blur_rect(output, region.rect, radius)
            if applied:
                blurred.append(region)

        if not blurred and self.config.debug_center_blur:
            side = self.config.debug_center_size
            center = Rect.from_center((size[0] / 2.0, size[1] / 2.0), side, side)
            output, applied = self._blur_rect(output, center, job.strength, inset=0.0)
            if applied:
                logger.debug(f"Applied debug centre blur at t={frame_time}")
                blurred.append(MatchedRegion(DEBUG_CENTER_TARGET_ID, center, False))

        return output, blurred

    def _blur_rect(
        self,
        frame: Any,
        rect: Rect,
        radius: float,
        inset: Optional[float] = None,
    ) -> Tuple[Any, bool]:
        """Blur rect (expanded by the inset) through a feathered ellipse."""
        inset = self.config.region_inset if inset is None else inset
        region = rect.expanded(inset, inset).clamped_to(frame.size)
        if region.is_empty:
            return frame, False

        box = region.to_box()
        crop_size: Size = (box[2] - box[0], box[3] - box[1])
        blurred_crop = blur_region(
            frame, Rect.from_box(box), radius, self.config.blur_backend, EDGE_MODE_EXTEND
        )
        if blurred_crop is None:
            return frame, False

        local = Rect(region.x - box[0], region.y - box[1], region.width, region.height)
        crop_mask = self._rasterizer.rasterize_ellipse_region(local, crop_size)
        return composite_region(frame, blurred_crop, crop_mask, box), True


class FrameFilter(ABC):
    """Two-call interface used by frame pumps."""

    @abstractmethod
    def configure(self, render_size: Size, job: CompositeJob) -> None:
        pass

    @abstractmethod
    def process_frame(self, frame: Any) -> Any:
        pass


class FaceBlurFrameFilter(FrameFilter):
    """FrameFilter that blurs tracked faces with a FrameCompositor."""

    def __init__(self, detector: FaceDetector, compositor: Optional[FrameCompositor] = None):
        self.detector = detector
        self.compositor = compositor or FrameCompositor()
        self.render_size: Optional[Size] = None
        self.job: Optional[CompositeJob] = None

    def configure(self, render_size: Size, job: CompositeJob) -> None:
        """Bind a job, rescaled to the size frames will be rendered at."""
        if not isinstance(job, CompositeJob):
            raise InvalidJobError(f"Expected CompositeJob, got {type(job)}")
        width, height = render_size
        if width <= 0 or height <= 0:
            raise InvalidJobError(f"render_size must be positive, got {width}x{height}")

        self.render_size = (int(width), int(height))
        self.job = replace(
            job,
            targets=job.targets_for_frame(self.render_size),
            reference_frame_size=self.render_size,
        )

    def process_frame(self, frame: Any) -> Any:
        return self.process_frame_with_result(frame).frame

    def process_frame_with_result(self, frame: Any, frame_time: Optional[float] = None) -> FrameResult:
        if self.job is None:
            raise InvalidJobError("FaceBlurFrameFilter.configure() must be called first")
        return self.compositor.process_with_result(frame, self.job, self.detector, frame_time)
