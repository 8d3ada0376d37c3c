"""
Face scanning over sampled frames.

Offers blur target candidates by running the detector on one frame per
sampling interval. When no face is found anywhere, a centre square is
offered so the user always has something to pick.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

from RB_Libs.constants import DEFAULT_SCAN_INTERVAL, SCAN_FALLBACK_FRACTION
from RB_Libs.FaceLib.face_detector import FaceDetector
from RB_Libs.ImageEditingLib.image_models import Rect, ensure_image_buffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectedFaceCandidate:
    """A face found while scanning.

    Attributes:
        rect: Face in frame pixel coordinates
        time: Presentation time of the frame, in seconds
        preview: Crop of the face for a picker, None for the fallback candidate
    """
    rect: Rect
    time: float
    preview: Optional[Any] = None


def scan_frames_for_faces(
    frames: Iterable[Tuple[float, Any]],
    detector: FaceDetector,
    sample_interval: float = DEFAULT_SCAN_INTERVAL,
) -> List[DetectedFaceCandidate]:
    """
    Collect face candidates from sampled frames.

    Args:
        frames: (time_seconds, image) pairs in presentation order
        detector: Synchronous face detector
        sample_interval: Seconds between sampled frames

    Returns:
        Candidates in scan order; a single centre-square candidate when no
        face was found; an empty list when there were no frames
    """
    if sample_interval <= 0:
        raise ValueError(f"sample_interval must be > 0, got {sample_interval}")

    candidates: List[DetectedFaceCandidate] = []
    first_frame = None
    next_sample = None

    for time, image in frames:
        if first_frame is None:
            first_frame = (time, image)
            next_sample = time
        if time < next_sample:
            continue
        next_sample = time + sample_interval

        try:
            faces = detector.detect(image)
        except Exception as e:
            logger.warning(f"Face detection failed at t={time:.2f}s, skipping frame: {e}")
            continue

        for face in faces:
            rect = face.rect.clamped_to(image.size)
            if rect.is_empty:
                continue
            preview = ensure_image_buffer(image).crop(rect.to_box())
            candidates.append(DetectedFaceCandidate(rect, time, preview))

    if first_frame is None:
        return []

    if not candidates:
        time, image = first_frame
        width, height = image.size
        side = min(width, height) * SCAN_FALLBACK_FRACTION
        rect = Rect.from_center((width / 2.0, height / 2.0), side, side)
        logger.info("No faces found while scanning, offering centre region")
        candidates.append(DetectedFaceCandidate(rect, time, None))
    else:
        logger.info(f"Scan found {len(candidates)} face candidate(s)")

    return candidates
