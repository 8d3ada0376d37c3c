"""
Nearest-centroid face matching.

Maps each blur target to this frame's closest detected face, falling back
to the target's static reference rectangle when there is no usable face.
Matching is stateless: the output depends only on the arguments.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from RB_Libs.ImageEditingLib.image_models import FaceRegion, Rect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchedRegion:
    """Region to blur for one target in one frame.

    Attributes:
        target_id: Id of the BlurTarget this region belongs to
        rect: Region in frame pixel coordinates
        tracked: True when rect came from a detected face
        distance: Centre distance to the matched face, None for the static fallback
        strength: Per-target blur strength, if the target has one
    """
    target_id: Any
    rect: Rect
    tracked: bool
    distance: Optional[float] = None
    strength: Optional[float] = None


class FaceMatcher:
    """
    Matches targets to candidate faces by centre distance.

    Args:
        max_distance: Reject nearest faces farther than this (None = always accept)
    """

    def __init__(self, max_distance: Optional[float] = None):
        if max_distance is not None and max_distance < 0:
            raise ValueError(f"max_distance must be >= 0 or None, got {max_distance}")
        self.max_distance = max_distance

    def match(
        self,
        targets: Sequence[Any],
        candidate_faces: Sequence[FaceRegion],
        current_frame_time: Optional[float] = None,
    ) -> List[MatchedRegion]:
        """
        Match every target to a region.

        Args:
            targets: BlurTarget-like objects with target_id, reference_rect and strength
            candidate_faces: Faces detected in the current frame
            current_frame_time: Presentation time, used only for diagnostics

        Returns:
            One MatchedRegion per target, in target order
        """
        regions = []
        for target in targets:
            reference = target.reference_rect
            nearest = None
            nearest_distance = None
            for face in candidate_faces:
                distance = reference.distance_to(face.rect)
                if nearest_distance is None or distance < nearest_distance:
                    nearest = face
                    nearest_distance = distance

            strength = getattr(target, "strength", None)
            if nearest is not None and (
                self.max_distance is None or nearest_distance <= self.max_distance
            ):
                logger.debug(
                    f"Target {target.target_id} tracked face at distance "
                    f"{nearest_distance:.1f} (t={current_frame_time})"
                )
                regions.append(MatchedRegion(target.target_id, nearest.rect, True, nearest_distance, strength))
            else:
                logger.debug(
                    f"Target {target.target_id} using reference rect (t={current_frame_time})"
                )
                regions.append(MatchedRegion(target.target_id, reference, False, None, strength))
        return regions
