"""
FaceLib - Face quality, matching and detector adapters

This module provides the face quality policy, nearest-centroid matching
of blur targets, and adapters that bring external detectors into the
synchronous FaceDetector contract.
"""

from RB_Libs.FaceLib.face_quality import (
    FaceQualityPolicy,
    FaceQualityResult,
    FaceQualityScorer,
)
from RB_Libs.FaceLib.face_matcher import FaceMatcher, MatchedRegion
from RB_Libs.FaceLib.face_detector import (
    CallableFaceDetector,
    FaceDetector,
    FallbackChainDetector,
    FutureFaceDetector,
    QualityFilteredDetector,
)

__all__ = [
    "FaceQualityPolicy",
    "FaceQualityResult",
    "FaceQualityScorer",
    "FaceMatcher",
    "MatchedRegion",
    "CallableFaceDetector",
    "FaceDetector",
    "FallbackChainDetector",
    "FutureFaceDetector",
    "QualityFilteredDetector",
]
