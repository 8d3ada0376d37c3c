"""
Face detector contract and adapters.

The blur engine never detects faces itself. It calls a FaceDetector
synchronously once per image or frame; these adapters wrap real
detectors into that contract.

Classes:
    FaceDetector: Abstract synchronous detector
    CallableFaceDetector: Wraps a plain function
    FutureFaceDetector: Blocks on an asynchronous detector's Future
    QualityFilteredDetector: Drops faces failing a FaceQualityScorer
    FallbackChainDetector: First detector that finds a face wins
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import Any, Callable, List, Optional, Sequence

from RB_Libs.FaceLib.face_quality import FaceQualityScorer
from RB_Libs.ImageEditingLib.image_models import FaceRegion

logger = logging.getLogger(__name__)


class FaceDetector(ABC):
    """Synchronous face detector."""

    @abstractmethod
    def detect(self, image: Any) -> List[FaceRegion]:
        """Return the faces in image, in image pixel coordinates."""
        pass


class CallableFaceDetector(FaceDetector):
    """Adapts fn(image) -> iterable of FaceRegion."""

    def __init__(self, fn: Callable[[Any], Sequence[FaceRegion]]):
        if not callable(fn):
            raise TypeError(f"Expected callable, got {type(fn)}")
        self._fn = fn

    def detect(self, image: Any) -> List[FaceRegion]:
        return list(self._fn(image))


class FutureFaceDetector(FaceDetector):
    """
    Adapts an asynchronous detector to the synchronous contract.

    Args:
        submit_fn: Callable taking an image and returning a concurrent.futures.Future
        timeout: Seconds to wait for each result (None = wait forever)
    """

    def __init__(self, submit_fn: Callable[[Any], Future], timeout: Optional[float] = None):
        if not callable(submit_fn):
            raise TypeError(f"Expected callable, got {type(submit_fn)}")
        self._submit_fn = submit_fn
        self.timeout = timeout

    def detect(self, image: Any) -> List[FaceRegion]:
        future = self._submit_fn(image)
        return list(future.result(timeout=self.timeout))


class QualityFilteredDetector(FaceDetector):
    """Keeps only faces accepted by a FaceQualityScorer."""

    def __init__(self, detector: FaceDetector, scorer: Optional[FaceQualityScorer] = None):
        self.detector = detector
        self.scorer = scorer or FaceQualityScorer()

    def detect(self, image: Any) -> List[FaceRegion]:
        faces = self.detector.detect(image)
        return self.scorer.filter_faces(faces, image.size)


class FallbackChainDetector(FaceDetector):
    """
    Tries detectors in order and returns the first non-empty result.

    A detector that raises is logged and skipped; if every detector raises
    the last error propagates.
    """

    def __init__(self, detectors: Sequence[FaceDetector]):
        if not detectors:
            raise ValueError("FallbackChainDetector needs at least one detector")
        self.detectors = list(detectors)

    def detect(self, image: Any) -> List[FaceRegion]:
        last_error = None
        failures = 0
        for index, detector in enumerate(self.detectors):
            try:
                faces = detector.detect(image)
            except Exception as e:
                logger.warning(f"Detector {index} ({type(detector).__name__}) failed: {e}")
                last_error = e
                failures += 1
                continue
            if faces:
                logger.debug(f"Detector {index} found {len(faces)} face(s)")
                return faces

        if failures == len(self.detectors):
            raise last_error
        return []
