"""
Video blur runner and export.

Runs a FrameCompositor over a stream of decoded frames and hands the
results, in order, to an external encoder. Frames are independent, so they
are processed on a thread pool; only a small window of frames is in flight
at once, and each result is released as soon as it has been consumed. The
warning count is aggregated here from the returned FrameResults rather than
by shared counters.

Functions:
    iter_blurred_frames: Stream (index, FrameResult) pairs in input order
    blur_video_frames: Blur all frames, returning frames and warnings
    export_video: Stream blurred frames into an encoder
"""

import collections
import concurrent.futures
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

from RB_Libs.constants import FRAMES_IN_FLIGHT_PER_WORKER
from RB_Libs.errors import ExportSessionError
from RB_Libs.FaceLib.face_detector import FaceDetector
from RB_Libs.VideoLib.frame_compositor import FrameCompositor, FrameResult
from RB_Libs.VideoLib.video_models import CompositeJob

logger = logging.getLogger(__name__)


@dataclass
class VideoBlurResult:
    """Processed frames in input order plus per-frame warnings.

    Attributes:
        frames: Output frames
        warning_count: Number of frames that passed through unblurred
        warnings: (frame_index, message) for every such frame
    """
    frames: List[Any] = field(default_factory=list)
    warning_count: int = 0
    warnings: List[tuple] = field(default_factory=list)


@dataclass
class ExportResult:
    """Outcome of an export.

    Attributes:
        success: True when every frame reached the encoder
        error: Encoder failure, if any
        frame_count: Frames handed to the encoder
        warning_count: Frames exported unblurred
    """
    success: bool
    error: Optional[ExportSessionError] = None
    frame_count: int = 0
    warning_count: int = 0


def _frame_time(index: int, frame_times: Optional[Sequence[float]]) -> Optional[float]:
    if frame_times is None:
        return None
    if index >= len(frame_times):
        raise ValueError(f"frame_times has {len(frame_times)} entries, no time for frame {index}")
    return frame_times[index]


def _window_size(max_workers: Optional[int]) -> int:
    # Same default worker count as ThreadPoolExecutor
    workers = max_workers or min(32, (os.cpu_count() or 1) + 4)
    return workers * FRAMES_IN_FLIGHT_PER_WORKER


def iter_blurred_frames(
    frames: Iterable[Any],
    job: CompositeJob,
    detector: FaceDetector,
    compositor: Optional[FrameCompositor] = None,
    use_threading: bool = True,
    max_workers: int = None,
    frame_times: Optional[Sequence[float]] = None,
) -> Iterator[Tuple[int, FrameResult]]:
    """
    Blur frames lazily, yielding (index, FrameResult) in input order.

    Frames are pulled from the source only while fewer than
    max_workers * FRAMES_IN_FLIGHT_PER_WORKER are pending.

    Args:
        frames: Decoded frames (PIL Images); any iterable, including generators
        job: Immutable job shared by all frames
        detector: Synchronous face detector (must be safe to call from threads
                  when use_threading is enabled)
        compositor: FrameCompositor to use (default: a new one)
        use_threading: Process frames concurrently (default: True)
        max_workers: Maximum number of threads (default: None = executor default)
        frame_times: Optional presentation time per frame, for diagnostics

    Raises:
        ValueError: If frame_times does not cover every frame
        CompositingDimensionMismatch: Propagated from any frame
    """
    compositor = compositor or FrameCompositor()
    if frame_times is not None and hasattr(frames, "__len__") and len(frame_times) != len(frames):
        raise ValueError(
            f"frame_times has {len(frame_times)} entries for {len(frames)} frames"
        )

    if not use_threading:
        for index, frame in enumerate(frames):
            yield index, compositor.process_with_result(
                frame, job, detector, _frame_time(index, frame_times)
            )
        return

    window = _window_size(max_workers)
    pending = collections.deque()
    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        try:
            for index, frame in enumerate(frames):
                future = executor.submit(
                    compositor.process_with_result,
                    frame,
                    job,
                    detector,
                    _frame_time(index, frame_times),
                )
                pending.append((index, future))
                if len(pending) >= window:
                    done_index, done = pending.popleft()
                    yield done_index, done.result()

            while pending:
                done_index, done = pending.popleft()
                yield done_index, done.result()
        finally:
            for _, future in pending:
                future.cancel()


def blur_video_frames(
    frames: Iterable[Any],
    job: CompositeJob,
    detector: FaceDetector,
    compositor: Optional[FrameCompositor] = None,
    use_threading: bool = True,
    max_workers: int = None,
    frame_times: Optional[Sequence[float]] = None,
) -> VideoBlurResult:
    """
    Blur every frame of a video and collect the results.

    Holds every output frame; use iter_blurred_frames or export_video for
    long videos.

    Returns:
        VideoBlurResult with frames in input order

    Raises:
        ValueError: If frame_times does not cover every frame
        CompositingDimensionMismatch: Propagated from any frame
    """
    outcome = VideoBlurResult()
    for index, result in iter_blurred_frames(
        frames, job, detector, compositor, use_threading, max_workers, frame_times
    ):
        outcome.frames.append(result.frame)
        if result.has_warning:
            outcome.warning_count += 1
            outcome.warnings.append((index, result.warning))
    return outcome


def _call_encoder(call: Callable, delivered: int, *args) -> Optional[ExportSessionError]:
    try:
        call(*args)
    except Exception as e:
        error = ExportSessionError(f"Encoder failed after {delivered} frame(s): {e}")
        error.__cause__ = e
        logger.error(str(error))
        return error
    return None


def export_video(
    frames: Iterable[Any],
    job: CompositeJob,
    detector: FaceDetector,
    encoder: Callable[[Any], None],
    compositor: Optional[FrameCompositor] = None,
    use_threading: bool = True,
    max_workers: int = None,
) -> ExportResult:
    """
    Blur frames and hand them, in order, to an encoder.

    Each frame is passed to the encoder as soon as it and all earlier frames
    are ready; nothing is kept after the encoder returns.

    Args:
        frames: Decoded frames; any iterable, including a decoder generator
        job: Immutable job shared by all frames
        detector: Synchronous face detector
        encoder: Callable receiving each processed frame; if it also has a
                 finish() method, that is called once after the last frame
        compositor: FrameCompositor to use
        use_threading: Process frames concurrently
        max_workers: Maximum number of threads

    Returns:
        ExportResult; encoder failures give success=False with the error

    Raises:
        CompositingDimensionMismatch: Propagated from any frame
    """
    delivered = 0
    warning_count = 0
    stream = iter_blurred_frames(
        frames, job, detector, compositor, use_threading, max_workers
    )
    try:
        for _, result in stream:
            if result.has_warning:
                warning_count += 1
            error = _call_encoder(encoder, delivered, result.frame)
            if error is not None:
                return ExportResult(
                    success=False,
                    error=error,
                    frame_count=delivered,
                    warning_count=warning_count,
                )
            delivered += 1
    finally:
        stream.close()

    finish = getattr(encoder, "finish", None)
    if callable(finish):
        error = _call_encoder(finish, delivered)
        if error is not None:
            return ExportResult(
                success=False,
                error=error,
                frame_count=delivered,
                warning_count=warning_count,
            )

    logger.info(f"Exported {delivered} frame(s) with {warning_count} warning(s)")
    return ExportResult(
        success=True,
        frame_count=delivered,
        warning_count=warning_count,
    )
