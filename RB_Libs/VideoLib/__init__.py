"""
VideoLib - Per-frame face blurring for video

This module provides the immutable job model, the per-frame compositor,
the frame filter interface, face scanning and the export runner.
"""

from RB_Libs.VideoLib.video_models import BlurTarget, CompositeJob, create_job
from RB_Libs.VideoLib.frame_compositor import (
    FaceBlurFrameFilter,
    FrameCompositor,
    FrameCompositorConfig,
    FrameFilter,
    FrameResult,
)
from RB_Libs.VideoLib.video_export import (
    ExportResult,
    VideoBlurResult,
    blur_video_frames,
    export_video,
    iter_blurred_frames,
)
from RB_Libs.VideoLib.face_scan import DetectedFaceCandidate, scan_frames_for_faces

__all__ = [
    "BlurTarget",
    "CompositeJob",
    "create_job",
    "FaceBlurFrameFilter",
    "FrameCompositor",
    "FrameCompositorConfig",
    "FrameFilter",
    "FrameResult",
    "ExportResult",
    "VideoBlurResult",
    "blur_video_frames",
    "export_video",
    "iter_blurred_frames",
    "DetectedFaceCandidate",
    "scan_frames_for_faces",
]
