"""
Region blur pipeline nodes.

Each node is a plain dict built by a create_*_node() function and run by
the matching execute_*_node(node, inputs) executor.

Node types:
    "Path Blur": blur hand-drawn paths in a photo
    "Face Blur": blur detected faces in a photo
    "Frame Blur": blur tracked targets in one video frame

Example:
    >>> node = create_path_blur_node("blur-1", paths=[[[50, 50]]], radius=20)
    >>> result = registry.execute("Path Blur", node, [image])
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from RB_Libs.constants import (
    DEFAULT_FACE_BLUR_RADIUS,
    DEFAULT_PATH_BLUR_RADIUS,
    DEFAULT_REGION_INSET,
    DEFAULT_VIDEO_STRENGTH,
    MAX_WORKING_DIMENSION,
    NODE_TYPE_FACE_BLUR,
    NODE_TYPE_FRAME_BLUR,
    NODE_TYPE_PATH_BLUR,
)
from RB_Libs.FaceLib.face_detector import CallableFaceDetector
from RB_Libs.FaceLib.face_quality import FaceQualityScorer
from RB_Libs.ImageEditingLib.image_models import BlurPath, FaceRegion, Rect
from RB_Libs.ImageEditingLib.image_pipeline import (
    FaceMaskStrategy,
    ImagePipeline,
    PathMaskStrategy,
)
from RB_Libs.VideoLib.frame_compositor import FrameCompositor, FrameCompositorConfig
from RB_Libs.VideoLib.video_models import create_job

logger = logging.getLogger(__name__)


def _require_image(inputs: List[Any], node_name: str) -> Any:
    if not inputs:
        raise ValueError(f"{node_name} requires an image input")
    image = inputs[0]
    if not hasattr(image, "mode"):
        raise TypeError(f"Expected PIL Image for image input, got {type(image)}")
    return image


def _faces_from_node(node: Dict[str, Any]) -> List[FaceRegion]:
    faces = []
    for entry in node.get("faces", []):
        faces.append(FaceRegion(
            rect=Rect(*entry["rect"]),
            confidence=float(entry.get("confidence", 1.0)),
            landmark_completeness=entry.get("landmark_completeness"),
        ))
    return faces


def _faces_input(node: Dict[str, Any], inputs: List[Any]) -> List[FaceRegion]:
    """Faces from inputs[1] if connected, else from the node's "faces" list."""
    if len(inputs) > 1 and inputs[1] is not None:
        faces = list(inputs[1])
        for face in faces:
            if not isinstance(face, FaceRegion):
                raise TypeError(f"Expected FaceRegion in faces input, got {type(face)}")
        return faces
    return _faces_from_node(node)


# ============================================================================
# Path Blur
# ============================================================================

def execute_path_blur_node(node: Dict[str, Any], inputs: List[Any]) -> Any:
    """
    Execute path blur node in pipeline.

    Node dict should contain:
        - 'paths': List of paths, each a list of [x, y] points
        - 'radius': Blur radius
        - 'max_dimension': Working size cap

    Inputs:
        - [0]: Image to blur (PIL Image)

    Returns:
        Blurred RGBA PIL Image at the capped working size
    """
    image = _require_image(inputs, "PathBlurNode")
    paths = [BlurPath(tuple(points)) for points in node.get("paths", [])]
    radius = float(node.get("radius", DEFAULT_PATH_BLUR_RADIUS))
    max_dimension = int(node.get("max_dimension", MAX_WORKING_DIMENSION))

    pipeline = ImagePipeline(
        max_dimension=max_dimension,
        default_radius=radius,
        mask_strategy=PathMaskStrategy(),
    )
    return pipeline.apply_blur(image, paths)


def create_path_blur_node(
    node_id: str,
    paths: Optional[Sequence[Sequence[Sequence[float]]]] = None,
    radius: float = DEFAULT_PATH_BLUR_RADIUS,
    max_dimension: int = MAX_WORKING_DIMENSION,
) -> Dict[str, Any]:
    """Create path blur node for graph."""
    return {
        "id": node_id,
        "type": NODE_TYPE_PATH_BLUR,
        "paths": [[list(p) for p in path] for path in (paths or [])],
        "radius": radius,
        "max_dimension": max_dimension,
    }


# ============================================================================
# Face Blur
# ============================================================================

def execute_face_blur_node(node: Dict[str, Any], inputs: List[Any]) -> Any:
    """
    Execute face blur node in pipeline.

    Node dict should contain:
        - 'radius': Blur radius
        - 'filter_faces': Drop faces failing the quality policy first
        - 'faces': Optional face dicts ({'rect': [x, y, w, h], 'confidence': ...})
          used when no faces input is connected

    Inputs:
        - [0]: Image to blur (PIL Image)
        - [1]: Optional list of FaceRegion

    Returns:
        Blurred RGBA PIL Image at the capped working size
    """
    image = _require_image(inputs, "FaceBlurNode")
    faces = _faces_input(node, inputs)
    if node.get("filter_faces", False):
        faces = FaceQualityScorer().filter_faces(faces, image.size)

    radius = float(node.get("radius", DEFAULT_FACE_BLUR_RADIUS))
    pipeline = ImagePipeline(
        max_dimension=int(node.get("max_dimension", MAX_WORKING_DIMENSION)),
        default_radius=radius,
        mask_strategy=FaceMaskStrategy(),
    )
    return pipeline.apply_blur(image, faces)


def create_face_blur_node(
    node_id: str,
    radius: float = DEFAULT_FACE_BLUR_RADIUS,
    filter_faces: bool = False,
    faces: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Create face blur node for graph."""
    return {
        "id": node_id,
        "type": NODE_TYPE_FACE_BLUR,
        "radius": radius,
        "filter_faces": filter_faces,
        "faces": list(faces or []),
    }


# ============================================================================
# Frame Blur
# ============================================================================

def execute_frame_blur_node(node: Dict[str, Any], inputs: List[Any]) -> Any:
    """
    Execute frame blur node in pipeline.

    Node dict should contain:
        - 'targets': Reference rects as [x, y, w, h]
        - 'reference_frame_size': [width, height] the targets were chosen on
        - 'strength': Blur strength
        - 'region_inset': Pixels added around each region

    Inputs:
        - [0]: Frame (PIL Image)
        - [1]: Optional list of FaceRegion detected in this frame

    Returns:
        Blurred RGBA frame (the unblurred frame if processing failed)
    """
    frame = _require_image(inputs, "FrameBlurNode")
    faces = _faces_input(node, inputs)
    reference_size = node.get("reference_frame_size") or list(frame.size)

    job = create_job(
        [Rect(*rect) for rect in node.get("targets", [])],
        reference_size,
        float(node.get("strength", DEFAULT_VIDEO_STRENGTH)),
    )
    config = FrameCompositorConfig(
        region_inset=float(node.get("region_inset", DEFAULT_REGION_INSET)),
        filter_candidates=bool(node.get("filter_candidates", False)),
    )
    detector = CallableFaceDetector(lambda image: faces)
    return FrameCompositor(config).process(frame, job, detector)


def create_frame_blur_node(
    node_id: str,
    targets: Optional[List[Sequence[float]]] = None,
    reference_frame_size: Optional[Sequence[int]] = None,
    strength: float = DEFAULT_VIDEO_STRENGTH,
    region_inset: float = DEFAULT_REGION_INSET,
    filter_candidates: bool = False,
) -> Dict[str, Any]:
    """Create frame blur node for graph."""
    return {
        "id": node_id,
        "type": NODE_TYPE_FRAME_BLUR,
        "targets": [list(rect) for rect in (targets or [])],
        "reference_frame_size": list(reference_frame_size) if reference_frame_size else None,
        "strength": strength,
        "region_inset": region_inset,
        "filter_candidates": filter_candidates,
    }
