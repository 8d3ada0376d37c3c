"""
Image editing data models for Region Blur.

This module defines the core data structures shared by the photo and video
blur paths. All coordinates are in source image pixel space with a top-left
origin unless a function says otherwise.

Classes:
    Rect: Axis-aligned rectangle with float coordinates
    BlurPath: Freehand shape captured by a drawing surface
    FaceLandmarks: Optional facial feature point groups
    FaceRegion: Detected face rectangle with confidence and landmark data

Type Aliases:
    Point: An (x, y) float pair
    Size: A (width, height) integer pair
    Shape: Either a BlurPath or a FaceRegion
"""

import math
from dataclasses import dataclass, replace
from typing import Any, Iterable, Optional, Sequence, Tuple, Union

from RB_Libs.constants import BUFFER_MODE
from RB_Libs.pillow_compat import ImageClass

Point = Tuple[float, float]
Size = Tuple[int, int]


def _points_tuple(points: Optional[Iterable[Sequence[float]]]) -> Optional[Tuple[Point, ...]]:
    if points is None:
        return None
    return tuple((float(p[0]), float(p[1])) for p in points)


def _scale_points(points: Optional[Tuple[Point, ...]], sx: float, sy: float) -> Optional[Tuple[Point, ...]]:
    if points is None:
        return None
    return tuple((x * sx, y * sy) for x, y in points)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle.

    Attributes:
        x: Left edge
        y: Top edge
        width: Width (<= 0 means empty)
        height: Height (<= 0 means empty)
    """
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_box(cls, box: Sequence[float]) -> "Rect":
        """Create from an (x0, y0, x1, y1) box."""
        x0, y0, x1, y1 = (float(v) for v in box)
        return cls(x0, y0, x1 - x0, y1 - y0)

    @classmethod
    def from_center(cls, center: Point, width: float, height: float) -> "Rect":
        cx, cy = center
        return cls(cx - width / 2.0, cy - height / 2.0, width, height)

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    @property
    def area(self) -> float:
        if self.is_empty:
            return 0.0
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def scaled(self, sx: float, sy: float) -> "Rect":
        """Scale position and size by per-axis factors."""
        return Rect(self.x * sx, self.y * sy, self.width * sx, self.height * sy)

    def expanded(self, dx: float, dy: float) -> "Rect":
        """Grow each side by dx/dy (negative values shrink, never below zero size)."""
        width = max(0.0, self.width + 2.0 * dx)
        height = max(0.0, self.height + 2.0 * dy)
        cx, cy = self.center
        return Rect.from_center((cx, cy), width, height)

    def scaled_about_center(self, factor: float) -> "Rect":
        return Rect.from_center(self.center, self.width * factor, self.height * factor)

    def intersection(self, other: "Rect") -> "Rect":
        """Overlap of two rectangles; an empty Rect when they do not overlap."""
        x0 = max(self.x, other.x)
        y0 = max(self.y, other.y)
        x1 = min(self.max_x, other.max_x)
        y1 = min(self.max_y, other.max_y)
        if x1 <= x0 or y1 <= y0:
            return Rect(x0, y0, 0.0, 0.0)
        return Rect(x0, y0, x1 - x0, y1 - y0)

    def clamped_to(self, size: Size) -> "Rect":
        """Intersection with the image rectangle (0, 0, width, height)."""
        return self.intersection(Rect(0.0, 0.0, float(size[0]), float(size[1])))

    def to_box(self) -> Tuple[int, int, int, int]:
        """Integer pixel box (x0, y0, x1, y1) covering the rect, x1/y1 exclusive."""
        return (
            int(math.floor(self.x)),
            int(math.floor(self.y)),
            int(math.ceil(self.max_x)),
            int(math.ceil(self.max_y)),
        )

    def distance_to(self, other: "Rect") -> float:
        """Euclidean distance between the two centres."""
        ax, ay = self.center
        bx, by = other.center
        return math.hypot(ax - bx, ay - by)


@dataclass(frozen=True)
class BlurPath:
    """Freehand shape in source image pixel coordinates.

    One point is a filled dot, two or more points a closed filled polygon.
    """
    points: Tuple[Point, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "points", _points_tuple(self.points) or ())

    @property
    def is_empty(self) -> bool:
        return len(self.points) == 0

    @property
    def is_dot(self) -> bool:
        return len(self.points) == 1

    def scaled(self, sx: float, sy: float) -> "BlurPath":
        return BlurPath(_scale_points(self.points, sx, sy) or ())


@dataclass(frozen=True)
class FaceLandmarks:
    """Facial feature point groups in source image pixel coordinates.

    Any group may be None when the detector did not find it.
    """
    left_eye: Optional[Tuple[Point, ...]] = None
    right_eye: Optional[Tuple[Point, ...]] = None
    nose: Optional[Tuple[Point, ...]] = None
    outer_lips: Optional[Tuple[Point, ...]] = None
    face_contour: Optional[Tuple[Point, ...]] = None

    def __post_init__(self):
        for name in ("left_eye", "right_eye", "nose", "outer_lips", "face_contour"):
            object.__setattr__(self, name, _points_tuple(getattr(self, name)))

    @property
    def completeness(self) -> float:
        """Fraction of {left eye, right eye, nose, mouth} that is present."""
        required = (self.left_eye, self.right_eye, self.nose, self.outer_lips)
        return sum(1 for group in required if group) / len(required)

    def scaled(self, sx: float, sy: float) -> "FaceLandmarks":
        return FaceLandmarks(
            left_eye=_scale_points(self.left_eye, sx, sy),
            right_eye=_scale_points(self.right_eye, sx, sy),
            nose=_scale_points(self.nose, sx, sy),
            outer_lips=_scale_points(self.outer_lips, sx, sy),
            face_contour=_scale_points(self.face_contour, sx, sy),
        )


@dataclass(frozen=True)
class FaceRegion:
    """Face rectangle produced by an external detector.

    Attributes:
        rect: Bounding box in source image pixel coordinates
        confidence: Detector confidence in [0, 1]
        landmark_completeness: Explicit completeness in [0, 1], if the detector reports one
        landmarks: Landmark point groups, if the detector reports them
    """
    rect: Rect
    confidence: float = 1.0
    landmark_completeness: Optional[float] = None
    landmarks: Optional[FaceLandmarks] = None

    def __post_init__(self):
        if not isinstance(self.rect, Rect):
            raise TypeError(f"Expected Rect for rect, got {type(self.rect)}")
        if not (0.0 <= self.confidence <= 1.0):
            raise ValueError(f"confidence must be 0.0-1.0, got {self.confidence}")
        if self.landmark_completeness is not None and not (0.0 <= self.landmark_completeness <= 1.0):
            raise ValueError(
                f"landmark_completeness must be 0.0-1.0, got {self.landmark_completeness}"
            )

    @property
    def center(self) -> Point:
        return self.rect.center

    @property
    def effective_landmark_completeness(self) -> Optional[float]:
        """Explicit completeness, else derived from landmarks, else None."""
        if self.landmark_completeness is not None:
            return self.landmark_completeness
        if self.landmarks is not None:
            return self.landmarks.completeness
        return None

    def scaled(self, sx: float, sy: float) -> "FaceRegion":
        landmarks = self.landmarks.scaled(sx, sy) if self.landmarks is not None else None
        return replace(self, rect=self.rect.scaled(sx, sy), landmarks=landmarks)


Shape = Union[BlurPath, FaceRegion]


def scale_shapes(shapes: Sequence[Shape], sx: float, sy: float) -> list:
    """Scale every shape's coordinates by per-axis factors."""
    return [shape.scaled(sx, sy) for shape in shapes]


def ensure_image_buffer(image: Any) -> Any:
    """
    Validate an image and return it as a new RGBA buffer.

    Args:
        image: PIL Image in any mode

    Returns:
        A new RGBA PIL Image owned by the caller

    Raises:
        TypeError: If image is not a PIL Image
        ValueError: If width or height is zero
    """
    if not isinstance(image, ImageClass):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    width, height = image.size
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

    if image.mode == BUFFER_MODE:
        return image.copy()
    return image.convert(BUFFER_MODE)


def normalized_rect_to_pixels(rect: Rect, image_size: Size, flip_y: bool = True) -> Rect:
    """
    Convert a normalized detector rect to pixel coordinates.

    Detectors commonly report boxes in [0, 1] with a bottom-left origin;
    the blur engine works with a top-left origin.

    Args:
        rect: Normalized rectangle
        image_size: (width, height) of the image the detector saw
        flip_y: Whether the rect uses a bottom-left origin

    Returns:
        Rect in top-left pixel coordinates
    """
    width, height = image_size
    y = (1.0 - rect.y - rect.height) if flip_y else rect.y
    return Rect(rect.x * width, y * height, rect.width * width, rect.height * height)


def display_to_image_point(
    point: Point,
    zoom_scale: float = 1.0,
    content_offset: Point = (0.0, 0.0),
    image_origin: Point = (0.0, 0.0),
) -> Point:
    """
    Convert a point on a zoomed/panned display surface to image pixel space.

    Args:
        point: Location on the display surface
        zoom_scale: Current zoom (1.0 = one display unit per image pixel)
        content_offset: Scroll offset of the zoomed content
        image_origin: Where the image view sits inside the zoomed content

    Returns:
        The point in source image pixel coordinates
    """
    if zoom_scale <= 0:
        raise ValueError(f"zoom_scale must be > 0, got {zoom_scale}")
    content_x = (point[0] + content_offset[0]) / zoom_scale
    content_y = (point[1] + content_offset[1]) / zoom_scale
    return (
        content_x - image_origin[0] / zoom_scale,
        content_y - image_origin[1] / zoom_scale,
    )


def image_to_display_point(
    point: Point,
    zoom_scale: float = 1.0,
    content_offset: Point = (0.0, 0.0),
    image_origin: Point = (0.0, 0.0),
) -> Point:
    """Inverse of display_to_image_point()."""
    if zoom_scale <= 0:
        raise ValueError(f"zoom_scale must be > 0, got {zoom_scale}")
    return (
        point[0] * zoom_scale + image_origin[0] - content_offset[0],
        point[1] * zoom_scale + image_origin[1] - content_offset[1],
    )
