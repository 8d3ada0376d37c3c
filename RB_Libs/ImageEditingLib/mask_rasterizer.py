"""
Blur Mask Rasterizer.

Renders a one-channel (mode "L") blur mask from either freehand paths or
detected face rectangles. 0 = keep sharp, 255 = fully blurred.

- Freehand paths are filled with a hard edge at 255 ("blur exactly what
  was circled"). A single point becomes a dot whose radius is 5% of the
  shorter image side.
- Face regions are expanded, fitted to a face-like aspect ratio and drawn
  as three concentric ellipses, giving a cheap radial falloff instead of
  hard rectangle corners.

Shapes are merged with a per-pixel maximum, so overlaps saturate at 255.

Example:
    >>> rasterizer = MaskRasterizer()
    >>> mask = rasterizer.rasterize([BlurPath(((50, 50),))], (100, 100))
    >>> mask.getpixel((50, 50))
    255
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from RB_Libs.constants import (
    DEFAULT_FACE_ASPECT_RATIO,
    DEFAULT_FACE_EXPANSION,
    DOT_RADIUS_FRACTION,
    FEATHER_CORE_ALPHA,
    FEATHER_INNER_ALPHA,
    FEATHER_INNER_INSET,
    FEATHER_MIDDLE_ALPHA,
    FEATHER_MIDDLE_INSET,
    MASK_MAX_VALUE,
    MASK_MIN_VALUE,
    MASK_MODE,
)
from RB_Libs.errors import MaskCreationError
from RB_Libs.ImageEditingLib.image_models import BlurPath, FaceRegion, Rect, Size
from RB_Libs.pillow_compat import Image, ImageChops, ImageDraw

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FaceMaskPolicy:
    """Shape and feather policy for face-shaped masks.

    Attributes:
        expansion: Scale factor applied around the face centre (default 1.3)
        aspect_ratio: Target width:height (default 0.8), or None to keep the rect
        middle_inset: Inset of the middle ellipse per side, as a fraction of size
        inner_inset: Additional inset of the inner ellipse per side
        core_alpha: Alpha of the outermost ellipse
        middle_alpha: Alpha of the middle ellipse
        inner_alpha: Alpha of the inner ellipse
    """
    expansion: float = DEFAULT_FACE_EXPANSION
    aspect_ratio: Optional[float] = DEFAULT_FACE_ASPECT_RATIO
    middle_inset: float = FEATHER_MIDDLE_INSET
    inner_inset: float = FEATHER_INNER_INSET
    core_alpha: int = FEATHER_CORE_ALPHA
    middle_alpha: int = FEATHER_MIDDLE_ALPHA
    inner_alpha: int = FEATHER_INNER_ALPHA

    def __post_init__(self):
        if self.expansion <= 0:
            raise ValueError(f"expansion must be > 0, got {self.expansion}")
        if self.aspect_ratio is not None and self.aspect_ratio <= 0:
            raise ValueError(f"aspect_ratio must be > 0 or None, got {self.aspect_ratio}")
        if self.middle_inset < 0 or self.inner_inset < 0:
            raise ValueError("feather insets must be >= 0")
        if self.middle_inset + self.inner_inset >= 0.5:
            raise ValueError(
                f"feather insets must leave a visible core, got "
                f"{self.middle_inset} + {self.inner_inset}"
            )
        for name in ("core_alpha", "middle_alpha", "inner_alpha"):
            value = getattr(self, name)
            if not (MASK_MIN_VALUE <= value <= MASK_MAX_VALUE):
                raise ValueError(f"{name} must be 0-255, got {value}")
        if self.middle_alpha > self.core_alpha or self.inner_alpha > self.core_alpha:
            raise ValueError("inset ellipse alphas must not exceed core_alpha")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FaceMaskPolicy":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


# Ellipse inscribed in the region itself, used for tracked video regions
REGION_ELLIPSE_POLICY = FaceMaskPolicy(expansion=1.0, aspect_ratio=None)


def face_mask_rect(rect: Rect, image_size: Size, policy: FaceMaskPolicy) -> Rect:
    """
    Compute the rectangle a face ellipse is drawn in.

    The rect is scaled around its centre by the policy expansion, then
    the short side grows until width:height equals the policy aspect ratio,
    and the result is clamped to the image.
    """
    fitted = rect.scaled_about_center(policy.expansion)
    if policy.aspect_ratio is not None and not fitted.is_empty:
        height = max(fitted.height, fitted.width / policy.aspect_ratio)
        width = height * policy.aspect_ratio
        fitted = Rect.from_center(fitted.center, width, height)
    return fitted.clamped_to(image_size)


def _ellipse_box(rect: Rect) -> Optional[Tuple[int, int, int, int]]:
    """Inclusive integer box for ImageDraw.ellipse, or None if degenerate."""
    if rect.is_empty:
        return None
    x0, y0, x1, y1 = rect.to_box()
    x1 -= 1
    y1 -= 1
    if x1 < x0 or y1 < y0:
        return None
    return (x0, y0, x1, y1)


def _validate_size(image_size: Sequence[int]) -> Size:
    try:
        width, height = int(image_size[0]), int(image_size[1])
    except (TypeError, ValueError, IndexError) as e:
        raise MaskCreationError(f"Invalid mask size {image_size!r}: {e}")
    if width <= 0 or height <= 0:
        raise MaskCreationError(f"Mask size must be positive, got {width}x{height}")
    return width, height


def new_mask(image_size: Size) -> Any:
    """Create an all-zero (fully sharp) mask."""
    return Image.new(MASK_MODE, image_size, MASK_MIN_VALUE)


def mask_statistics(mask: Any) -> Dict[str, float]:
    """
    Summarize a mask for diagnostics.

    Returns:
        Dictionary with 'mean', 'max' and 'coverage' (fraction of pixels > 0)
    """
    values = np.asarray(mask, dtype=np.uint8)
    if values.size == 0:
        return {"mean": 0.0, "max": 0.0, "coverage": 0.0}
    return {
        "mean": float(values.mean()),
        "max": float(values.max()),
        "coverage": float(np.count_nonzero(values)) / values.size,
    }


class MaskRasterizer:
    """Builds blur masks from freehand paths or face regions."""

    def __init__(self, face_policy: Optional[FaceMaskPolicy] = None):
        self.face_policy = face_policy or FaceMaskPolicy()

    def rasterize(self, shapes: Sequence[Any], image_size: Size) -> Any:
        """
        Render a mask from a homogeneous list of shapes.

        Args:
            shapes: All BlurPath or all FaceRegion
            image_size: (width, height) of the target image

        Returns:
            Mode "L" PIL Image of image_size

        Raises:
            MaskCreationError: If the size is invalid, shapes are mixed, or
                a shape has an unsupported type
        """
        size = _validate_size(image_size)
        shapes = list(shapes)

        if not shapes:
            return new_mask(size)

        if all(isinstance(shape, BlurPath) for shape in shapes):
            return self.rasterize_paths(shapes, size)
        if all(isinstance(shape, FaceRegion) for shape in shapes):
            return self.rasterize_faces(shapes, size)

        kinds = sorted({type(shape).__name__ for shape in shapes})
        raise MaskCreationError(
            f"Shapes must be all BlurPath or all FaceRegion, got: {', '.join(kinds)}"
        )

    def rasterize_paths(self, paths: Sequence[BlurPath], image_size: Size) -> Any:
        """Fill every path at full strength with a hard edge."""
        size = _validate_size(image_size)
        mask = new_mask(size)
        draw = ImageDraw.Draw(mask)
        dot_radius = min(size) * DOT_RADIUS_FRACTION

        for path_index, path in enumerate(paths):
            if path.is_empty:
                continue
            if path.is_dot:
                x, y = path.points[0]
                box = _ellipse_box(Rect.from_center((x, y), dot_radius * 2, dot_radius * 2))
                if box is not None:
                    draw.ellipse(box, fill=MASK_MAX_VALUE)
            else:
                draw.polygon(list(path.points), fill=MASK_MAX_VALUE)
            logger.debug(f"Filled path {path_index} with {len(path.points)} point(s)")

        return mask

    def rasterize_faces(
        self,
        faces: Sequence[FaceRegion],
        image_size: Size,
        policy: Optional[FaceMaskPolicy] = None,
    ) -> Any:
        """Draw a feathered ellipse for every face region."""
        size = _validate_size(image_size)
        policy = policy or self.face_policy
        mask = new_mask(size)

        for face_index, face in enumerate(faces):
            layer = self._feathered_ellipse_layer(face.rect, size, policy)
            if layer is None:
                logger.debug(f"Face {face_index} lies outside the image, skipped")
                continue
            mask = ImageChops.lighter(mask, layer)

        return mask

    def rasterize_ellipse_region(
        self,
        rect: Rect,
        image_size: Size,
        policy: FaceMaskPolicy = REGION_ELLIPSE_POLICY,
    ) -> Any:
        """Feathered ellipse for a single region (no union needed)."""
        size = _validate_size(image_size)
        layer = self._feathered_ellipse_layer(rect, size, policy)
        return layer if layer is not None else new_mask(size)

    @staticmethod
    def _feathered_ellipse_layer(rect: Rect, size: Size, policy: FaceMaskPolicy) -> Optional[Any]:
        """
        Draw outer, middle and inner ellipses on a fresh layer.

        Inner ellipses overwrite the outer ones inside their own area;
        the layer is merged into the mask by the caller.
        """
        outer = face_mask_rect(rect, size, policy)
        outer_box = _ellipse_box(outer)
        if outer_box is None:
            return None

        layer = new_mask(size)
        draw = ImageDraw.Draw(layer)
        draw.ellipse(outer_box, fill=policy.core_alpha)

        middle = outer.expanded(-outer.width * policy.middle_inset, -outer.height * policy.middle_inset)
        middle_box = _ellipse_box(middle)
        if middle_box is not None:
            draw.ellipse(middle_box, fill=policy.middle_alpha)

        inset = policy.middle_inset + policy.inner_inset
        inner = outer.expanded(-outer.width * inset, -outer.height * inset)
        inner_box = _ellipse_box(inner)
        if inner_box is not None:
            draw.ellipse(inner_box, fill=policy.inner_alpha)

        return layer


def rasterize_mask(
    shapes: Sequence[Any],
    image_size: Size,
    face_policy: Optional[FaceMaskPolicy] = None,
) -> Any:
    """Convenience wrapper around MaskRasterizer.rasterize()."""
    return MaskRasterizer(face_policy).rasterize(shapes, image_size)
