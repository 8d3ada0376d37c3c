"""
Photo Blur Pipeline.

Runs the whole photo path for one image:

1. Downscale so the longest side is at most the working cap (never upscale)
2. Scale shapes into the downscaled coordinate space
3. Return the downscaled image directly when there is nothing to blur
4. Blur the whole downscaled image
5. Build the mask through a MaskStrategy
6. Composite blurred over sharp through the mask

Mask and blur failures degrade to the unblurred downscaled image; a
dimension mismatch is a programming error and propagates.

Example:
    >>> from PIL import Image
    >>> photo = Image.open("photo.jpg")
    >>> result = apply_path_blur(photo, [BlurPath(((120, 80),))])
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from RB_Libs.constants import (
    DEFAULT_BLUR_BACKEND,
    DEFAULT_FACE_BLUR_RADIUS,
    DEFAULT_PATH_BLUR_RADIUS,
    EDGE_MODE_TRANSPARENT,
    MAX_WORKING_DIMENSION,
)
from RB_Libs.errors import BlurFilterError, MaskCreationError
from RB_Libs.ImageEditingLib.blur_filter import BlurKernelApplier
from RB_Libs.ImageEditingLib.compositor import composite
from RB_Libs.ImageEditingLib.image_models import (
    BlurPath,
    FaceRegion,
    Shape,
    Size,
    ensure_image_buffer,
    scale_shapes,
)
from RB_Libs.ImageEditingLib.mask_rasterizer import (
    FaceMaskPolicy,
    MaskRasterizer,
    mask_statistics,
)
from RB_Libs.pillow_compat import Image

logger = logging.getLogger(__name__)


def downscale_to_cap(image: Any, max_dimension: int = MAX_WORKING_DIMENSION) -> Any:
    """
    Uniformly downscale image so its longest side is at most max_dimension.

    Returns a copy when the image already fits.
    """
    if max_dimension <= 0:
        raise ValueError(f"max_dimension must be > 0, got {max_dimension}")

    width, height = image.size
    longest = max(width, height)
    if longest <= max_dimension:
        return image.copy()

    scale = max_dimension / float(longest)
    new_size = (max(1, round(width * scale)), max(1, round(height * scale)))
    logger.debug(f"Downscaling {width}x{height} -> {new_size[0]}x{new_size[1]}")
    return image.resize(new_size, Image.Resampling.LANCZOS)


class MaskStrategy(ABC):
    """Turns shapes into a blur mask for a given image size."""

    @abstractmethod
    def build_mask(self, shapes: Sequence[Shape], image_size: Size) -> Any:
        pass


class PathMaskStrategy(MaskStrategy):
    """Hard-edged masks from freehand paths."""

    def __init__(self):
        self._rasterizer = MaskRasterizer()

    def build_mask(self, shapes: Sequence[Shape], image_size: Size) -> Any:
        if not all(isinstance(shape, BlurPath) for shape in shapes):
            raise MaskCreationError("PathMaskStrategy only accepts BlurPath shapes")
        return self._rasterizer.rasterize_paths(shapes, image_size)


class FaceMaskStrategy(MaskStrategy):
    """Feathered ellipse masks from face regions."""

    def __init__(self, policy: Optional[FaceMaskPolicy] = None):
        self.policy = policy or FaceMaskPolicy()
        self._rasterizer = MaskRasterizer(self.policy)

    def build_mask(self, shapes: Sequence[Shape], image_size: Size) -> Any:
        if not all(isinstance(shape, FaceRegion) for shape in shapes):
            raise MaskCreationError("FaceMaskStrategy only accepts FaceRegion shapes")
        return self._rasterizer.rasterize_faces(shapes, image_size)


class ShapeTypeMaskStrategy(MaskStrategy):
    """Picks the path or face policy from the shape type."""

    def __init__(self, face_policy: Optional[FaceMaskPolicy] = None):
        self._rasterizer = MaskRasterizer(face_policy)

    def build_mask(self, shapes: Sequence[Shape], image_size: Size) -> Any:
        return self._rasterizer.rasterize(shapes, image_size)


class ImagePipeline:
    """
    Photo blur pipeline with a fixed working cap, kernel and mask strategy.

    Attributes:
        max_dimension: Longest side of the working image
        default_radius: Radius used when apply_blur() gets none
        mask_strategy: MaskStrategy used to build masks
        applier: BlurKernelApplier used for the whole-image blur
    """

    def __init__(
        self,
        max_dimension: int = MAX_WORKING_DIMENSION,
        default_radius: float = DEFAULT_PATH_BLUR_RADIUS,
        mask_strategy: Optional[MaskStrategy] = None,
        backend: str = DEFAULT_BLUR_BACKEND,
        edge_mode: str = EDGE_MODE_TRANSPARENT,
    ):
        if max_dimension <= 0:
            raise ValueError(f"max_dimension must be > 0, got {max_dimension}")
        self.max_dimension = max_dimension
        self.default_radius = default_radius
        self.mask_strategy = mask_strategy or ShapeTypeMaskStrategy()
        self.applier = BlurKernelApplier(backend, edge_mode)

    def apply_blur(
        self,
        image: Any,
        shapes: Sequence[Shape],
        radius: Optional[float] = None,
    ) -> Any:
        """
        Blur the regions described by shapes.

        Args:
            image: PIL Image in any mode
            shapes: BlurPaths or FaceRegions in source image coordinates
            radius: Blur radius (defaults to default_radius)

        Returns:
            New RGBA image at the capped working size

        Raises:
            TypeError: If image not PIL Image
            CompositingDimensionMismatch: If a strategy returns a mask of the wrong size
        """
        source = ensure_image_buffer(image)
        radius = self.default_radius if radius is None else radius

        working = downscale_to_cap(source, self.max_dimension)
        shapes = list(shapes)
        if not shapes:
            return working

        sx = working.size[0] / float(source.size[0])
        sy = working.size[1] / float(source.size[1])
        scaled = scale_shapes(shapes, sx, sy)
        logger.debug(f"Scaled {len(scaled)} shape(s) by ({sx:.4f}, {sy:.4f})")

        try:
            blurred = self.applier.blur(working, radius)
            mask = self.mask_strategy.build_mask(scaled, working.size)
        except (MaskCreationError, BlurFilterError) as e:
            logger.warning(f"Blur not applied, returning unblurred image: {e}")
            return working

        logger.debug(f"Mask statistics: {mask_statistics(mask)}")
        return composite(working, blurred, mask)


def apply_blur(
    image: Any,
    shapes: Sequence[Shape],
    radius: float = DEFAULT_PATH_BLUR_RADIUS,
    max_dimension: int = MAX_WORKING_DIMENSION,
) -> Any:
    """Run the photo pipeline with the mask policy chosen by shape type."""
    return ImagePipeline(max_dimension=max_dimension).apply_blur(image, shapes, radius)


def apply_path_blur(
    image: Any,
    paths: Sequence[BlurPath],
    radius: float = DEFAULT_PATH_BLUR_RADIUS,
) -> Any:
    """Blur exactly what the user drew."""
    pipeline = ImagePipeline(mask_strategy=PathMaskStrategy())
    return pipeline.apply_blur(image, paths, radius)


def apply_face_blur(
    image: Any,
    faces: Sequence[FaceRegion],
    radius: float = DEFAULT_FACE_BLUR_RADIUS,
    policy: Optional[FaceMaskPolicy] = None,
) -> Any:
    """Blur detected faces with feathered ellipses."""
    pipeline = ImagePipeline(
        default_radius=DEFAULT_FACE_BLUR_RADIUS,
        mask_strategy=FaceMaskStrategy(policy),
    )
    return pipeline.apply_blur(image, faces, radius)
