"""
Gaussian Blur Kernel.

Produces a same-size, fully blurred copy of an RGBA buffer. The radius is
the Gaussian standard deviation in pixels.

Backends:
- "pil": ImageFilter.GaussianBlur (extended box approximation, constant time in radius)
- "scipy": scipy.ndimage.gaussian_filter (exact kernel, truncated at 4 sigma)

Edge modes:
- "transparent": pixels beyond the buffer count as transparent black, so
  content near the border darkens. Default for whole-image photo blurs.
- "extend": edge pixels repeat, so a flat region stays flat at any radius.
  Used for cropped video regions.

Example:
    >>> from PIL import Image
    >>> img = Image.new("RGBA", (64, 64), (255, 0, 0, 255))
    >>> blurred = apply_gaussian_blur(img, radius=8, edge_mode="extend")
"""

import logging
import math
from typing import Any, Optional

import numpy as np
from scipy import ndimage

from RB_Libs.constants import (
    BLUR_BACKEND_PIL,
    BLUR_BACKEND_SCIPY,
    BLUR_BACKENDS,
    BUFFER_MODE,
    DEFAULT_BLUR_BACKEND,
    EDGE_MODE_EXTEND,
    EDGE_MODE_TRANSPARENT,
    EDGE_MODES,
    SCIPY_TRUNCATE,
    TRANSPARENT_EDGE_SIGMAS,
)
from RB_Libs.errors import BlurFilterError
from RB_Libs.ImageEditingLib.image_models import Rect
from RB_Libs.pillow_compat import Image, ImageClass, ImageFilter

logger = logging.getLogger(__name__)


def _validate_options(backend: str, edge_mode: str) -> None:
    if backend not in BLUR_BACKENDS:
        raise ValueError(f"backend must be one of {BLUR_BACKENDS}, got {backend!r}")
    if edge_mode not in EDGE_MODES:
        raise ValueError(f"edge_mode must be one of {EDGE_MODES}, got {edge_mode!r}")


def _pil_blur(image: Any, radius: float, edge_mode: str) -> Any:
    if edge_mode == EDGE_MODE_EXTEND:
        # Pillow clamps to the nearest edge pixel
        return image.filter(ImageFilter.GaussianBlur(radius=radius))

    pad = int(math.ceil(radius * TRANSPARENT_EDGE_SIGMAS))
    width, height = image.size
    canvas = Image.new(BUFFER_MODE, (width + 2 * pad, height + 2 * pad), (0, 0, 0, 0))
    canvas.paste(image, (pad, pad))
    blurred = canvas.filter(ImageFilter.GaussianBlur(radius=radius))
    return blurred.crop((pad, pad, pad + width, pad + height))


def _scipy_blur(image: Any, radius: float, edge_mode: str) -> Any:
    pixels = np.asarray(image, dtype=np.float32)
    mode = "nearest" if edge_mode == EDGE_MODE_EXTEND else "constant"
    blurred = ndimage.gaussian_filter(
        pixels,
        sigma=(radius, radius, 0),
        mode=mode,
        cval=0.0,
        truncate=SCIPY_TRUNCATE,
    )
    return Image.fromarray(np.clip(np.rint(blurred), 0, 255).astype(np.uint8))


def apply_gaussian_blur(
    image: Any,
    radius: float,
    backend: str = DEFAULT_BLUR_BACKEND,
    edge_mode: str = EDGE_MODE_TRANSPARENT,
) -> Any:
    """
    Apply Gaussian blur to an RGBA buffer.

    Args:
        image: PIL Image (converted to RGBA if needed)
        radius: Standard deviation in pixels; <= 0 returns an unmodified copy
        backend: "pil" or "scipy"
        edge_mode: "transparent" or "extend"

    Returns:
        New RGBA PIL Image of the same size

    Raises:
        TypeError: If image not PIL Image
        ValueError: If backend or edge_mode is unknown
        BlurFilterError: If the filter fails to produce output
    """
    if not isinstance(image, ImageClass):
        raise TypeError(f"Expected PIL Image, got {type(image)}")
    _validate_options(backend, edge_mode)

    if image.mode != BUFFER_MODE:
        image = image.convert(BUFFER_MODE)

    if radius <= 0:
        return image.copy()

    try:
        if backend == BLUR_BACKEND_SCIPY:
            blurred = _scipy_blur(image, float(radius), edge_mode)
        else:
            blurred = _pil_blur(image, float(radius), edge_mode)
    except (ValueError, RuntimeError, MemoryError, OSError) as e:
        raise BlurFilterError(f"Gaussian blur failed (radius={radius}, backend={backend}): {e}") from e

    if blurred.size != image.size:
        raise BlurFilterError(
            f"Gaussian blur produced {blurred.size}, expected {image.size}"
        )
    logger.debug(f"Blurred {image.size[0]}x{image.size[1]} buffer, radius={radius}, {backend}/{edge_mode}")
    return blurred


class BlurKernelApplier:
    """Blur with a fixed backend and edge mode."""

    def __init__(
        self,
        backend: str = DEFAULT_BLUR_BACKEND,
        edge_mode: str = EDGE_MODE_TRANSPARENT,
    ):
        _validate_options(backend, edge_mode)
        self.backend = backend
        self.edge_mode = edge_mode

    def blur(self, image: Any, radius: float) -> Any:
        return apply_gaussian_blur(image, radius, self.backend, self.edge_mode)

    def blur_region(self, image: Any, rect: Rect, radius: float) -> Optional[Any]:
        """Blur a rectangle of image; returns the crop, or None if rect misses the image."""
        return blur_region(image, rect, radius, self.backend, self.edge_mode)


def blur_region(
    image: Any,
    rect: Rect,
    radius: float,
    backend: str = DEFAULT_BLUR_BACKEND,
    edge_mode: str = EDGE_MODE_EXTEND,
) -> Optional[Any]:
    """
    Blur only the pixels under rect.

    The rect is clamped to the image and rounded out to whole pixels; the
    returned crop has the size of Rect.to_box() of the clamped rect.

    Returns:
        Blurred RGBA crop, or None when rect does not overlap the image
    """
    if not isinstance(image, ImageClass):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    clamped = rect.clamped_to(image.size)
    if clamped.is_empty:
        return None
    crop = image.crop(clamped.to_box())
    return apply_gaussian_blur(crop, radius, backend, edge_mode)


def blur(image: Any, radius: float, backend: str = BLUR_BACKEND_PIL) -> Any:
    """Whole-image blur with transparent edges."""
    return apply_gaussian_blur(image, radius, backend, EDGE_MODE_TRANSPARENT)
