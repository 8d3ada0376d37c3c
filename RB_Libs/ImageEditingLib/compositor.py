"""
Mask Compositor.

Blends a sharp and a blurred buffer through a blur mask:

    alpha = mask / 255
    rgb   = round(original * (1 - alpha) + blurred * alpha)
    a     = original alpha

The math runs on float32 numpy arrays. Inputs are never modified; only the
output buffer is allocated.
"""

import logging
from typing import Any, Tuple

import numpy as np

from RB_Libs.constants import BUFFER_MODE, MASK_MODE
from RB_Libs.errors import CompositingDimensionMismatch
from RB_Libs.pillow_compat import Image, ImageClass

logger = logging.getLogger(__name__)


def _as_mode(image: Any, mode: str, name: str) -> Any:
    if not isinstance(image, ImageClass):
        raise TypeError(f"Expected PIL Image for {name}, got {type(image)}")
    return image if image.mode == mode else image.convert(mode)


def composite(original: Any, blurred: Any, mask: Any) -> Any:
    """
    Blend blurred over original wherever the mask is non-zero.

    Args:
        original: Sharp RGBA buffer
        blurred: Blurred RGBA buffer of the same size
        mask: Mode "L" mask of the same size

    Returns:
        New RGBA PIL Image

    Raises:
        TypeError: If any input is not a PIL Image
        CompositingDimensionMismatch: If the three sizes differ
    """
    original = _as_mode(original, BUFFER_MODE, "original")
    blurred = _as_mode(blurred, BUFFER_MODE, "blurred")
    mask = _as_mode(mask, MASK_MODE, "mask")

    if not (original.size == blurred.size == mask.size):
        raise CompositingDimensionMismatch({
            "original": original.size,
            "blurred": blurred.size,
            "mask": mask.size,
        })

    original_arr = np.asarray(original, dtype=np.float32)
    blurred_arr = np.asarray(blurred, dtype=np.float32)
    alpha = np.asarray(mask, dtype=np.float32)[..., np.newaxis] / 255.0

    rgb = original_arr[..., :3] * (1.0 - alpha) + blurred_arr[..., :3] * alpha

    result = np.empty(original_arr.shape, dtype=np.uint8)
    result[..., :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
    result[..., 3] = original_arr[..., 3].astype(np.uint8)

    return Image.fromarray(result)


def composite_region(
    frame: Any,
    blurred_crop: Any,
    crop_mask: Any,
    box: Tuple[int, int, int, int],
) -> Any:
    """
    Composite a blurred crop back into a copy of frame.

    Args:
        frame: Full RGBA frame (not modified)
        blurred_crop: Blurred pixels for box
        crop_mask: Mask for box
        box: Integer (x0, y0, x1, y1) pixel box inside frame

    Returns:
        New RGBA frame with the blended crop pasted at box
    """
    frame = _as_mode(frame, BUFFER_MODE, "frame")
    x0, y0, x1, y1 = box
    width, height = frame.size
    if x0 < 0 or y0 < 0 or x1 > width or y1 > height or x1 <= x0 or y1 <= y0:
        raise CompositingDimensionMismatch({"frame": frame.size, "box": tuple(box)})

    sharp_crop = frame.crop(box)
    blended = composite(sharp_crop, blurred_crop, crop_mask)

    output = frame.copy()
    output.paste(blended, (x0, y0))
    return output
