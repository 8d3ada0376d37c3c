"""
ImageEditingLib - Region blur building blocks

This module provides the image models, mask rasterizer, Gaussian blur
kernel, mask compositor and photo pipeline for Region Blur.
"""

from RB_Libs.ImageEditingLib.image_models import (
    BlurPath,
    FaceLandmarks,
    FaceRegion,
    Rect,
    display_to_image_point,
    ensure_image_buffer,
    image_to_display_point,
    normalized_rect_to_pixels,
)
from RB_Libs.ImageEditingLib.mask_rasterizer import (
    FaceMaskPolicy,
    MaskRasterizer,
    mask_statistics,
    rasterize_mask,
)
from RB_Libs.ImageEditingLib.blur_filter import (
    BlurKernelApplier,
    apply_gaussian_blur,
    blur,
    blur_region,
)
from RB_Libs.ImageEditingLib.compositor import composite, composite_region
from RB_Libs.ImageEditingLib.image_pipeline import (
    FaceMaskStrategy,
    ImagePipeline,
    MaskStrategy,
    PathMaskStrategy,
    apply_blur,
    apply_face_blur,
    apply_path_blur,
    downscale_to_cap,
)

__all__ = [
    "BlurPath",
    "FaceLandmarks",
    "FaceRegion",
    "Rect",
    "display_to_image_point",
    "ensure_image_buffer",
    "image_to_display_point",
    "normalized_rect_to_pixels",
    "FaceMaskPolicy",
    "MaskRasterizer",
    "mask_statistics",
    "rasterize_mask",
    "BlurKernelApplier",
    "apply_gaussian_blur",
    "blur",
    "blur_region",
    "composite",
    "composite_region",
    "FaceMaskStrategy",
    "ImagePipeline",
    "MaskStrategy",
    "PathMaskStrategy",
    "apply_blur",
    "apply_face_blur",
    "apply_path_blur",
    "downscale_to_cap",
]
