"""
Compatibility wrapper to import Pillow (which provides the `PIL` namespace)
from a single place.

This module loads the Pillow-provided modules via importlib and re-exports the
symbols used by the blur engine: `Image`, `ImageDraw`, `ImageFilter` and
`ImageChops`.
"""
from importlib import import_module
from types import ModuleType
from typing import Optional


def _import(name: str) -> Optional[ModuleType]:
    try:
        return import_module(name)
    except ImportError:
        return None


_pil_image = _import("PIL.Image")

if _pil_image is None:
    raise ImportError("pillow (PIL) is required: install with 'pip install Pillow'")

Image = _pil_image
ImageDraw = import_module("PIL.ImageDraw")
ImageFilter = import_module("PIL.ImageFilter")
ImageChops = import_module("PIL.ImageChops")

# Helper for isinstance checks and type hints referencing PIL.Image.Image
ImageClass = getattr(_pil_image, "Image")
