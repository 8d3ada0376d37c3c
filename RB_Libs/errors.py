"""
Error taxonomy for the blur engine.

Each error also derives from the builtin exception a caller would
naturally catch, so ``except ValueError`` keeps working.

Recoverable (degrade to "no blur applied" for one unit of work):
    MaskCreationError, BlurFilterError, FrameProcessingError

Contract violations (always propagate):
    CompositingDimensionMismatch, InvalidJobError

External:
    ExportSessionError
"""


class RegionBlurError(Exception):
    """Base class for all blur engine errors."""


class MaskCreationError(RegionBlurError, ValueError):
    """Raised when a mask cannot be built from the supplied shapes."""


class BlurFilterError(RegionBlurError, RuntimeError):
    """Raised when the numeric blur filter cannot produce output."""


class CompositingDimensionMismatch(RegionBlurError, ValueError):
    """Raised when original, blurred and mask buffers differ in size."""

    def __init__(self, sizes):
        self.sizes = dict(sizes)
        described = ", ".join(f"{name}={size}" for name, size in self.sizes.items())
        super().__init__(f"Buffer dimensions do not match: {described}")


class FrameProcessingError(RegionBlurError, RuntimeError):
    """Raised when a single video frame cannot be processed."""


class InvalidJobError(RegionBlurError, ValueError):
    """Raised for invalid blur job values or an unconfigured frame filter."""


class ExportSessionError(RegionBlurError, RuntimeError):
    """Wraps a failure reported by the external encoder."""
