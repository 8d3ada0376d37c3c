"""
Constants and configuration values for Region Blur.

This module centralizes all constant values, magic numbers, and
default settings used throughout the blur engine.
"""

# Image buffer format
BUFFER_MODE = "RGBA"
MASK_MODE = "L"
MASK_MIN_VALUE = 0
MASK_MAX_VALUE = 255

# Photo pipeline
MAX_WORKING_DIMENSION = 1024
DEFAULT_PATH_BLUR_RADIUS = 70.0
DEFAULT_FACE_BLUR_RADIUS = 70.0

# Blur kernel
BLUR_BACKEND_PIL = "pil"
BLUR_BACKEND_SCIPY = "scipy"
BLUR_BACKENDS = (BLUR_BACKEND_PIL, BLUR_BACKEND_SCIPY)
DEFAULT_BLUR_BACKEND = BLUR_BACKEND_PIL
EDGE_MODE_TRANSPARENT = "transparent"
EDGE_MODE_EXTEND = "extend"
EDGE_MODES = (EDGE_MODE_TRANSPARENT, EDGE_MODE_EXTEND)
# Padding used for transparent edges, in standard deviations
TRANSPARENT_EDGE_SIGMAS = 4.0
SCIPY_TRUNCATE = 4.0

# Freehand path masks
DOT_RADIUS_FRACTION = 0.05

# Face-shaped masks
DEFAULT_FACE_EXPANSION = 1.3
DEFAULT_FACE_ASPECT_RATIO = 0.8  # width : height
FEATHER_CORE_ALPHA = 255
FEATHER_MIDDLE_ALPHA = 204  # 80%
FEATHER_INNER_ALPHA = 230  # 90%
FEATHER_MIDDLE_INSET = 0.15
FEATHER_INNER_INSET = 0.075

# Face quality policy
QUALITY_WEIGHT_CONFIDENCE = 0.30
QUALITY_WEIGHT_LANDMARKS = 0.25
QUALITY_WEIGHT_ASPECT = 0.20
QUALITY_WEIGHT_SIZE = 0.15
QUALITY_WEIGHT_POSITION = 0.10
QUALITY_MIN_SCORE = 0.75
QUALITY_MIN_CONFIDENCE = 0.70
QUALITY_MIN_LANDMARKS = 0.75
QUALITY_SIZE_MIN_FRACTION = 0.01
QUALITY_SIZE_RAMP = 0.10
REFINE_MIN_PADDING = 20.0
REFINE_PADDING_FRACTION = 0.10

# Video
DEFAULT_VIDEO_STRENGTH = 15.0
DEFAULT_REGION_INSET = 15.0
DEBUG_CENTER_SIZE = 100.0
DEFAULT_SCAN_INTERVAL = 1.0
SCAN_FALLBACK_FRACTION = 0.25
FRAMES_IN_FLIGHT_PER_WORKER = 2

# Logging
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Settings file field names
FIELD_PHOTO_RADIUS = "photo_radius"
FIELD_MAX_WORKING_DIMENSION = "max_working_dimension"
FIELD_BLUR_BACKEND = "blur_backend"
FIELD_LOG_LEVEL = "log_level"
FIELD_FACE_MASK = "face_mask"
FIELD_FACE_QUALITY = "face_quality"
FIELD_FRAME_COMPOSITOR = "frame_compositor"

# Node types
NODE_TYPE_PATH_BLUR = "Path Blur"
NODE_TYPE_FACE_BLUR = "Face Blur"
NODE_TYPE_FRAME_BLUR = "Frame Blur"
