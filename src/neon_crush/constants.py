"""Global constants for the application."""

# Frame rate guard
LONG_ANIMATION_SECONDS = 10  # Durations above this are considered long
LONG_ANIMATION_MAX_FPS = 15  # FPS ceiling applied to long animations

# Resolution caps in pixels, tiered by duration in seconds (frame count x frame area)
RESOLUTION_CAP_DEFAULT = 800  # <= 10s
RESOLUTION_CAP_LONG = 600  # > 10s
RESOLUTION_CAP_VERY_LONG = 500  # > 20s
VERY_LONG_ANIMATION_SECONDS = 20

# Fallback size when the document does not declare one
DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600

# User-facing quality (1-100, higher is better) to encoder quality (1-30, lower is better)
USER_QUALITY_MIN = 1
USER_QUALITY_MAX = 100
ENCODER_QUALITY_BEST = 1
ENCODER_QUALITY_WORST = 30
QUALITY_MAPPING_SLOPE = 0.29

# Retry loop
MAX_ATTEMPTS = 3
SCALE_STEP = 0.75  # Multiplicative scale reduction per retry
QUALITY_STEP = 5  # Encoder quality degradation per retry

# Frame capture
FRAME_SETTLE_DELAY_MS = 1.0  # Wait after each scrub before sampling pixels

# GIF palette
GIF_MAX_COLORS = 256
GIF_MIN_COLORS = 16
GIF_COLORS_PER_QUALITY_STEP = 8
GIF_DITHER_MAX_QUALITY = 10  # Dither only at encoder quality <= this
BACKGROUND_COLOR = (255, 255, 255)

# Defaults for user settings
DEFAULT_DURATION_SECONDS = 3
DEFAULT_FPS = 30
DEFAULT_TARGET_SIZE_MB = 5.0
DEFAULT_USER_QUALITY = 80
DEFAULT_RASTER_QUALITY = 1.0

BYTES_PER_MB = 1024 * 1024
