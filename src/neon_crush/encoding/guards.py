"""Stability guards applied before the first encode attempt."""

import math

from ..constants import (
    ENCODER_QUALITY_BEST,
    ENCODER_QUALITY_WORST,
    LONG_ANIMATION_MAX_FPS,
    LONG_ANIMATION_SECONDS,
    QUALITY_MAPPING_SLOPE,
    RESOLUTION_CAP_DEFAULT,
    RESOLUTION_CAP_LONG,
    RESOLUTION_CAP_VERY_LONG,
    USER_QUALITY_MAX,
    VERY_LONG_ANIMATION_SECONDS,
)


def clamp_fps(duration_seconds: float, fps: int) -> int:
    """Long animations at high frame rates are capped to bound frame memory."""
    if duration_seconds > LONG_ANIMATION_SECONDS and fps > LONG_ANIMATION_MAX_FPS:
        return LONG_ANIMATION_MAX_FPS
    return fps


def map_user_quality(user_quality: int) -> int:
    """
    Map user quality (1-100, higher is better) to encoder quality (1-30, lower is better).

    Rounds half up, so ``100 -> 1`` and ``1 -> 30``.
    """
    raw = 1 + (USER_QUALITY_MAX - user_quality) * QUALITY_MAPPING_SLOPE
    return max(ENCODER_QUALITY_BEST, min(ENCODER_QUALITY_WORST, math.floor(raw + 0.5)))


def resolution_cap(duration_seconds: float) -> int:
    """Largest allowed frame dimension for an animation of this length."""
    if duration_seconds > VERY_LONG_ANIMATION_SECONDS:
        return RESOLUTION_CAP_VERY_LONG
    if duration_seconds > LONG_ANIMATION_SECONDS:
        return RESOLUTION_CAP_LONG
    return RESOLUTION_CAP_DEFAULT


def initial_scale(width: int, height: int, duration_seconds: float) -> float:
    cap = resolution_cap(duration_seconds)
    largest = max(width, height)
    if largest > cap:
        return cap / largest
    return 1.0


def scaled_dimensions(width: int, height: int, scale: float) -> tuple[int, int]:
    return max(1, round(width * scale)), max(1, round(height * scale))
