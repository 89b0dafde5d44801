"""Recommend a conversion action from detection results."""

from dataclasses import dataclass
from enum import Enum

from .detector import DetectionResult


class SvgAction(str, Enum):
    MINIFY = "minify"
    RASTERIZE = "rasterize"
    GIF = "gif"


@dataclass(frozen=True)
class Recommendation:
    action: SvgAction
    alternatives: tuple[SvgAction, ...]
    duration_seconds: int
    message: str


def recommend_action(detection: DetectionResult) -> Recommendation:
    """Animated documents are best served as GIF, static ones as a raster image."""
    if detection.is_animated:
        return Recommendation(
            action=SvgAction.GIF,
            alternatives=(),
            duration_seconds=detection.total_duration_seconds,
            message=(
                f"Animated SVG detected (~{detection.total_duration_seconds}s). "
                "GIF recommended."
            ),
        )
    return Recommendation(
        action=SvgAction.RASTERIZE,
        alternatives=(SvgAction.MINIFY,),
        duration_seconds=0,
        message="Static SVG detected. Convert to image recommended.",
    )
