"""Animation detection and timeline scrubbing for SVG documents."""

from .detector import DetectionResult, detect_svg_duration
from .recommendation import Recommendation, SvgAction, recommend_action
from .scrubber import SvgTimeline
from .timing import INDEFINITE, AnimationTimingSpec, parse_begin, parse_time

__all__ = [
    "AnimationTimingSpec",
    "DetectionResult",
    "INDEFINITE",
    "Recommendation",
    "SvgAction",
    "SvgTimeline",
    "detect_svg_duration",
    "parse_begin",
    "parse_time",
    "recommend_action",
]
