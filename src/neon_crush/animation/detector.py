"""Animation characteristics detection for SVG documents."""

import logging
import math
from dataclasses import dataclass

from .css import iter_css_animation_ends
from .document import iter_style_sources, iter_timing_elements, parse_svg
from .timing import AnimationTimingSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectionResult:
    """Total animation duration in whole seconds; 0 means static."""

    total_duration_seconds: int

    @property
    def is_animated(self) -> bool:
        return self.total_duration_seconds > 0


STATIC = DetectionResult(0)


def detect_svg_duration(markup: str | bytes) -> DetectionResult:
    """
    Detect how long the animations in an SVG document run.

    Both SMIL timing elements and CSS animations are scanned. The longest
    end time is rounded up to the next whole second. Any failure while
    parsing or walking the document yields a static result.

    Args:
        markup: SVG document text

    Returns:
        A DetectionResult, never raises
    """
    try:
        return _detect(markup)
    except Exception as e:
        logger.warning("Failed to detect SVG animation duration: %s", e)
        return STATIC


def _detect(markup: str | bytes) -> DetectionResult:
    root = parse_svg(markup)
    max_duration = 0.0

    for element in iter_timing_elements(root):
        timing = AnimationTimingSpec.from_attributes(
            element.get("dur"), element.get("begin"), element.get("repeatCount")
        )
        if timing.duration > 0:
            max_duration = max(max_duration, timing.end_time)

    for css in iter_style_sources(root):
        for end in iter_css_animation_ends(css):
            max_duration = max(max_duration, end)

    if max_duration <= 0:
        return STATIC
    return DetectionResult(math.ceil(max_duration))
