"""Source image payloads and SVG loading."""

import xml.etree.ElementTree as ET
from dataclasses import dataclass

from .animation.scrubber import SvgTimeline
from .animation.timing import parse_number_prefix
from .constants import DEFAULT_HEIGHT, DEFAULT_WIDTH
from .errors import EncodingFailure, FailureReason

SVG_MEDIA_TYPE = "image/svg+xml"


@dataclass(frozen=True)
class SourceImage:
    """An input payload supplied by the caller."""

    data: bytes
    media_type: str = SVG_MEDIA_TYPE
    name: str = "image.svg"

    @property
    def is_svg(self) -> bool:
        return self.media_type == SVG_MEDIA_TYPE


@dataclass(frozen=True)
class SvgSource:
    """A decoded SVG document with its natural pixel dimensions."""

    timeline: SvgTimeline
    width: int
    height: int


def load_svg_source(data: bytes) -> SvgSource:
    """
    Decode SVG bytes and resolve their natural size.

    Args:
        data: Raw SVG document

    Returns:
        The decoded source

    Raises:
        EncodingFailure: If the bytes are not a readable SVG document
    """
    if not data or not data.strip():
        raise EncodingFailure(FailureReason.SOURCE_UNREADABLE, "Source image is empty")
    try:
        timeline = SvgTimeline.from_markup(data)
    except (ET.ParseError, ValueError) as e:
        raise EncodingFailure(
            FailureReason.SOURCE_UNREADABLE, f"Source image could not be decoded: {e}"
        ) from e

    width, height = natural_dimensions(timeline.root)
    return SvgSource(timeline=timeline, width=width, height=height)


def natural_dimensions(root: ET.Element) -> tuple[int, int]:
    """Resolve size from width/height, then the viewBox, then the 800x600 default."""
    view_box = _view_box_size(root.get("viewBox"))
    width = _length(root.get("width"))
    height = _length(root.get("height"))

    if width is None and view_box is not None:
        width = view_box[0]
    if height is None and view_box is not None:
        height = view_box[1]
    return (
        max(1, round(width)) if width else DEFAULT_WIDTH,
        max(1, round(height)) if height else DEFAULT_HEIGHT,
    )


def _length(value: str | None) -> float | None:
    if value is None or value.strip().endswith("%"):
        return None
    number = parse_number_prefix(value)
    if number is None or number <= 0:
        return None
    return number


def _view_box_size(value: str | None) -> tuple[float, float] | None:
    if not value:
        return None
    parts = value.replace(",", " ").split()
    if len(parts) != 4:
        return None
    try:
        width, height = float(parts[2]), float(parts[3])
    except ValueError:
        return None
    if width <= 0 or height <= 0:
        return None
    return width, height
