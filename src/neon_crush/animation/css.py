"""CSS animation timing extraction from style sheets and inline styles."""

import re
from typing import Iterator

from .timing import parse_time

_SHORTHAND = re.compile(r"animation:\s*([^;}]+)", re.IGNORECASE)
_DURATION = re.compile(r"animation-duration:\s*([^;}]+)", re.IGNORECASE)
_DELAY = re.compile(r"animation-delay:\s*([^;}]+)", re.IGNORECASE)
_TIME_TOKEN = re.compile(r"-?[\d.]+(?:ms|s)")


def iter_css_animation_ends(css: str) -> Iterator[float]:
    """Yield ``duration + delay`` for every CSS animation declared in ``css``."""
    yield from _shorthand_ends(css)
    yield from _longhand_ends(css)


def _shorthand_ends(css: str) -> Iterator[float]:
    match = _SHORTHAND.search(css)
    if match is None:
        return
    for segment in match.group(1).split(","):
        times = [parse_time(token) for token in _TIME_TOKEN.findall(segment)]
        if not times:
            continue
        duration = times[0]
        delay = times[1] if len(times) > 1 else 0.0
        if duration > 0:
            yield duration + delay


def _longhand_ends(css: str) -> Iterator[float]:
    duration_match = _DURATION.search(css)
    if duration_match is None:
        return
    delay_match = _DELAY.search(css)
    durations = [parse_time(value) for value in duration_match.group(1).split(",")]
    delays = (
        [parse_time(value) for value in delay_match.group(1).split(",")]
        if delay_match
        else []
    )
    for index, duration in enumerate(durations):
        delay = delays[index] if index < len(delays) else 0.0
        if duration > 0:
            yield duration + delay
