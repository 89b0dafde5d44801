"""Deterministic SMIL timeline scrubbing for SVG documents.

A snapshot freezes every SMIL timing element at a given time, applies the
resulting values to their targets and strips the timing elements, leaving a
static document a rasterizer can draw.
"""

import copy
import re
import xml.etree.ElementTree as ET

from PIL import ImageColor

from .document import XLINK_HREF, iter_timing_elements, local_name, parse_svg
from .timing import AnimationTimingSpec

_NUMBER = re.compile(r"([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class SvgTimeline:
    """A parsed SVG document whose SMIL animations can be frozen at any time."""

    def __init__(self, root: ET.Element):
        self.root = root
        self.has_timing_elements = any(True for _ in iter_timing_elements(root))

    @classmethod
    def from_markup(cls, markup: str | bytes) -> "SvgTimeline":
        return cls(parse_svg(markup))

    def snapshot(self, time_ms: float) -> ET.Element:
        """Return a static copy of the document as it appears at ``time_ms``."""
        root = copy.deepcopy(self.root)
        if not self.has_timing_elements:
            return root

        parents = {child: parent for parent in root.iter() for child in parent}
        ids = {element.get("id"): element for element in root.iter() if element.get("id")}
        time_s = time_ms / 1000

        timing_elements = list(iter_timing_elements(root))
        for element in timing_elements:
            target = _resolve_target(element, parents, ids)
            if target is not None:
                _apply(element, target, time_s)
        for element in timing_elements:
            parents[element].remove(element)
        return root

    def snapshot_markup(self, time_ms: float) -> bytes:
        return ET.tostring(self.snapshot(time_ms), encoding="utf-8")


def _resolve_target(
    element: ET.Element,
    parents: dict[ET.Element, ET.Element],
    ids: dict[str | None, ET.Element],
) -> ET.Element | None:
    href = element.get("href") or element.get(XLINK_HREF)
    if href and href.startswith("#"):
        return ids.get(href[1:])
    return parents.get(element)


def _apply(element: ET.Element, target: ET.Element, time_s: float) -> None:
    kind = local_name(element.tag)
    progress = _progress(element, kind, time_s)
    if progress is None:
        return

    if kind == "set":
        name = element.get("attributeName")
        value = element.get("to")
        if name and value is not None:
            target.set(name, value)
        return

    if kind == "animateMotion":
        # Path-based motion keeps the element at its base position
        keyframes = _keyframes(element, base=None)
        if not keyframes or element.get("path") is not None:
            return
        offset = _sample_keyframes(element, keyframes, progress)
        _prepend_transform(target, f"translate({offset})")
        return

    if kind == "animateTransform":
        keyframes = _keyframes(element, base=None)
        if not keyframes:
            return
        transform_type = element.get("type", "translate")
        params = _sample_keyframes(element, keyframes, progress)
        animated = f"{transform_type}({params})"
        if element.get("additive") == "sum":
            _append_transform(target, animated)
        else:
            target.set("transform", animated)
        return

    name = element.get("attributeName")
    if not name:
        return
    keyframes = _keyframes(element, base=target.get(name))
    if keyframes:
        target.set(name, _sample_keyframes(element, keyframes, progress))


def _progress(element: ET.Element, kind: str, time_s: float) -> float | None:
    """Simple-duration progress in [0, 1] at ``time_s``; ``None`` when inactive."""
    timing = AnimationTimingSpec.from_attributes(
        element.get("dur"), element.get("begin"), element.get("repeatCount")
    )
    if time_s < timing.begin:
        return None
    if timing.duration <= 0:
        # An undated <set> stays in effect from its begin time onwards
        return 1.0 if kind == "set" else None

    elapsed = time_s - timing.begin
    active = timing.active_duration
    if elapsed >= active:
        if element.get("fill") != "freeze":
            return None
        remainder = (active / timing.duration) % 1.0
        return remainder or 1.0
    return (elapsed % timing.duration) / timing.duration


def _keyframes(element: ET.Element, base: str | None) -> list[str]:
    values = element.get("values")
    if values:
        return [value.strip() for value in values.split(";") if value.strip()]
    end = element.get("to")
    if end is None:
        return []
    start = element.get("from", base)
    return [start, end] if start is not None else [end]


def _key_times(element: ET.Element, count: int, discrete: bool) -> list[float]:
    raw = element.get("keyTimes")
    if raw:
        try:
            parsed = [float(value) for value in raw.split(";") if value.strip()]
        except ValueError:
            parsed = []
        if len(parsed) == count:
            return parsed
    if discrete:
        return [index / count for index in range(count)]
    return [index / (count - 1) for index in range(count)]


def _sample_keyframes(element: ET.Element, keyframes: list[str], progress: float) -> str:
    if len(keyframes) == 1:
        return keyframes[0]

    discrete = element.get("calcMode") == "discrete"
    times = _key_times(element, len(keyframes), discrete)

    if discrete:
        index = 0
        for position, start in enumerate(times):
            if progress >= start:
                index = position
        return keyframes[index]

    for index in range(len(keyframes) - 1):
        start, end = times[index], times[index + 1]
        if progress <= end or index == len(keyframes) - 2:
            span = end - start
            local = 1.0 if span <= 0 else min(1.0, max(0.0, (progress - start) / span))
            return _blend(keyframes[index], keyframes[index + 1], local)
    return keyframes[-1]


def _blend(start: str, end: str, amount: float) -> str:
    """Interpolate two attribute values; non-interpolable values step at the midpoint."""
    color = _blend_colors(start, end, amount)
    if color is not None:
        return color

    start_parts = _NUMBER.split(start)
    end_parts = _NUMBER.split(end)
    # Odd indexes hold numbers, even indexes hold the text around them
    if len(start_parts) == len(end_parts) and start_parts[::2] == end_parts[::2]:
        blended = list(start_parts)
        for index in range(1, len(start_parts), 2):
            a = float(start_parts[index])
            b = float(end_parts[index])
            blended[index] = _format_number(a + (b - a) * amount)
        return "".join(blended)
    return end if amount >= 0.5 else start


def _blend_colors(start: str, end: str, amount: float) -> str | None:
    if _NUMBER.fullmatch(start.strip()) or _NUMBER.fullmatch(end.strip()):
        return None
    try:
        a = ImageColor.getrgb(start.strip())
        b = ImageColor.getrgb(end.strip())
    except ValueError:
        return None
    channels = [round(x + (y - x) * amount) for x, y in zip(a[:3], b[:3])]
    return "#{:02x}{:02x}{:02x}".format(*channels)


def _append_transform(target: ET.Element, transform: str) -> None:
    base = target.get("transform", "")
    target.set("transform", f"{base} {transform}".strip())


def _prepend_transform(target: ET.Element, transform: str) -> None:
    # Motion is expressed in the parent user space, outside the element transform
    base = target.get("transform", "")
    target.set("transform", f"{transform} {base}".strip())


def _format_number(value: float) -> str:
    if abs(value - round(value)) < 1e-9:
        return str(int(round(value)))
    return f"{value:.4f}".rstrip("0").rstrip(".")
