"""Time values and timing primitives used by animation detection and scrubbing."""

import re
from dataclasses import dataclass
from typing import Literal

INDEFINITE = "indefinite"

# Leading float the way a lenient number parser reads it ("1.5s" -> 1.5, ".5" -> 0.5)
_NUMBER_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_DIGIT = re.compile(r"\d")

RepeatCount = float | Literal["indefinite"] | None


def parse_number_prefix(value: str | None) -> float | None:
    """Parse the leading number of ``value``; ``None`` when there is none."""
    if not value:
        return None
    match = _NUMBER_PREFIX.match(value.strip())
    if match is None:
        return None
    return float(match.group(0))


def parse_time(value: str | None) -> float:
    """
    Parse a clock value into seconds.

    ``"500ms"`` is milliseconds, ``"2s"`` and bare ``"2"`` are seconds.
    Empty or unparseable values parse to 0.
    """
    if not value:
        return 0.0
    text = value.strip()
    number = parse_number_prefix(text)
    if number is None:
        return 0.0
    if text.endswith("ms"):
        return number / 1000
    return number


def parse_begin(value: str | None) -> float:
    """Parse a ``begin`` attribute; event-based values resolve to 0."""
    if not value or not _DIGIT.search(value):
        return 0.0
    return parse_time(value.split(";")[0])


def parse_repeat_count(value: str | None) -> RepeatCount:
    if value is None:
        return None
    text = value.strip()
    if text == INDEFINITE:
        return INDEFINITE
    return parse_number_prefix(text)


@dataclass(frozen=True)
class AnimationTimingSpec:
    """A timing primitive discovered in a document, in seconds."""

    begin: float
    duration: float
    repeat_count: RepeatCount = None

    @property
    def end_time(self) -> float:
        if self.repeat_count is None or self.repeat_count == INDEFINITE:
            return self.begin + self.duration
        return self.begin + self.duration * self.repeat_count

    @property
    def active_duration(self) -> float:
        """Length of the active interval; infinite for indefinite repeats."""
        if self.repeat_count == INDEFINITE:
            return float("inf")
        if self.repeat_count is None:
            return self.duration
        return self.duration * self.repeat_count

    @classmethod
    def from_attributes(
        cls, dur: str | None, begin: str | None, repeat_count: str | None
    ) -> "AnimationTimingSpec":
        return cls(
            begin=parse_begin(begin),
            duration=parse_time(dur),
            repeat_count=parse_repeat_count(repeat_count),
        )
