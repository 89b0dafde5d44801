"""Progress events emitted while encoding."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable


class ProgressPhase(str, Enum):
    CAPTURE = "capture"
    ENCODE = "encode"


@dataclass(frozen=True)
class ProgressEvent:
    """A progress update scoped to one encode attempt."""

    attempt: int
    max_attempts: int
    phase: ProgressPhase
    fraction: float
    note: str = ""

    @property
    def overall_fraction(self) -> float:
        """Attempt progress where capture fills the first half and encode the second."""
        offset = 0.0 if self.phase is ProgressPhase.CAPTURE else 0.5
        return offset + min(1.0, max(0.0, self.fraction)) * 0.5


ProgressObserver = Callable[[ProgressEvent], None]


def ignore_progress(event: ProgressEvent) -> None:
    pass


def format_progress(event: ProgressEvent) -> str:
    """Render a progress event as a human-readable status line."""
    prefix = f"Attempt {event.attempt}/{event.max_attempts}"
    if event.note:
        return f"{prefix}: {event.note}"
    total = round(event.overall_fraction * 100)
    if event.phase is ProgressPhase.CAPTURE:
        return f"{prefix}: Capturing frames {round(event.fraction * 100)}% (Total {total}%)"
    return f"{prefix}: Encoding {round(event.fraction * 100)}% (Total {total}%)"
