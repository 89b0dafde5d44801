"""Exception types raised by the conversion core."""

from enum import Enum


class NeonCrushError(Exception):
    """Base exception for conversion errors."""
    pass


class FailureReason(str, Enum):
    SOURCE_UNREADABLE = "source_unreadable"
    RENDER_FAILED = "render_failed"


class EncodingFailure(NeonCrushError):
    """Raised when the source cannot be loaded or an attempt cannot be rendered."""

    def __init__(self, reason: FailureReason, message: str):
        super().__init__(message)
        self.reason = reason


class EncodingCancelled(NeonCrushError):
    """Raised when a cancellation token trips during an encode."""
    pass
