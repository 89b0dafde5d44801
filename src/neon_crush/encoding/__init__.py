"""Adaptive frame-budget GIF encoding."""

from .budget import AdaptiveGifEncoder, encode_gif
from .cancellation import CancellationToken
from .frames import FramePlan, FrameSequenceRenderer
from .guards import clamp_fps, initial_scale, map_user_quality, resolution_cap
from .progress import (
    ProgressEvent,
    ProgressObserver,
    ProgressPhase,
    format_progress,
    ignore_progress,
)
from .rasterizer import CairoRasterizer, Rasterizer
from .request import EncodeAttemptState, EncodedResult, EncodeRequest, EncoderTuning

__all__ = [
    "AdaptiveGifEncoder",
    "CairoRasterizer",
    "CancellationToken",
    "EncodeAttemptState",
    "EncodedResult",
    "EncodeRequest",
    "EncoderTuning",
    "FramePlan",
    "FrameSequenceRenderer",
    "ProgressEvent",
    "ProgressObserver",
    "ProgressPhase",
    "Rasterizer",
    "clamp_fps",
    "encode_gif",
    "format_progress",
    "ignore_progress",
    "initial_scale",
    "map_user_quality",
    "resolution_cap",
]
