"""Adaptive frame-budget GIF encoder.

Renders the source at a chosen size and palette quality, then retries at a
smaller scale and coarser quality until the output fits the target size or
the attempt budget runs out. Parameters only ever degrade between attempts.
"""

import asyncio
import logging
from typing import Callable

from ..source import SvgSource, load_svg_source
from .cancellation import CancellationToken
from .frames import FramePlan, FrameSequenceRenderer
from .guards import clamp_fps, initial_scale, map_user_quality, scaled_dimensions
from .progress import ProgressEvent, ProgressObserver, ProgressPhase, ignore_progress
from .request import EncodeAttemptState, EncodedResult, EncodeRequest, EncoderTuning

logger = logging.getLogger(__name__)

GIF_MEDIA_TYPE = "image/gif"


class AdaptiveGifEncoder:
    """Encodes SVG animations into GIFs that fit a size budget."""

    def __init__(
        self,
        renderer: FrameSequenceRenderer | None = None,
        tuning: EncoderTuning | None = None,
        source_loader: Callable[[bytes], SvgSource] = load_svg_source,
    ):
        """
        Initialize the encoder.

        Args:
            renderer: Per-attempt frame renderer
            tuning: Retry parameters; defaults come from constants
            source_loader: Decodes request bytes into an SVG source
        """
        self.tuning = tuning or EncoderTuning()
        self.renderer = renderer or FrameSequenceRenderer(
            settle_delay_ms=self.tuning.settle_delay_ms
        )
        self.source_loader = source_loader

    async def encode(
        self,
        request: EncodeRequest,
        observer: ProgressObserver = ignore_progress,
        cancel_token: CancellationToken | None = None,
    ) -> EncodedResult:
        """
        Encode ``request`` as a GIF, shrinking until it fits ``target_size_mb``.

        The last attempt is returned even when it is still over budget; check
        ``EncodedResult.within_budget``.

        Raises:
            EncodingFailure: If the source is unreadable or an attempt fails to render
            EncodingCancelled: If ``cancel_token`` is cancelled mid-encode
        """
        cancel_token = cancel_token or CancellationToken()
        max_attempts = self.tuning.max_attempts
        source = self.source_loader(request.source)

        fps = clamp_fps(request.duration_seconds, request.frames_per_second)
        if fps != request.frames_per_second:
            logger.info(
                "Reducing FPS from %d to %d for long animation (%ds)",
                request.frames_per_second,
                fps,
                request.duration_seconds,
            )
            observer(
                ProgressEvent(
                    1, max_attempts, ProgressPhase.CAPTURE, 0.0,
                    note=f"Reducing FPS to {fps} for stability",
                )
            )
            request = request.with_frames_per_second(fps)

        state = EncodeAttemptState(
            attempt_index=1,
            scale_factor=initial_scale(source.width, source.height, request.duration_seconds),
            encoder_quality=map_user_quality(request.quality_hint),
        )

        while True:
            cancel_token.raise_if_cancelled()
            width, height = scaled_dimensions(source.width, source.height, state.scale_factor)
            plan = FramePlan(
                duration_seconds=request.duration_seconds,
                frames_per_second=request.frames_per_second,
                width=width,
                height=height,
                encoder_quality=state.encoder_quality,
            )

            data = await self.renderer.render_attempt(
                source.timeline,
                plan,
                _attempt_reporter(observer, state.attempt_index, max_attempts),
                cancel_token,
            )
            result = EncodedResult(
                data=data,
                media_type=GIF_MEDIA_TYPE,
                width=width,
                height=height,
                frames_per_second=request.frames_per_second,
                encoder_quality=state.encoder_quality,
                attempts=state.attempt_index,
                target_size_mb=request.target_size_mb,
            )
            logger.info(
                "Attempt %d: %.2fMB at %dx%d, quality %d (target %.2fMB)",
                state.attempt_index,
                result.size_mb,
                width,
                height,
                state.encoder_quality,
                request.target_size_mb,
            )

            if result.within_budget or state.attempt_index >= max_attempts:
                return result

            await asyncio.sleep(0)
            state.degrade(self.tuning.scale_step, self.tuning.quality_step)


def _attempt_reporter(
    observer: ProgressObserver, attempt: int, max_attempts: int
) -> Callable[[ProgressPhase, float], None]:
    def report(phase: ProgressPhase, fraction: float) -> None:
        observer(ProgressEvent(attempt, max_attempts, phase, fraction))

    return report


async def encode_gif(
    request: EncodeRequest,
    observer: ProgressObserver = ignore_progress,
    cancel_token: CancellationToken | None = None,
    tuning: EncoderTuning | None = None,
) -> EncodedResult:
    """Encode ``request`` with a default-configured AdaptiveGifEncoder."""
    return await AdaptiveGifEncoder(tuning=tuning).encode(request, observer, cancel_token)
