"""Per-attempt frame capture and GIF encoding."""

import asyncio
from dataclasses import dataclass
from typing import Callable, Iterator

from PIL import Image

from ..animation.scrubber import SvgTimeline
from ..constants import FRAME_SETTLE_DELAY_MS
from ..errors import EncodingCancelled, EncodingFailure, FailureReason
from ..output import GifOutputProvider, PillowSequenceOutputProvider
from .cancellation import CancellationToken
from .progress import ProgressPhase
from .rasterizer import CairoRasterizer, Rasterizer

PROGRESS_EVERY_FRAMES = 5

PhaseReporter = Callable[[ProgressPhase, float], None]


@dataclass(frozen=True)
class FramePlan:
    """Fixed parameters of one render attempt."""

    duration_seconds: int
    frames_per_second: int
    width: int
    height: int
    encoder_quality: int

    @property
    def total_frames(self) -> int:
        return self.duration_seconds * self.frames_per_second

    @property
    def frame_interval_ms(self) -> float:
        return 1000 / self.frames_per_second

    @property
    def frame_delay_ms(self) -> int:
        return round(self.frame_interval_ms)

    def frame_time_ms(self, index: int) -> float:
        return index / self.frames_per_second * 1000


def _gif_provider(encoder_quality: int) -> PillowSequenceOutputProvider:
    return GifOutputProvider(encoder_quality=encoder_quality)


class FrameSequenceRenderer:
    """Scrubs a document frame by frame and encodes the captured sequence."""

    def __init__(
        self,
        rasterizer: Rasterizer | None = None,
        settle_delay_ms: float = FRAME_SETTLE_DELAY_MS,
        provider_factory: Callable[[int], PillowSequenceOutputProvider] = _gif_provider,
    ):
        """
        Initialize the renderer.

        Args:
            rasterizer: Turns static SVG snapshots into images (cairosvg by default)
            settle_delay_ms: Wait after each scrub before sampling pixels
            provider_factory: Builds the output provider for an encoder quality
        """
        self.rasterizer = rasterizer or CairoRasterizer()
        self.settle_delay_ms = settle_delay_ms
        self.provider_factory = provider_factory

    async def render_attempt(
        self,
        timeline: SvgTimeline,
        plan: FramePlan,
        report: PhaseReporter,
        cancel_token: CancellationToken,
    ) -> bytes:
        """
        Capture ``plan.total_frames`` frames and encode them.

        Captured frames are released before returning, on every exit path.

        Raises:
            EncodingCancelled: If the token trips at a frame boundary
            EncodingFailure: If a frame cannot be rendered or encoded
        """
        frames: list[Image.Image] = []
        try:
            await self._capture(timeline, plan, frames, report, cancel_token)
            report(ProgressPhase.ENCODE, 0.0)
            provider = self.provider_factory(plan.encoder_quality)
            data = provider.encode(
                _tracked(frames, report, cancel_token),
                frame_duration=plan.frame_delay_ms,
            )
            report(ProgressPhase.ENCODE, 1.0)
            return data
        except (EncodingCancelled, EncodingFailure):
            raise
        except Exception as e:
            raise EncodingFailure(FailureReason.RENDER_FAILED, f"Failed to render frames: {e}") from e
        finally:
            for frame in frames:
                frame.close()
            frames.clear()

    async def _capture(
        self,
        timeline: SvgTimeline,
        plan: FramePlan,
        frames: list[Image.Image],
        report: PhaseReporter,
        cancel_token: CancellationToken,
    ) -> None:
        total = plan.total_frames
        report(ProgressPhase.CAPTURE, 0.0)
        for index in range(total):
            cancel_token.raise_if_cancelled()
            markup = timeline.snapshot_markup(plan.frame_time_ms(index))

            # One loop tick, then the settle delay
            await asyncio.sleep(0)
            if self.settle_delay_ms > 0:
                await asyncio.sleep(self.settle_delay_ms / 1000)

            frames.append(self.rasterizer.rasterize(markup, plan.width, plan.height))
            captured = index + 1
            if captured % PROGRESS_EVERY_FRAMES == 0 or captured == total:
                report(ProgressPhase.CAPTURE, captured / total)


def _tracked(
    frames: list[Image.Image],
    report: PhaseReporter,
    cancel_token: CancellationToken,
) -> Iterator[Image.Image]:
    total = len(frames)
    for index, frame in enumerate(frames):
        cancel_token.raise_if_cancelled()
        yield frame
        # Saving the file happens after the last frame, so never report 1.0 here
        report(ProgressPhase.ENCODE, (index + 1) / (total + 1))
