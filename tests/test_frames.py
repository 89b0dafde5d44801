"""Tests for per-attempt frame capture and GIF encoding."""

import asyncio
import xml.etree.ElementTree as ET
from io import BytesIO

import pytest
from PIL import Image

from neon_crush.animation import SvgTimeline
from neon_crush.encoding import CancellationToken, FramePlan, FrameSequenceRenderer, ProgressPhase
from neon_crush.errors import EncodingCancelled, EncodingFailure, FailureReason
from neon_crush.output import GifOutputProvider

COLORS = ["red", "green", "blue", "white", "black", "yellow", "purple", "orange"]

ANIMATED_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="40" height="20">'
    '<rect width="0" height="20"><animate attributeName="width" from="0" to="40" dur="1s"/></rect>'
    "</svg>"
)


class ColorRasterizer:
    """Fake rasterizer producing a distinct solid color per call."""

    def __init__(self):
        self.markups = []
        self.sizes = []
        self.images = []

    def rasterize(self, markup, width, height):
        self.markups.append(markup)
        self.sizes.append((width, height))
        color = COLORS[(len(self.markups) - 1) % len(COLORS)]
        image = Image.new("RGBA", (width, height), color)
        self.images.append(image)
        return image


class BrokenRasterizer:
    def __init__(self):
        self.calls = 0

    def rasterize(self, markup, width, height):
        self.calls += 1
        raise RuntimeError("renderer unavailable")


def render(renderer, plan, cancel_token=None, events=None):
    timeline = SvgTimeline.from_markup(ANIMATED_SVG)
    sink = events if events is not None else []

    def report(phase, fraction):
        sink.append((phase, fraction))

    return asyncio.run(
        renderer.render_attempt(timeline, plan, report, cancel_token or CancellationToken())
    )


def plan(duration=1, fps=4, width=40, height=20, quality=7):
    return FramePlan(
        duration_seconds=duration,
        frames_per_second=fps,
        width=width,
        height=height,
        encoder_quality=quality,
    )


def test_frame_plan_math():
    """Frame count and interval follow duration and FPS."""
    frame_plan = plan(duration=3, fps=20)

    assert frame_plan.total_frames == 60
    assert frame_plan.frame_interval_ms == 50
    assert frame_plan.frame_delay_ms == 50
    assert frame_plan.frame_time_ms(10) == 500


def test_renders_animated_gif():
    """One frame is captured per tick and encoded as an animated GIF."""
    rasterizer = ColorRasterizer()
    renderer = FrameSequenceRenderer(rasterizer=rasterizer, settle_delay_ms=0)

    data = render(renderer, plan())

    assert data.startswith(b"GIF89a")
    with Image.open(BytesIO(data)) as gif:
        assert gif.size == (40, 20)
        assert gif.n_frames == 4
        assert gif.info["duration"] == 250
    assert rasterizer.sizes == [(40, 20)] * 4


def test_frames_are_scrubbed_deterministically():
    """Frame i samples the document at i / fps seconds."""
    rasterizer = ColorRasterizer()
    renderer = FrameSequenceRenderer(rasterizer=rasterizer, settle_delay_ms=0)

    render(renderer, plan())

    values = [ET.fromstring(markup)[0].get("width") for markup in rasterizer.markups]
    assert values == ["0", "10", "20", "30"]
    assert all(b"animate" not in markup for markup in rasterizer.markups)


def test_progress_capture_then_encode():
    """Capture progress precedes encode progress and ends at 1.0."""
    renderer = FrameSequenceRenderer(rasterizer=ColorRasterizer(), settle_delay_ms=0)
    events = []

    render(renderer, plan(duration=2, fps=5), events=events)

    phases = [phase for phase, _ in events]
    first_encode = phases.index(ProgressPhase.ENCODE)
    assert all(phase is ProgressPhase.CAPTURE for phase in phases[:first_encode])
    assert all(phase is ProgressPhase.ENCODE for phase in phases[first_encode:])
    capture = [fraction for phase, fraction in events if phase is ProgressPhase.CAPTURE]
    encode = [fraction for phase, fraction in events if phase is ProgressPhase.ENCODE]
    assert capture == sorted(capture) and capture[-1] == 1.0
    assert encode == sorted(encode) and encode[-1] == 1.0


def test_render_failure_is_not_retried():
    """A failing rasterizer surfaces immediately as a render failure."""
    rasterizer = BrokenRasterizer()
    renderer = FrameSequenceRenderer(rasterizer=rasterizer, settle_delay_ms=0)

    with pytest.raises(EncodingFailure) as exc_info:
        render(renderer, plan())

    assert exc_info.value.reason is FailureReason.RENDER_FAILED
    assert rasterizer.calls == 1


def test_cancellation_at_frame_boundary():
    """Cancelling mid-capture stops before the next frame."""
    rasterizer = ColorRasterizer()
    renderer = FrameSequenceRenderer(rasterizer=rasterizer, settle_delay_ms=0)
    token = CancellationToken()
    events = []

    class CancellingList(list):
        def append(self, item):
            super().append(item)
            if item[0] is ProgressPhase.CAPTURE and item[1] > 0:
                token.cancel()

    with pytest.raises(EncodingCancelled):
        render(renderer, plan(duration=2, fps=10), cancel_token=token, events=CancellingList(events))

    assert len(rasterizer.markups) == 5



class RecordingGifProvider(GifOutputProvider):
    """GIF provider that keeps every frame it prepares."""

    def __init__(self, encoder_quality, fail_after=None):
        super().__init__(encoder_quality=encoder_quality)
        self.fail_after = fail_after
        self.prepared = []

    def prepare_frame(self, frame):
        if self.fail_after is not None and len(self.prepared) >= self.fail_after:
            raise RuntimeError("quantizer failed")
        prepared = super().prepare_frame(frame)
        self.prepared.append(prepared)
        return prepared


def recording_renderer(rasterizer, providers, fail_after=None):
    def factory(encoder_quality):
        provider = RecordingGifProvider(encoder_quality, fail_after=fail_after)
        providers.append(provider)
        return provider

    return FrameSequenceRenderer(
        rasterizer=rasterizer, settle_delay_ms=0, provider_factory=factory
    )


def is_closed(image):
    try:
        image.getpixel((0, 0))
    except ValueError:
        return True
    return False


def test_frames_are_released_after_success():
    """Captured and prepared frames are closed once the GIF is encoded."""
    rasterizer = ColorRasterizer()
    providers = []

    render(recording_renderer(rasterizer, providers), plan())

    assert len(rasterizer.images) == 4
    assert all(is_closed(image) for image in rasterizer.images)
    assert len(providers[0].prepared) == 4
    assert all(is_closed(image) for image in providers[0].prepared)


def test_cancellation_during_encode_releases_frames():
    """Cancelling while encoding stops and closes every frame buffer."""
    rasterizer = ColorRasterizer()
    providers = []
    token = CancellationToken()

    class CancellingList(list):
        def append(self, item):
            super().append(item)
            if item[0] is ProgressPhase.ENCODE and item[1] > 0:
                token.cancel()

    with pytest.raises(EncodingCancelled):
        render(
            recording_renderer(rasterizer, providers),
            plan(),
            cancel_token=token,
            events=CancellingList(),
        )

    assert len(rasterizer.images) == 4
    assert all(is_closed(image) for image in rasterizer.images)
    assert len(providers[0].prepared) == 1
    assert all(is_closed(image) for image in providers[0].prepared)


def test_encode_failure_releases_frames():
    """A frame that fails to encode surfaces as a render failure with buffers closed."""
    rasterizer = ColorRasterizer()
    providers = []

    with pytest.raises(EncodingFailure) as exc_info:
        render(recording_renderer(rasterizer, providers, fail_after=2), plan())

    assert exc_info.value.reason is FailureReason.RENDER_FAILED
    assert all(is_closed(image) for image in rasterizer.images)
    assert len(providers[0].prepared) == 2
    assert all(is_closed(image) for image in providers[0].prepared)
