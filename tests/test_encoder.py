"""Tests for the adaptive frame-budget encoder."""

import asyncio

import pytest

from neon_crush.constants import BYTES_PER_MB
from neon_crush.encoding import (
    AdaptiveGifEncoder,
    CancellationToken,
    EncodeAttemptState,
    EncodeRequest,
    EncoderTuning,
    ProgressPhase,
    clamp_fps,
    initial_scale,
    map_user_quality,
    resolution_cap,
)
from neon_crush.errors import EncodingCancelled, EncodingFailure, FailureReason


def svg_bytes(width: int = 400, height: int = 400) -> bytes:
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}">'
        '<rect width="10" height="10"><animate attributeName="x" from="0" to="50" dur="1s"/></rect>'
        "</svg>"
    ).encode("utf-8")


class RecordingRenderer:
    """Fake attempt renderer returning a payload sized by ``size_for``."""

    def __init__(self, size_for=lambda plan: 1024):
        self.size_for = size_for
        self.plans = []

    async def render_attempt(self, timeline, plan, report, cancel_token):
        cancel_token.raise_if_cancelled()
        self.plans.append(plan)
        report(ProgressPhase.CAPTURE, 1.0)
        report(ProgressPhase.ENCODE, 1.0)
        return b"x" * self.size_for(plan)


def run_encode(encoder, request, observer=None, cancel_token=None):
    if observer is None:
        return asyncio.run(encoder.encode(request, cancel_token=cancel_token))
    return asyncio.run(encoder.encode(request, observer, cancel_token))


def request_for(source: bytes, duration: int = 2, fps: int = 10, target_mb: float = 1.0, quality: int = 80):
    return EncodeRequest(
        source=source,
        duration_seconds=duration,
        frames_per_second=fps,
        target_size_mb=target_mb,
        quality_hint=quality,
    )


def test_quality_mapping_bounds():
    """User quality 100 maps to 1; user quality 1 maps near 29 and stays in range."""
    assert map_user_quality(100) == 1
    assert 29 <= map_user_quality(1) <= 30
    assert map_user_quality(80) == 7
    for quality in range(1, 101):
        assert 1 <= map_user_quality(quality) <= 30


def test_quality_mapping_never_improves_as_user_quality_drops():
    """Lower user quality never yields a better encoder quality."""
    mapped = [map_user_quality(quality) for quality in range(100, 0, -1)]

    assert mapped == sorted(mapped)


def test_fps_guard_clamps_long_animations():
    """duration=15s at 30 FPS is clamped to 15 FPS."""
    assert clamp_fps(15, 30) == 15
    assert clamp_fps(10, 30) == 30
    assert clamp_fps(15, 12) == 12


def test_resolution_cap_tiers():
    """Longer animations get smaller maximum dimensions."""
    assert resolution_cap(5) == 800
    assert resolution_cap(10) == 800
    assert resolution_cap(11) == 600
    assert resolution_cap(20) == 600
    assert resolution_cap(25) == 500


def test_initial_scale():
    """Oversized sources are scaled down to the tier cap; small ones are not."""
    assert initial_scale(2000, 1000, 25) == pytest.approx(0.25)
    assert initial_scale(400, 300, 5) == 1.0


def test_attempt_state_degrade():
    """Each degrade shrinks scale and coarsens quality, clamped at 30."""
    state = EncodeAttemptState(attempt_index=1, scale_factor=1.0, encoder_quality=27)

    state.degrade(0.75, 5)

    assert state.attempt_index == 2
    assert state.scale_factor == pytest.approx(0.75)
    assert state.encoder_quality == 30


def test_single_attempt_when_budget_met():
    """A result within budget on attempt 1 is returned with no degradation."""
    renderer = RecordingRenderer()
    encoder = AdaptiveGifEncoder(renderer=renderer)

    result = run_encode(encoder, request_for(svg_bytes()))

    assert len(renderer.plans) == 1
    assert (renderer.plans[0].width, renderer.plans[0].height) == (400, 400)
    assert renderer.plans[0].encoder_quality == 7
    assert result.attempts == 1
    assert result.within_budget
    assert result.media_type == "image/gif"


def test_three_attempts_when_budget_unreachable():
    """Scale shrinks by 0.75 and quality rises each retry; the third result is returned."""
    renderer = RecordingRenderer(size_for=lambda plan: 2 * BYTES_PER_MB)
    encoder = AdaptiveGifEncoder(renderer=renderer)

    result = run_encode(encoder, request_for(svg_bytes(), target_mb=1.0))

    assert [plan.width for plan in renderer.plans] == [400, 300, 225]
    assert [plan.encoder_quality for plan in renderer.plans] == [7, 12, 17]
    assert result.attempts == 3
    assert result.width == 225
    assert not result.within_budget
    assert result.size_mb == pytest.approx(2.0)


def test_quality_clamped_at_worst_setting():
    """Encoder quality never exceeds 30 across retries."""
    renderer = RecordingRenderer(size_for=lambda plan: 2 * BYTES_PER_MB)
    encoder = AdaptiveGifEncoder(renderer=renderer)

    run_encode(encoder, request_for(svg_bytes(), quality=1))

    qualities = [plan.encoder_quality for plan in renderer.plans]
    assert qualities == sorted(qualities)
    assert all(quality == 30 for quality in qualities)


def test_stops_once_budget_met_on_retry():
    """The loop stops at the first attempt that fits."""
    renderer = RecordingRenderer(
        size_for=lambda plan: 2 * BYTES_PER_MB if plan.width > 300 else 1024
    )
    encoder = AdaptiveGifEncoder(renderer=renderer)

    result = run_encode(encoder, request_for(svg_bytes()))

    assert len(renderer.plans) == 2
    assert result.attempts == 2
    assert result.within_budget


def test_resolution_guard_applies_before_first_attempt():
    """A 2000x1000 source at 25s starts at max dimension 500."""
    renderer = RecordingRenderer()
    encoder = AdaptiveGifEncoder(renderer=renderer)

    run_encode(encoder, request_for(svg_bytes(2000, 1000), duration=25, fps=10))

    assert (renderer.plans[0].width, renderer.plans[0].height) == (500, 250)


def test_fps_guard_applies_before_frame_math():
    """A 15s request at 30 FPS renders at 15 FPS and reports why."""
    renderer = RecordingRenderer()
    encoder = AdaptiveGifEncoder(renderer=renderer)
    events = []

    result = run_encode(encoder, request_for(svg_bytes(), duration=15, fps=30), events.append)

    assert renderer.plans[0].frames_per_second == 15
    assert renderer.plans[0].total_frames == 225
    assert result.frames_per_second == 15
    assert "FPS" in events[0].note


def test_progress_is_attempt_scoped():
    """Progress events carry the attempt they belong to."""
    renderer = RecordingRenderer(size_for=lambda plan: 2 * BYTES_PER_MB)
    encoder = AdaptiveGifEncoder(renderer=renderer)
    events = []

    run_encode(encoder, request_for(svg_bytes()), events.append)

    assert [event.attempt for event in events] == [1, 1, 2, 2, 3, 3]
    assert all(event.max_attempts == 3 for event in events)


def test_custom_tuning():
    """Retry parameters are tunable."""
    renderer = RecordingRenderer(size_for=lambda plan: 2 * BYTES_PER_MB)
    encoder = AdaptiveGifEncoder(
        renderer=renderer,
        tuning=EncoderTuning(scale_step=0.5, quality_step=2, max_attempts=2),
    )

    run_encode(encoder, request_for(svg_bytes()))

    assert [plan.width for plan in renderer.plans] == [400, 200]
    assert [plan.encoder_quality for plan in renderer.plans] == [7, 9]


def test_tuning_from_env(monkeypatch):
    """Environment variables override tuning defaults."""
    monkeypatch.setenv("NEON_CRUSH_SCALE_STEP", "0.5")
    monkeypatch.setenv("NEON_CRUSH_MAX_ATTEMPTS", "4")

    tuning = EncoderTuning.from_env()

    assert tuning.scale_step == 0.5
    assert tuning.max_attempts == 4
    assert tuning.quality_step == 5


def test_tuning_from_env_rejects_garbage(monkeypatch):
    """Invalid environment values raise ValueError."""
    monkeypatch.setenv("NEON_CRUSH_QUALITY_STEP", "lots")

    with pytest.raises(ValueError, match="Invalid encoder tuning"):
        EncoderTuning.from_env()


def test_unreadable_source_is_fatal():
    """Sources that cannot be decoded fail before any attempt."""
    renderer = RecordingRenderer()
    encoder = AdaptiveGifEncoder(renderer=renderer)

    with pytest.raises(EncodingFailure) as exc_info:
        run_encode(encoder, request_for(b"definitely not svg"))

    assert exc_info.value.reason is FailureReason.SOURCE_UNREADABLE
    assert renderer.plans == []


def test_empty_source_is_fatal():
    """Empty payloads are unreadable."""
    encoder = AdaptiveGifEncoder(renderer=RecordingRenderer())

    with pytest.raises(EncodingFailure) as exc_info:
        run_encode(encoder, request_for(b"   "))

    assert exc_info.value.reason is FailureReason.SOURCE_UNREADABLE


def test_cancelled_token_stops_before_rendering():
    """A cancelled token aborts at the attempt boundary."""
    renderer = RecordingRenderer()
    encoder = AdaptiveGifEncoder(renderer=renderer)
    token = CancellationToken()
    token.cancel()

    with pytest.raises(EncodingCancelled):
        run_encode(encoder, request_for(svg_bytes()), cancel_token=token)

    assert renderer.plans == []


def test_cancel_between_attempts():
    """Cancelling during attempt 1 prevents attempt 2."""
    renderer = RecordingRenderer(size_for=lambda plan: 2 * BYTES_PER_MB)
    encoder = AdaptiveGifEncoder(renderer=renderer)
    token = CancellationToken()

    def observer(event):
        if event.phase is ProgressPhase.ENCODE:
            token.cancel()

    with pytest.raises(EncodingCancelled):
        run_encode(encoder, request_for(svg_bytes()), observer, token)

    assert len(renderer.plans) == 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"duration_seconds": 0},
        {"frames_per_second": 0},
        {"target_size_mb": 0},
        {"quality_hint": 101},
        {"quality_hint": 0},
    ],
)
def test_request_validation(kwargs):
    """Requests reject values the encoder cannot honor."""
    params = {
        "source": svg_bytes(),
        "duration_seconds": 2,
        "frames_per_second": 10,
        "target_size_mb": 1.0,
        "quality_hint": 80,
    }
    params.update(kwargs)

    with pytest.raises(ValueError):
        EncodeRequest(**params)


def test_request_is_not_mutated_by_fps_guard():
    """The caller's request stays untouched; a derived copy carries the clamp."""
    request = request_for(svg_bytes(), duration=15, fps=30)
    encoder = AdaptiveGifEncoder(renderer=RecordingRenderer())

    run_encode(encoder, request)

    assert request.frames_per_second == 30
