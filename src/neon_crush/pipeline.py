"""Shared conversion orchestration used by CLI and web app entry points."""

from dataclasses import dataclass

from .animation import SvgAction
from .constants import (
    DEFAULT_DURATION_SECONDS,
    DEFAULT_FPS,
    DEFAULT_RASTER_QUALITY,
    DEFAULT_TARGET_SIZE_MB,
    DEFAULT_USER_QUALITY,
)
from .encoding import (
    AdaptiveGifEncoder,
    CairoRasterizer,
    CancellationToken,
    EncodeRequest,
    ProgressObserver,
    Rasterizer,
    ignore_progress,
)
from .output import RasterOutputProvider, minify_svg
from .source import SVG_MEDIA_TYPE, SourceImage, load_svg_source


@dataclass(frozen=True)
class ConversionSettings:
    """User-confirmed settings for converting one SVG."""

    action: SvgAction
    duration_seconds: int = DEFAULT_DURATION_SECONDS
    fps: int = DEFAULT_FPS
    target_size_mb: float = DEFAULT_TARGET_SIZE_MB
    user_quality: int = DEFAULT_USER_QUALITY
    raster_format: str = "image/png"
    raster_quality: float = DEFAULT_RASTER_QUALITY


@dataclass(frozen=True)
class ConversionResult:
    data: bytes
    media_type: str
    action: SvgAction
    within_budget: bool = True


async def convert_svg(
    source: SourceImage,
    settings: ConversionSettings | None,
    observer: ProgressObserver = ignore_progress,
    cancel_token: CancellationToken | None = None,
    *,
    encoder: AdaptiveGifEncoder | None = None,
    rasterizer: Rasterizer | None = None,
) -> ConversionResult | None:
    """
    Run the conversion chosen in ``settings``.

    Args:
        source: The SVG payload
        settings: Confirmed settings, or ``None`` when the user cancelled
        observer: Receives GIF progress events
        cancel_token: Cooperative cancellation for GIF encoding
        encoder: GIF encoder override
        rasterizer: Rasterizer used for the static image path

    Returns:
        The converted payload, or ``None`` when cancelled

    Raises:
        ValueError: If the source is not SVG or the settings are invalid
        EncodingFailure: If the source cannot be decoded or rendered
    """
    if settings is None:
        return None
    if not source.is_svg:
        raise ValueError(f"Expected {SVG_MEDIA_TYPE} source, got {source.media_type}")

    if settings.action is SvgAction.MINIFY:
        minified = minify_svg(source.data.decode("utf-8"))
        return ConversionResult(
            data=minified.encode("utf-8"),
            media_type=SVG_MEDIA_TYPE,
            action=settings.action,
        )

    if settings.action is SvgAction.RASTERIZE:
        provider = RasterOutputProvider(
            media_type=settings.raster_format, quality=settings.raster_quality
        )
        svg = load_svg_source(source.data)
        frame = (rasterizer or CairoRasterizer()).rasterize(
            svg.timeline.snapshot_markup(0), svg.width, svg.height
        )
        return ConversionResult(
            data=provider.encode(iter([frame])),
            media_type=provider.media_type,
            action=settings.action,
        )

    request = EncodeRequest(
        source=source.data,
        duration_seconds=settings.duration_seconds,
        frames_per_second=settings.fps,
        target_size_mb=settings.target_size_mb,
        quality_hint=settings.user_quality,
    )
    result = await (encoder or AdaptiveGifEncoder()).encode(request, observer, cancel_token)
    return ConversionResult(
        data=result.data,
        media_type=result.media_type,
        action=settings.action,
        within_budget=result.within_budget,
    )
