"""Output providers for different conversion formats."""

from dataclasses import dataclass
from pathlib import Path

from .base import OutputProvider, PillowSequenceOutputProvider
from .gif_provider import GifOutputProvider, palette_size_for_quality
from .raster_provider import RasterOutputProvider
from .svg_minifier import minify_svg


@dataclass(frozen=True)
class OutputFormatSpec:
    extension: str
    media_type: str


_OUTPUT_FORMATS: dict[str, OutputFormatSpec] = {
    "gif": OutputFormatSpec(extension=".gif", media_type="image/gif"),
    "png": OutputFormatSpec(extension=".png", media_type="image/png"),
    "jpeg": OutputFormatSpec(extension=".jpg", media_type="image/jpeg"),
    "svg": OutputFormatSpec(extension=".svg", media_type="image/svg+xml"),
}


def supported_output_formats() -> tuple[str, ...]:
    """Return supported output format names."""
    return tuple(_OUTPUT_FORMATS.keys())


def media_type_for_output_format(output_format: str) -> str:
    """Resolve media type for a supported output format."""
    spec = _OUTPUT_FORMATS.get(output_format.lower())
    if spec is not None:
        return spec.media_type
    supported = ", ".join(supported_output_formats())
    raise ValueError(f"Invalid format. Choose from: {supported}")


def extension_for_media_type(media_type: str) -> str:
    """Resolve the file extension used when saving a result of ``media_type``."""
    for spec in _OUTPUT_FORMATS.values():
        if spec.media_type == media_type:
            return spec.extension
    raise ValueError(f"Unsupported media type: {media_type}")


def optimized_output_path(source_name: str, media_type: str) -> str:
    """Build ``<stem>_optimized.<ext>`` next to the source file."""
    source = Path(source_name)
    return str(source.with_name(f"{source.stem}_optimized{extension_for_media_type(media_type)}"))


__all__ = [
    "OutputFormatSpec",
    "OutputProvider",
    "PillowSequenceOutputProvider",
    "GifOutputProvider",
    "RasterOutputProvider",
    "extension_for_media_type",
    "media_type_for_output_format",
    "minify_svg",
    "optimized_output_path",
    "palette_size_for_quality",
    "supported_output_formats",
]
