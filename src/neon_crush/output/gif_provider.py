"""GIF output provider."""

from PIL import Image

from ..constants import (
    ENCODER_QUALITY_BEST,
    ENCODER_QUALITY_WORST,
    GIF_COLORS_PER_QUALITY_STEP,
    GIF_DITHER_MAX_QUALITY,
    GIF_MAX_COLORS,
    GIF_MIN_COLORS,
)
from .base import PillowSequenceOutputProvider, flatten


def palette_size_for_quality(encoder_quality: int) -> int:
    """Map encoder quality (1 best, 30 worst) to a palette size."""
    quality = max(ENCODER_QUALITY_BEST, min(ENCODER_QUALITY_WORST, encoder_quality))
    return max(GIF_MIN_COLORS, GIF_MAX_COLORS - (quality - 1) * GIF_COLORS_PER_QUALITY_STEP)


class GifOutputProvider(PillowSequenceOutputProvider):
    """Output provider for GIF format."""

    def __init__(self, path: str = "", encoder_quality: int = ENCODER_QUALITY_BEST):
        super().__init__(path)
        self.encoder_quality = encoder_quality

    @property
    def media_type(self) -> str:
        return "image/gif"

    @property
    def output_format(self) -> str:
        return "gif"

    @property
    def colors(self) -> int:
        return palette_size_for_quality(self.encoder_quality)

    def prepare_frame(self, frame: Image.Image) -> Image.Image:
        dither = (
            Image.Dither.FLOYDSTEINBERG
            if self.encoder_quality <= GIF_DITHER_MAX_QUALITY
            else Image.Dither.NONE
        )
        rgb = flatten(frame)
        frame.close()
        quantized = rgb.quantize(
            colors=self.colors, method=Image.Quantize.MEDIANCUT, dither=dither
        )
        rgb.close()
        return quantized

    @property
    def save_options(self) -> dict[str, object]:
        return {"optimize": False}
