"""Rasterizers turning static SVG markup into Pillow images."""

from io import BytesIO
from typing import Protocol

from PIL import Image


class Rasterizer(Protocol):
    def rasterize(self, markup: bytes, width: int, height: int) -> Image.Image:
        """Render static SVG markup into an RGBA image of exactly ``width`` x ``height``."""
        ...


class CairoRasterizer:
    """Renders SVG with cairosvg."""

    def rasterize(self, markup: bytes, width: int, height: int) -> Image.Image:
        import cairosvg

        png_bytes = cairosvg.svg2png(
            bytestring=markup,
            output_width=width,
            output_height=height,
        )
        with Image.open(BytesIO(png_bytes)) as decoded:
            image = decoded.convert("RGBA")
        if image.size != (width, height):
            resized = image.resize((width, height), Image.Resampling.LANCZOS)
            image.close()
            image = resized
        return image
