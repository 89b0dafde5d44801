"""Single-frame raster output providers for static SVG conversion."""

from io import BytesIO
from typing import Iterator

from PIL import Image

from .base import OutputProvider, flatten

_PILLOW_FORMATS = {
    "image/png": "png",
    "image/jpeg": "jpeg",
}


class RasterOutputProvider(OutputProvider[Image.Image]):
    """Output provider writing the first frame as PNG or JPEG."""

    def __init__(self, path: str = "", media_type: str = "image/png", quality: float = 1.0):
        """
        Args:
            path: Path to the output file
            media_type: ``image/png`` or ``image/jpeg``
            quality: JPEG quality between 0 and 1 (ignored for PNG)
        """
        super().__init__(path)
        if media_type not in _PILLOW_FORMATS:
            supported = ", ".join(_PILLOW_FORMATS)
            raise ValueError(f"Unsupported raster format: {media_type}. Supported formats: {supported}")
        if not 0 <= quality <= 1:
            raise ValueError("Raster quality must be between 0 and 1")
        self._media_type = media_type
        self.quality = quality

    @property
    def media_type(self) -> str:
        return self._media_type

    def encode(self, frames: Iterator[Image.Image], frame_duration: int = 0) -> bytes:
        frame = next(iter(frames), None)
        if frame is None:
            return b""

        buffer = BytesIO()
        if self._media_type == "image/jpeg":
            # JPEG has no alpha; transparent areas become white
            rgb = flatten(frame)
            rgb.save(buffer, format="jpeg", quality=max(1, round(self.quality * 100)))
            rgb.close()
        else:
            frame.save(buffer, format="png")
        frame.close()
        return buffer.getvalue()
