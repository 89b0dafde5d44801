"""FastAPI web app for neon-crush SVG conversion."""

import os

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query
from fastapi.requests import Request
from fastapi.responses import Response

from neon_crush.animation import SvgAction, detect_svg_duration, recommend_action
from neon_crush.constants import (
    DEFAULT_FPS,
    DEFAULT_RASTER_QUALITY,
    DEFAULT_TARGET_SIZE_MB,
    DEFAULT_USER_QUALITY,
)
from neon_crush.encoding import AdaptiveGifEncoder, EncoderTuning
from neon_crush.errors import EncodingFailure
from neon_crush.output import extension_for_media_type, media_type_for_output_format
from neon_crush.pipeline import ConversionSettings, convert_svg
from neon_crush.source import SourceImage

load_dotenv()

app = FastAPI(title="Neon Crush")


@app.post("/api/detect")
async def detect(request: Request):
    """Detect animation duration and recommend a conversion."""
    body = await request.body()
    detection = detect_svg_duration(body)
    recommendation = recommend_action(detection)
    return {
        "duration": detection.total_duration_seconds,
        "animated": detection.is_animated,
        "recommended": recommendation.action.value,
        "alternatives": [alternative.value for alternative in recommendation.alternatives],
        "message": recommendation.message,
    }


@app.post("/api/convert")
async def convert(
    request: Request,
    action: SvgAction = Query(..., description="minify, rasterize or gif"),
    duration: int | None = Query(None, ge=1, description="GIF duration in seconds"),
    fps: int = Query(DEFAULT_FPS, ge=1),
    max_size: float = Query(DEFAULT_TARGET_SIZE_MB, gt=0, description="Target GIF size in MB"),
    quality: int = Query(DEFAULT_USER_QUALITY, ge=1, le=100),
    raster_format: str = Query("png", description="png or jpeg"),
    raster_quality: float = Query(DEFAULT_RASTER_QUALITY, ge=0, le=1),
):
    """Convert the posted SVG and return the encoded result."""
    body = await request.body()
    try:
        settings = ConversionSettings(
            action=action,
            duration_seconds=duration or detect_svg_duration(body).total_duration_seconds,
            fps=fps,
            target_size_mb=max_size,
            user_quality=quality,
            raster_format=media_type_for_output_format(raster_format),
            raster_quality=raster_quality,
        )
        encoder = AdaptiveGifEncoder(tuning=EncoderTuning.from_env())
        result = await convert_svg(SourceImage(data=body), settings, encoder=encoder)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EncodingFailure as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to convert image: {e}")

    return Response(
        content=result.data,
        media_type=result.media_type,
        headers={
            "Content-Disposition": (
                f"inline; filename=image_optimized{extension_for_media_type(result.media_type)}"
            ),
            "X-Within-Budget": str(result.within_budget).lower(),
        },
    )


def main():
    """Run the web server."""
    import uvicorn

    port = int(os.environ.get("NEON_CRUSH_PORT", "8000"))
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
