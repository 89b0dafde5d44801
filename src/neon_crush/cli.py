"""CLI interface for neon-crush."""

import asyncio
import logging
import sys
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from .animation import SvgAction, detect_svg_duration, recommend_action
from .constants import (
    DEFAULT_DURATION_SECONDS,
    DEFAULT_FPS,
    DEFAULT_RASTER_QUALITY,
    DEFAULT_TARGET_SIZE_MB,
    DEFAULT_USER_QUALITY,
)
from .encoding import (
    AdaptiveGifEncoder,
    EncoderTuning,
    ProgressEvent,
    format_progress,
)
from .errors import NeonCrushError
from .output import media_type_for_output_format, optimized_output_path
from .pipeline import ConversionResult, ConversionSettings, convert_svg
from .source import SourceImage

# Load environment variables from .env file
load_dotenv()

console = Console()
err_console = Console(stderr=True)


class CLIError(Exception):
    """Base exception for CLI errors with user-friendly messages."""
    pass


def main(
    input_path: str = typer.Argument(None, help="SVG file to convert"),
    action: SvgAction | None = typer.Option(
        None,
        "--action",
        "-a",
        help="Conversion to run (defaults to the detected recommendation)",
    ),
    duration: int | None = typer.Option(
        None,
        "--duration",
        "-d",
        help="GIF duration in seconds (defaults to the detected duration)",
    ),
    fps: int = typer.Option(DEFAULT_FPS, "--fps", help="Frames per second for the GIF"),
    max_size: float = typer.Option(
        DEFAULT_TARGET_SIZE_MB,
        "--max-size",
        help="Target GIF size in MB",
    ),
    quality: int = typer.Option(
        DEFAULT_USER_QUALITY,
        "--quality",
        "-q",
        min=1,
        max=100,
        help="GIF quality from 1 (smallest) to 100 (best)",
    ),
    raster_format: str = typer.Option(
        "png",
        "--raster-format",
        help="Raster output format (png or jpeg)",
    ),
    raster_quality: float = typer.Option(
        DEFAULT_RASTER_QUALITY,
        "--raster-quality",
        min=0.0,
        max=1.0,
        help="JPEG quality between 0 and 1",
    ),
    out: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output path (defaults to <name>_optimized.<ext>)",
    ),
    detect_only: bool = typer.Option(
        False,
        "--detect-only",
        help="Only report the detected animation duration",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log encoder attempts"),
) -> None:
    """
    Convert an SVG into a minified SVG, a raster image or a size-bounded GIF.

    Examples:
      # Let detection pick the conversion
      neon-crush logo.svg

      # Animated GIF under 2MB at 20 FPS
      neon-crush spinner.svg --action gif --fps 20 --max-size 2
    """
    _configure_logging(verbose)
    try:
        if not input_path:
            raise CLIError("Input file is required")

        data = _load_source(input_path)
        detection = detect_svg_duration(data)
        recommendation = recommend_action(detection)
        console.print(f"[bold blue]{recommendation.message}[/bold blue]")
        if detect_only:
            console.print(f"Duration: {detection.total_duration_seconds}s")
            return

        chosen = action or recommendation.action
        settings = ConversionSettings(
            action=chosen,
            duration_seconds=duration or detection.total_duration_seconds or DEFAULT_DURATION_SECONDS,
            fps=fps,
            target_size_mb=max_size,
            user_quality=quality,
            raster_format=_resolve_raster_format(raster_format),
            raster_quality=raster_quality,
        )
        source = SourceImage(data=data, name=Path(input_path).name)
        result = _convert(source, settings)
        _save_result(result, out or optimized_output_path(input_path, result.media_type))

    except CLIError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)

    except Exception as e:
        err_console.print(f"[bold red]Unexpected error:[/bold red] {e}")
        sys.exit(1)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_source(file_path: str) -> bytes:
    """Load SVG bytes from disk."""
    try:
        with open(file_path, "rb") as f:
            return f.read()
    except FileNotFoundError:
        raise CLIError(f"File '{file_path}' not found")
    except IOError as e:
        raise CLIError(f"Failed to read '{file_path}': {e}")


def _resolve_raster_format(raster_format: str) -> str:
    if raster_format.lower() not in ("png", "jpeg"):
        raise CLIError(f"Unsupported raster format '{raster_format}'. Choose png or jpeg")
    return media_type_for_output_format(raster_format)


def _convert(source: SourceImage, settings: ConversionSettings) -> ConversionResult:
    """Run the conversion, printing GIF progress."""
    if settings.action is SvgAction.GIF:
        console.print(
            f"\n[bold blue]Generating {settings.duration_seconds}s GIF "
            f"at {settings.fps} FPS (target {settings.target_size_mb}MB)...[/bold blue]"
        )
    else:
        console.print(f"\n[bold blue]Running {settings.action.value}...[/bold blue]")

    try:
        encoder = AdaptiveGifEncoder(tuning=EncoderTuning.from_env())
        with console.status("Starting...") as status:

            def on_progress(event: ProgressEvent) -> None:
                status.update(format_progress(event))

            result = asyncio.run(
                convert_svg(source, settings, on_progress, encoder=encoder)
            )
    except (NeonCrushError, ValueError) as e:
        raise CLIError(f"Failed to generate output: {e}")

    if result is None:
        raise CLIError("Conversion was skipped")
    if not result.within_budget:
        console.print(
            f"[yellow]Warning:[/yellow] Output is still above {settings.target_size_mb}MB "
            "after all attempts"
        )
    return result


def _save_result(result: ConversionResult, output_path: str) -> None:
    console.print(f"[bold blue]Saving to {output_path}...[/bold blue]")
    try:
        with open(output_path, "wb") as f:
            f.write(result.data)
    except IOError as e:
        raise CLIError(f"Failed to save file '{output_path}': {e}")
    console.print(f"[green]✓[/green] {_format_bytes(len(result.data))} saved to {output_path}")


def _format_bytes(size: int, decimals: int = 2) -> str:
    if size == 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, decimals):g} {units[index]}"


app = typer.Typer()
app.command()(main)

if __name__ == "__main__":
    app()
