"""Convert a window of a video file into an animated GIF."""

from pathlib import Path

import click
from tqdm import tqdm

from ..config import DEFAULT_CONVERSION_CONFIG, DEFAULT_PATH_CONFIG
from ..converter import GifConverter
from ..error_handling import GifClipError
from ..io import format_file_size, setup_logging
from ..job import ConversionJob
from ..quality import QualityTier
from .utils import (
    display_common_header,
    display_path_info,
    handle_generic_error,
    handle_keyboard_interrupt,
)


@click.command()
@click.argument(
    "video",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--start",
    "-s",
    type=float,
    default=0.0,
    show_default=True,
    help="Start time in seconds",
)
@click.option(
    "--duration",
    "-d",
    type=float,
    default=DEFAULT_CONVERSION_CONFIG.DEFAULT_DURATION_S,
    show_default=True,
    help="Length of the clip in seconds",
)
@click.option(
    "--width",
    "-w",
    type=int,
    default=320,
    show_default=True,
    help="Output width in pixels (height keeps the aspect ratio)",
)
@click.option(
    "--fps",
    type=float,
    default=10.0,
    show_default=True,
    help="Output frames per second",
)
@click.option(
    "--quality",
    "-q",
    type=click.Choice([tier.value for tier in QualityTier]),
    default=QualityTier.MEDIUM.value,
    show_default=True,
    help="Palette quality (high is slower and larger)",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=DEFAULT_PATH_CONFIG.OUTPUT_DIR,
    show_default=True,
    help="Directory the GIF is written to",
)
@click.option(
    "--fit-to-source",
    is_flag=True,
    help="Shrink the window to fit when the video is shorter than requested",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Write a timestamped log file into this directory",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
)
def convert(
    video: Path,
    start: float,
    duration: float,
    width: int,
    fps: float,
    quality: str,
    output_dir: Path,
    fit_to_source: bool,
    log_dir: Path | None,
    log_level: str,
) -> None:
    """Convert part of a video into an animated GIF.

    VIDEO: Path to the source video file
    """
    try:
        if log_dir is not None:
            setup_logging(log_dir, log_level)

        display_common_header("GifClip conversion")
        display_path_info("Source", video, "🎬")

        try:
            job = ConversionJob(
                start_time=start,
                duration=duration,
                target_width=width,
                frame_rate=fps,
                quality_tier=QualityTier(quality),
            )
        except GifClipError as e:
            click.echo(f"❌ {e.kind.value}: {e}", err=True)
            raise SystemExit(1)

        converter = GifConverter()
        with tqdm(total=100, desc="Converting", unit="%", bar_format="{l_bar}{bar}| {n:.0f}%") as bar:

            def on_progress(fraction: float) -> None:
                bar.update(fraction * 100 - bar.n)

            outcome = converter.convert(
                video, job, on_progress=on_progress, fit_to_source=fit_to_source
            )

        if not outcome.succeeded:
            click.echo(f"❌ {outcome.error_kind.value}: {outcome.message}", err=True)
            raise SystemExit(1)

        result = outcome.result
        try:
            saved_path = result.save(output_dir)
        finally:
            result.artifact_handle.release()

        for warning in outcome.warnings:
            click.echo(f"⚠️  {warning}")

        click.echo("\n📊 Results:")
        click.echo(f"   • Frames: {outcome.frames_captured}")
        click.echo(f"   • Size: {format_file_size(result.byte_size)}")
        click.echo(f"   • Saved to: {saved_path}")
        click.echo("✅ Conversion completed successfully!")

    except KeyboardInterrupt:
        handle_keyboard_interrupt("Conversion")
    except SystemExit:
        raise
    except Exception as e:
        handle_generic_error("Conversion", e)
