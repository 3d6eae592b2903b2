"""Show the metadata GifClip reads from a video."""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from ..error_handling import GifClipError
from ..io import format_file_size
from ..probe import probe_video
from .utils import handle_generic_error

console = Console()


@click.command()
@click.argument(
    "video",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--json", "output_json", is_flag=True, help="Output metadata as JSON")
def probe(video: Path, output_json: bool) -> None:
    """Print size, frame rate and duration of VIDEO."""
    try:
        metadata = probe_video(video)
    except GifClipError as e:
        click.echo(f"❌ {e.kind.value}: {e}", err=True)
        raise SystemExit(1)
    except Exception as e:
        handle_generic_error("Probe", e)
        return

    if output_json:
        click.echo(json.dumps(metadata.to_dict(), indent=2))
        return

    table = Table(title=f"🎬 {metadata.file_name}")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Resolution", f"{metadata.width}x{metadata.height}")
    table.add_row("Frame rate", f"{metadata.fps:g} fps")
    table.add_row("Frames", str(metadata.frame_count))
    table.add_row("Duration", f"{metadata.duration:.2f}s")
    table.add_row("File size", format_file_size(metadata.byte_size))
    console.print(table)
