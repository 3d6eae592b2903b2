"""CLI module for GifClip commands."""

import click

from .. import __version__
from .convert_cmd import convert
from .probe_cmd import probe


@click.group()
@click.version_option(version=__version__, prog_name="gifclip")
def main() -> None:
    """🎞️ GifClip: turn video clips into animated GIFs."""
    pass


main.add_command(convert)
main.add_command(probe)

__all__ = [
    "convert",
    "main",
    "probe",
]
