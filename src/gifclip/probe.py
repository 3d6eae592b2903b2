"""Metadata extraction for source videos."""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from .sources import OpenCVVideoSource


@dataclass
class VideoMetadata:
    """Metadata read from a video file."""

    file_name: str
    width: int
    height: int
    fps: float
    frame_count: int
    duration: float
    byte_size: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def probe_video(file_path: Path) -> VideoMetadata:
    """Extract metadata from a video file.

    Args:
        file_path: Path to the video file

    Returns:
        VideoMetadata object with extracted information

    Raises:
        MediaLoadError: If the file cannot be opened or decoded
    """
    file_path = Path(file_path)
    source = OpenCVVideoSource(file_path)
    source.load()
    try:
        width, height = source.frame_size
        return VideoMetadata(
            file_name=file_path.name,
            width=width,
            height=height,
            fps=round(source.fps, 3),
            frame_count=source.frame_count,
            duration=round(source.total_duration, 3),
            byte_size=file_path.stat().st_size,
        )
    finally:
        source.release()
