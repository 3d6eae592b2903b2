"""Checks run at the boundary, before a conversion job is started.

Nothing here touches the capture pipeline: a job that fails these checks is
reported without a video source or encoder ever being created.
"""

from __future__ import annotations

import mimetypes
from dataclasses import replace
from pathlib import Path

from .config import DEFAULT_CONVERSION_CONFIG, ConversionConfig
from .error_handling import (
    InvalidInputError,
    SizeLimitExceededError,
    UnsupportedMediaTypeError,
)
from .io import format_file_size
from .job import ConversionJob

# Containers that mimetypes does not know on every platform
_EXTRA_VIDEO_TYPES = {
    ".mkv": "video/x-matroska",
    ".webm": "video/webm",
    ".m4v": "video/x-m4v",
    ".mov": "video/quicktime",
}


def guess_media_type(path: Path) -> str | None:
    """Best-effort MIME type for *path* based on its name."""
    media_type, _ = mimetypes.guess_type(str(path))
    if media_type is None:
        media_type = _EXTRA_VIDEO_TYPES.get(Path(path).suffix.lower())
    return media_type


def validate_media_type(path: Path) -> str:
    """Ensure *path* names a video file and return its MIME type.

    Raises:
        UnsupportedMediaTypeError: If the file is not recognised as ``video/*``
    """
    media_type = guess_media_type(path)
    if media_type is None or not media_type.startswith("video/"):
        raise UnsupportedMediaTypeError(
            f"Not a video file: {Path(path).name} (type: {media_type or 'unknown'})"
        )
    return media_type


def validate_file_size(
    path: Path, config: ConversionConfig = DEFAULT_CONVERSION_CONFIG
) -> int:
    """Ensure *path* exists and is within the size limit; return its size in bytes.

    Raises:
        InvalidInputError: If the file does not exist
        SizeLimitExceededError: If the file is larger than ``MAX_FILE_SIZE_MB``
    """
    path = Path(path)
    if not path.is_file():
        raise InvalidInputError(f"Video file not found: {path}")

    size = path.stat().st_size
    if size > config.max_file_size_bytes:
        raise SizeLimitExceededError(
            f"File is too large ({format_file_size(size)}); "
            f"the limit is {config.MAX_FILE_SIZE_MB:g} MB"
        )
    return size


def validate_source_file(
    path: Path, config: ConversionConfig = DEFAULT_CONVERSION_CONFIG
) -> Path:
    """Run every source-file precheck and return the path."""
    validate_media_type(path)
    validate_file_size(path, config)
    return Path(path)


def validate_job(
    job: ConversionJob, config: ConversionConfig = DEFAULT_CONVERSION_CONFIG
) -> ConversionJob:
    """Apply the boundary's parameter rules on top of the job's own invariants.

    Raises:
        InvalidInputError: If the width is below ``MIN_TARGET_WIDTH`` or the
            job would produce no frames at all
    """
    if job.target_width < config.MIN_TARGET_WIDTH:
        raise InvalidInputError(
            f"Width must be at least {config.MIN_TARGET_WIDTH}px, got {job.target_width}"
        )
    if job.nominal_frame_count < 1:
        raise InvalidInputError(
            f"{job.duration}s at {job.frame_rate} fps yields no frames"
        )
    return job


def fit_job_to_source(
    job: ConversionJob,
    source_duration: float,
    config: ConversionConfig = DEFAULT_CONVERSION_CONFIG,
) -> ConversionJob:
    """Pull a job's window back inside a source of *source_duration* seconds.

    A duration longer than the source falls back to
    ``min(DEFAULT_DURATION_S, source_duration)`` and the start is capped at
    ``source_duration - 0.1``. Jobs that already fit are returned unchanged.
    """
    if source_duration <= 0:
        raise InvalidInputError(f"Source duration must be positive, got {source_duration}")

    duration = job.duration
    if duration > source_duration:
        duration = min(config.DEFAULT_DURATION_S, source_duration)

    start_time = min(job.start_time, max(0.0, source_duration - 0.1))

    if duration == job.duration and start_time == job.start_time:
        return job
    return replace(job, start_time=start_time, duration=duration)
