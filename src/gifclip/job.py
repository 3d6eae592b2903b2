"""Data model for a single video-to-GIF conversion job."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from .error_handling import ErrorKind, InvalidInputError
from .quality import QualityTier

if TYPE_CHECKING:
    from .handles import ArtifactHandle


class JobState(Enum):
    """Lifecycle of a conversion job. SUCCEEDED and FAILED are terminal."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.FAILED)


def round_half_up(value: float) -> int:
    """Round halves away from zero for positive values (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def frame_delay_ms(frame_rate: float) -> int:
    """Presentation delay of one frame in milliseconds."""
    return round_half_up(1000.0 / frame_rate)


@dataclass(frozen=True)
class ConversionJob:
    """Parameters of one conversion. Immutable once created.

    Attributes:
        start_time: Offset into the source in seconds (>= 0)
        duration: Length of the captured window in seconds (> 0)
        target_width: Output width in pixels (>= 1); height follows the source aspect
        frame_rate: Output frames per second (> 0)
        quality_tier: Named quality tier; unknown strings are tolerated
    """

    start_time: float
    duration: float
    target_width: int
    frame_rate: float
    quality_tier: QualityTier | str = QualityTier.MEDIUM

    def __post_init__(self) -> None:
        problems = []
        if not math.isfinite(self.start_time) or self.start_time < 0:
            problems.append(f"start_time must be >= 0, got {self.start_time}")
        if not math.isfinite(self.duration) or self.duration <= 0:
            problems.append(f"duration must be positive, got {self.duration}")
        if self.target_width < 1:
            problems.append(f"target_width must be at least 1, got {self.target_width}")
        if not math.isfinite(self.frame_rate) or self.frame_rate <= 0:
            problems.append(f"frame_rate must be positive, got {self.frame_rate}")

        if problems:
            raise InvalidInputError("Invalid conversion job: " + "; ".join(problems))

    @property
    def nominal_frame_count(self) -> int:
        """Frames requested before any truncation against the source length."""
        return math.floor(self.duration * self.frame_rate)

    @property
    def frame_delay_ms(self) -> int:
        return frame_delay_ms(self.frame_rate)


@dataclass
class CapturedFrame:
    """One rasterised frame on its way to the encoder."""

    pixels: np.ndarray
    width: int
    height: int
    presentation_delay_ms: int


@dataclass(frozen=True)
class ConversionResult:
    """Finished artifact metadata handed back to the caller."""

    artifact_handle: ArtifactHandle
    byte_size: int
    suggested_file_name: str

    @property
    def size_mb(self) -> float:
        return round(self.byte_size / (1024 * 1024), 2)

    def read_bytes(self) -> bytes:
        return self.artifact_handle.read_bytes()

    def save(self, directory: Path, file_name: str | None = None) -> Path:
        """Write the artifact into *directory* atomically and return its path."""
        from .io import atomic_write

        target = Path(directory) / (file_name or self.suggested_file_name)
        with atomic_write(target, mode="wb") as f:
            f.write(self.read_bytes())
        return target


@dataclass
class ConversionOutcome:
    """Terminal report of a job: either a result or an error kind plus message."""

    state: JobState
    result: ConversionResult | None = None
    error_kind: ErrorKind | None = None
    message: str = ""
    frames_captured: int = 0
    frames_planned: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state is JobState.SUCCEEDED
