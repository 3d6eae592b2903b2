"""Frame timing plan: which source timestamps become GIF frames."""

import logging
import math
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FramePlan:
    """Ordered capture timestamps for one job."""

    timestamps: tuple[float, ...]  # Seconds into the source, strictly increasing
    nominal_frames: int  # floor(duration * frame_rate) before truncation
    frame_rate: float

    def __len__(self) -> int:
        return len(self.timestamps)

    def __iter__(self):
        return iter(self.timestamps)

    def __getitem__(self, index: int) -> float:
        return self.timestamps[index]

    @property
    def total_frames(self) -> int:
        """Number of frames that will actually be captured."""
        return len(self.timestamps)

    @property
    def is_empty(self) -> bool:
        return not self.timestamps

    @property
    def is_truncated(self) -> bool:
        """True if the source ended before the requested window did."""
        return len(self.timestamps) < self.nominal_frames

    @property
    def span(self) -> tuple[float, float] | None:
        if not self.timestamps:
            return None
        return (self.timestamps[0], self.timestamps[-1])


def plan_frame_times(
    start_time: float,
    duration: float,
    frame_rate: float,
    source_duration: float,
) -> FramePlan:
    """Compute the timestamps to sample for a job.

    Timestamps are ``start_time + i / frame_rate`` for
    ``i in range(floor(duration * frame_rate))``. Planning stops at the first
    timestamp past ``source_duration``; a source shorter than the requested
    window yields a shorter plan, not an error. A start at or past the end of
    the source yields an empty plan.

    Args:
        start_time: First timestamp in seconds
        duration: Requested window length in seconds
        frame_rate: Frames per second
        source_duration: Total length of the source in seconds

    Returns:
        FramePlan with the ordered timestamps

    Raises:
        ValueError: If duration or frame_rate is not positive, or start_time is negative
    """
    if duration <= 0:
        raise ValueError(f"duration must be positive, got {duration}")
    if frame_rate <= 0:
        raise ValueError(f"frame_rate must be positive, got {frame_rate}")
    if start_time < 0:
        raise ValueError(f"start_time must be non-negative, got {start_time}")

    nominal_frames = math.floor(duration * frame_rate)

    timestamps = []
    if start_time < source_duration:
        for i in range(nominal_frames):
            t = start_time + i / frame_rate
            if t > source_duration:
                break
            timestamps.append(t)

    if len(timestamps) < nominal_frames:
        logger.debug(
            f"Frame plan truncated to {len(timestamps)}/{nominal_frames} frames "
            f"(source ends at {source_duration:.3f}s)"
        )

    return FramePlan(
        timestamps=tuple(timestamps),
        nominal_frames=nominal_frames,
        frame_rate=frame_rate,
    )
