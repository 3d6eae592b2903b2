"""Combined progress reporting across the capture and encode phases."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Share of the overall fraction given to each phase. Capture dominates the
# wall-clock time of a job; final GIF assembly is comparatively cheap.
CAPTURE_WEIGHT = 0.8
ENCODE_WEIGHT = 0.2

ProgressListener = Callable[[float], None]


def _clamp_fraction(value: float) -> float:
    if value != value:  # NaN
        return 0.0
    return min(1.0, max(0.0, float(value)))


@dataclass
class ProgressState:
    """Raw progress counters for one job."""

    frames_captured: int = 0
    total_frames: int = 0
    encoder_fraction: float = 0.0

    @property
    def capture_fraction(self) -> float:
        if self.total_frames <= 0:
            return 1.0
        return _clamp_fraction(self.frames_captured / self.total_frames)


class ProgressAggregator:
    """Folds frame captures and encoder ticks into one monotonic fraction.

    The reported value is ``capture * 0.8 + encoder * 0.2`` and never moves
    backwards within a job. Listeners are called only when the value grows.
    """

    def __init__(self, total_frames: int, listener: ProgressListener | None = None):
        if total_frames < 0:
            raise ValueError(f"total_frames must be non-negative, got {total_frames}")
        self._state = ProgressState(total_frames=total_frames)
        self._fraction = 0.0
        self._listeners: list[ProgressListener] = []
        self._lock = threading.Lock()
        # Held while listeners run so they see values in the order accepted
        self._publish_lock = threading.RLock()
        if listener is not None:
            self._listeners.append(listener)

    @property
    def state(self) -> ProgressState:
        return ProgressState(
            frames_captured=self._state.frames_captured,
            total_frames=self._state.total_frames,
            encoder_fraction=self._state.encoder_fraction,
        )

    @property
    def fraction(self) -> float:
        return self._fraction

    def frame_captured(self) -> float:
        """Record one forwarded frame and return the combined fraction."""
        with self._lock:
            if self._state.frames_captured < self._state.total_frames:
                self._state.frames_captured += 1
            else:
                logger.warning(
                    f"⚠️  Frame count already at plan length ({self._state.total_frames}); ignoring"
                )
        return self._publish()

    def encoder_progress(self, fraction: float) -> float:
        """Record an encoder tick (0..1) and return the combined fraction."""
        clamped = _clamp_fraction(fraction)
        if clamped != fraction:
            logger.debug(f"Encoder progress {fraction!r} clamped to {clamped}")
        with self._lock:
            self._state.encoder_fraction = max(self._state.encoder_fraction, clamped)
        return self._publish()

    def complete(self) -> float:
        """Mark both phases finished."""
        with self._lock:
            self._state.frames_captured = self._state.total_frames
            self._state.encoder_fraction = 1.0
        return self._publish()

    def combined_fraction(self) -> float:
        """Fraction computed from the raw counters, without the monotonic guard."""
        return _clamp_fraction(
            self._state.capture_fraction * CAPTURE_WEIGHT
            + self._state.encoder_fraction * ENCODE_WEIGHT
        )

    def _publish(self) -> float:
        with self._publish_lock:
            with self._lock:
                candidate = self.combined_fraction()
                if candidate <= self._fraction:
                    return self._fraction
                self._fraction = candidate
                listeners = list(self._listeners)

            for listener in listeners:
                listener(candidate)
            return candidate
