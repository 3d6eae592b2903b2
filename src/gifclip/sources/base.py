"""Video source contract consumed by the capture coordinator.

A source is seek-based and stateful: ``seek_to`` positions it and the
arrival is reported once, through the listener registered with
``on_seeked``, carrying the request id the seek was issued with. Sources may
report synchronously (from inside ``seek_to``) or later from another thread.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

import numpy as np

SeekListener = Callable[[int], None]


class VideoSource(ABC):
    """Common behaviour for any seekable video source.

    Sub-classes should *not* open anything in the constructor; ``load`` does
    the work and raises ``MediaLoadError`` when the media cannot be decoded.
    """

    #: Human-readable name used in logs
    NAME: str = "video-source"

    def __init__(self) -> None:
        self._seek_listener: SeekListener | None = None

    def on_seeked(self, listener: SeekListener | None) -> None:
        """Register the single arrival listener (``None`` detaches it)."""
        self._seek_listener = listener

    def notify_seeked(self, request_id: int) -> None:
        """Report that the seek issued as *request_id* has arrived."""
        listener = self._seek_listener
        if listener is not None:
            listener(request_id)

    @abstractmethod
    def load(self) -> None:
        """Open the media and read its metadata."""

    @property
    @abstractmethod
    def total_duration(self) -> float:
        """Length of the media in seconds (valid after ``load``)."""

    @property
    @abstractmethod
    def frame_size(self) -> tuple[int, int]:
        """Native ``(width, height)`` of the video (valid after ``load``)."""

    @abstractmethod
    def seek_to(self, timestamp: float, request_id: int) -> None:
        """Start positioning at *timestamp*; arrival is reported via ``notify_seeked``."""

    @abstractmethod
    def current_raster_frame(self, width: int, height: int) -> np.ndarray:
        """Return the frame at the current position as ``(height, width, 3)`` RGB uint8."""

    def release(self) -> None:
        """Free decoder resources. Safe to call more than once."""
        self._seek_listener = None
