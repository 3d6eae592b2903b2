"""OpenCV-backed video source."""

from __future__ import annotations

import logging
from pathlib import Path

import cv2
import numpy as np

from ..error_handling import FrameCaptureError, MediaLoadError
from .base import VideoSource

logger = logging.getLogger(__name__)


class OpenCVVideoSource(VideoSource):
    """Reads frames from a video file through ``cv2.VideoCapture``.

    Seeking decodes the frame nearest to the requested timestamp and reports
    arrival synchronously; the decoded frame stays current until the next
    seek.
    """

    NAME = "opencv"

    def __init__(self, path: Path):
        super().__init__()
        self.path = Path(path)
        self._cap: cv2.VideoCapture | None = None
        self._fps = 0.0
        self._frame_count = 0
        self._width = 0
        self._height = 0
        self._current: np.ndarray | None = None

    def load(self) -> None:
        if not self.path.exists():
            raise MediaLoadError(f"Video file not found: {self.path}")

        cap = cv2.VideoCapture(str(self.path))
        if not cap.isOpened():
            cap.release()
            raise MediaLoadError(f"Failed to open video file: {self.path}")

        fps = float(cap.get(cv2.CAP_PROP_FPS) or 0.0)
        frame_count = int(cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0)
        width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
        height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)

        if fps <= 0 or frame_count <= 0 or width <= 0 or height <= 0:
            cap.release()
            raise MediaLoadError(
                f"Invalid video metadata for {self.path}: "
                f"fps={fps}, frames={frame_count}, size={width}x{height}"
            )

        self._cap = cap
        self._fps = fps
        self._frame_count = frame_count
        self._width = width
        self._height = height
        logger.debug(
            f"Loaded {self.path.name}: {width}x{height}, {frame_count} frames @ {fps:.2f} fps"
        )

    @property
    def fps(self) -> float:
        return self._fps

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def total_duration(self) -> float:
        if self._fps <= 0:
            return 0.0
        return self._frame_count / self._fps

    @property
    def frame_size(self) -> tuple[int, int]:
        return (self._width, self._height)

    def frame_index_for(self, timestamp: float) -> int:
        """Index of the frame shown at *timestamp*, clamped to the last frame."""
        index = int(round(max(0.0, timestamp) * self._fps))
        return min(index, self._frame_count - 1)

    def seek_to(self, timestamp: float, request_id: int) -> None:
        if self._cap is None:
            raise MediaLoadError("Video source used before load()")

        index = self.frame_index_for(timestamp)
        self._cap.set(cv2.CAP_PROP_POS_FRAMES, index)
        ok, frame = self._cap.read()
        if not ok or frame is None:
            raise MediaLoadError(
                f"Failed to decode frame {index} (t={timestamp:.3f}s) from {self.path}"
            )

        self._current = frame
        self.notify_seeked(request_id)

    def current_raster_frame(self, width: int, height: int) -> np.ndarray:
        if self._current is None:
            raise FrameCaptureError("No decoded frame at the current position")

        frame = self._current
        if (frame.shape[1], frame.shape[0]) != (width, height):
            frame = cv2.resize(frame, (width, height), interpolation=cv2.INTER_AREA)
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    def release(self) -> None:
        super().release()
        self._current = None
        if self._cap is not None:
            self._cap.release()
            self._cap = None
