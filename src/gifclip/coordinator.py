"""Sequential seek -> capture -> forward loop driving one conversion job.

The coordinator owns the video source and the encoder for the lifetime of a
job. Frames are captured strictly in plan order with at most one seek in
flight; each seek is tagged with a fresh request id and only the arrival
carrying that id resumes the loop, so a late notification from an earlier
step can never be taken for the current one.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from enum import Enum
from typing import Any

from .config import DEFAULT_CONVERSION_CONFIG, ConversionConfig
from .encoders import ERROR, FINISHED, PROGRESS, EncoderSettings, FrameEncoder, PillowGifEncoder
from .error_handling import (
    EncodingError,
    FrameCaptureError,
    GifClipError,
    InvalidInputError,
    MediaLoadError,
    as_gifclip_error,
    error_context,
    safe_operation,
)
from .job import CapturedFrame, ConversionJob, round_half_up
from .progress import ProgressAggregator, ProgressListener
from .quality import quality_parameter
from .sampling import FramePlan, plan_frame_times
from .sources import VideoSource

logger = logging.getLogger(__name__)

EncoderFactory = Callable[[EncoderSettings], FrameEncoder]


class CaptureState(Enum):
    """Coordinator state machine. FINISHED and FAILED are terminal."""

    IDLE = "idle"
    LOADING = "loading"
    CAPTURING = "capturing"
    RENDERING = "rendering"
    FINISHED = "finished"
    FAILED = "failed"


class SeekGate:
    """One-shot wait for the arrival of a specific seek request."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._generation = 0
        self._armed: int | None = None
        self._arrived = False

    @property
    def generation(self) -> int:
        return self._generation

    def arm(self) -> int:
        """Start a new request and return its id."""
        with self._cond:
            self._generation += 1
            self._armed = self._generation
            self._arrived = False
            return self._generation

    def notify(self, request_id: int) -> bool:
        """Deliver an arrival. Returns False if it was stale or a duplicate."""
        with self._cond:
            if request_id != self._armed or self._arrived:
                logger.debug(
                    f"Ignoring seek notification {request_id} (waiting for {self._armed})"
                )
                return False
            self._arrived = True
            self._cond.notify_all()
            return True

    def wait(self, timeout: float | None) -> bool:
        """Block until the armed request arrives; False on timeout."""
        with self._cond:
            arrived = self._cond.wait_for(lambda: self._arrived, timeout)
            if arrived:
                self._armed = None
            return arrived


class _EncoderOutcome:
    """Captures the first ``finished`` or ``error`` event from the encoder."""

    def __init__(self) -> None:
        self._done = threading.Event()
        self.data: bytes | None = None
        self.error: Exception | None = None

    def finished(self, data: bytes) -> None:
        if not self._done.is_set():
            self.data = data
            self._done.set()

    def failed(self, error: Any) -> None:
        if not self._done.is_set():
            self.error = error if isinstance(error, Exception) else RuntimeError(str(error))
            self._done.set()

    def wait(self, timeout: float | None) -> bool:
        return self._done.wait(timeout)


class SequentialCaptureCoordinator:
    """Captures every planned frame of *job* from *source* and encodes them.

    Usage:
        coordinator = SequentialCaptureCoordinator(job, OpenCVVideoSource(path))
        gif_bytes = coordinator.run()

    ``run`` returns the encoded bytes or raises a GifClipError whose ``kind``
    tells the caller what went wrong. Nothing is retried.
    """

    def __init__(
        self,
        job: ConversionJob,
        source: VideoSource,
        encoder_factory: EncoderFactory = PillowGifEncoder,
        progress_listener: ProgressListener | None = None,
        config: ConversionConfig = DEFAULT_CONVERSION_CONFIG,
        pause: Callable[[float], None] = time.sleep,
    ):
        self.job = job
        self.source = source
        self.encoder_factory = encoder_factory
        self.config = config
        self.state = CaptureState.IDLE

        self.plan: FramePlan | None = None
        self.progress: ProgressAggregator | None = None
        self.encoder: FrameEncoder | None = None
        self.width = job.target_width
        self.height = 0
        self.frames_forwarded = 0

        self._progress_listener = progress_listener
        self._pause = pause
        self._seek_gate = SeekGate()
        self._outcome = _EncoderOutcome()

    def run(self) -> bytes:
        if self.state is not CaptureState.IDLE:
            raise RuntimeError("A coordinator runs a single job; create a new one")

        try:
            self._load_source()
            self._prepare()
            self._capture_all()
            return self._render()
        except GifClipError as e:
            self.state = CaptureState.FAILED
            logger.debug(f"Job failed in {self._failure_phase()} with {type(e).__name__}")
            raise
        except Exception as e:
            self.state = CaptureState.FAILED
            raise as_gifclip_error(e, FrameCaptureError) from e
        finally:
            self.source.on_seeked(None)
            safe_operation(
                self.source.release, f"release {self.source.NAME} source", logger=logger
            )

    def _failure_phase(self) -> str:
        return f"step {self.frames_forwarded + 1}" if self.plan is not None else "setup"

    def _load_source(self) -> None:
        self.state = CaptureState.LOADING
        with error_context("load video source", MediaLoadError, logger=logger):
            self.source.load()
        self.source.on_seeked(self._seek_gate.notify)

    def _prepare(self) -> None:
        source_width, source_height = self.source.frame_size
        if source_width <= 0 or source_height <= 0:
            raise MediaLoadError(f"Source reported an invalid frame size {source_width}x{source_height}")
        self.height = max(1, round_half_up(self.width * source_height / source_width))

        self.plan = plan_frame_times(
            self.job.start_time,
            self.job.duration,
            self.job.frame_rate,
            self.source.total_duration,
        )
        self.progress = ProgressAggregator(self.plan.total_frames, self._progress_listener)

        if self.plan.is_empty:
            raise InvalidInputError(
                f"No frames to capture: start {self.job.start_time}s is past the end "
                f"of the source ({self.source.total_duration:.3f}s)"
            )

        settings = EncoderSettings(
            worker_count=self.config.WORKER_COUNT,
            quality=quality_parameter(self.job.quality_tier),
            width=self.width,
            height=self.height,
            loop=self.config.LOOP_COUNT,
        )
        with error_context("create encoder", EncodingError, logger=logger):
            self.encoder = self.encoder_factory(settings)
        self.encoder.on(PROGRESS, self.progress.encoder_progress)
        self.encoder.on(FINISHED, self._outcome.finished)
        self.encoder.on(ERROR, self._outcome.failed)

        logger.info(
            f"Capturing {self.plan.total_frames} frames at {self.width}x{self.height} "
            f"(quality={settings.quality}, truncated={self.plan.is_truncated})"
        )

    def _capture_all(self) -> None:
        self.state = CaptureState.CAPTURING
        delay_ms = self.job.frame_delay_ms
        total = self.plan.total_frames

        for index, timestamp in enumerate(self.plan):
            self._capture_step(index, timestamp, delay_ms)
            self.frames_forwarded += 1
            self.progress.frame_captured()

            if self._outcome.error is not None:
                raise EncodingError(
                    "Encoder failed while frames were being captured",
                    cause=self._outcome.error,
                )

            if index + 1 < total:
                self._pause(self.config.inter_frame_pause_s)

    def _capture_step(self, index: int, timestamp: float, delay_ms: int) -> None:
        operation = f"capture frame {index + 1}/{self.plan.total_frames}"
        with error_context(
            operation,
            FrameCaptureError,
            context={"timestamp": round(timestamp, 3)},
            logger=logger,
        ):
            request_id = self._seek_gate.arm()
            self.source.seek_to(timestamp, request_id)
            if not self._seek_gate.wait(self.config.SEEK_TIMEOUT_S):
                raise MediaLoadError(
                    f"Seek to {timestamp:.3f}s did not complete within "
                    f"{self.config.SEEK_TIMEOUT_S}s"
                )

            frame = CapturedFrame(
                pixels=self.source.current_raster_frame(self.width, self.height),
                width=self.width,
                height=self.height,
                presentation_delay_ms=delay_ms,
            )
            self.encoder.add_frame(frame.pixels, frame.presentation_delay_ms)
            del frame

        logger.debug(f"Forwarded frame {index + 1} at t={timestamp:.3f}s")

    def _render(self) -> bytes:
        self.state = CaptureState.RENDERING
        with error_context("render GIF", EncodingError, logger=logger):
            self.encoder.render()

        if not self._outcome.wait(self.config.ENCODE_TIMEOUT_S):
            raise EncodingError(
                f"Encoder did not finish within {self.config.ENCODE_TIMEOUT_S}s"
            )
        if self._outcome.error is not None:
            raise EncodingError(
                "Encoder reported a failure",
                cause=self._outcome.error,
            )

        if self._outcome.data is None:
            raise EncodingError("Encoder finished without producing an artifact")

        self.progress.complete()
        self.state = CaptureState.FINISHED
        return self._outcome.data
