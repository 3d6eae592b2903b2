"""Entry point the boundary layer uses to run one conversion at a time."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path

from .config import DEFAULT_CONVERSION_CONFIG, ConversionConfig
from .coordinator import EncoderFactory, SequentialCaptureCoordinator
from .encoders import PillowGifEncoder
from .error_handling import (
    GifClipError,
    JobInProgressError,
    MediaLoadError,
    error_context,
    log_info_with_context,
    log_warning_with_context,
)
from .finalizer import ResultFinalizer
from .handles import HandleRegistry, get_default_registry
from .input_validation import fit_job_to_source, validate_job, validate_source_file
from .job import ConversionJob, ConversionOutcome
from .progress import ProgressListener
from .sources import OpenCVVideoSource, VideoSource

logger = logging.getLogger(__name__)

SourceFactory = Callable[[Path], VideoSource]


class GifConverter:
    """Validates a job, runs the capture coordinator and finalizes the result.

    Only one job may run at a time per converter; a concurrent ``convert``
    call raises ``JobInProgressError`` immediately instead of waiting.
    """

    def __init__(
        self,
        source_factory: SourceFactory = OpenCVVideoSource,
        encoder_factory: EncoderFactory = PillowGifEncoder,
        config: ConversionConfig = DEFAULT_CONVERSION_CONFIG,
        registry: HandleRegistry | None = None,
        pause: Callable[[float], None] = time.sleep,
        check_source_file: bool = True,
    ):
        self.source_factory = source_factory
        self.encoder_factory = encoder_factory
        self.config = config
        self.registry = registry if registry is not None else get_default_registry()
        self.check_source_file = check_source_file
        self._pause = pause
        self._active = threading.Lock()

    @property
    def is_busy(self) -> bool:
        return self._active.locked()

    def convert(
        self,
        source_path: Path,
        job: ConversionJob,
        on_progress: ProgressListener | None = None,
        on_error: Callable[[ConversionOutcome], None] | None = None,
        fit_to_source: bool = False,
    ) -> ConversionOutcome:
        """Convert *job*'s window of *source_path* into a GIF.

        Returns a ConversionOutcome that either carries a ConversionResult or
        an error kind plus message. ``on_error`` is called once for a failed
        job; ``on_progress`` receives non-decreasing fractions in 0..1.
        """
        if not self._active.acquire(blocking=False):
            raise JobInProgressError("Another conversion is already running")

        source_path = Path(source_path)
        finalizer = ResultFinalizer(
            source_path.name, self.registry, self.config, on_error=on_error
        )
        preview = None
        try:
            try:
                if self.check_source_file:
                    validate_source_file(source_path, self.config)
                validate_job(job, self.config)
                if fit_to_source:
                    job = fit_job_to_source(job, self._read_duration(source_path), self.config)
            except GifClipError as e:
                return finalizer.fail(e)

            preview = finalizer.track(self.registry.allocate_reference(source_path))
            log_info_with_context(
                f"Converting {source_path.name}",
                context={
                    "start": job.start_time,
                    "duration": job.duration,
                    "width": job.target_width,
                    "fps": job.frame_rate,
                },
                logger=logger,
            )

            coordinator = SequentialCaptureCoordinator(
                job,
                self.source_factory(source_path),
                encoder_factory=self.encoder_factory,
                progress_listener=on_progress,
                config=self.config,
                pause=self._pause,
            )
            try:
                artifact = coordinator.run()
            except GifClipError as e:
                return finalizer.fail(
                    e,
                    frames_captured=coordinator.frames_forwarded,
                    frames_planned=len(coordinator.plan) if coordinator.plan is not None else 0,
                )

            outcome = finalizer.complete(
                artifact,
                frames_captured=coordinator.frames_forwarded,
                frames_planned=len(coordinator.plan),
            )
            if outcome.succeeded and coordinator.plan.is_truncated:
                warning = (
                    f"Source ended early: captured {len(coordinator.plan)} of "
                    f"{coordinator.plan.nominal_frames} requested frames"
                )
                log_warning_with_context(warning, context={"source": source_path.name}, logger=logger)
                outcome.warnings.append(warning)
            return outcome
        finally:
            if preview is not None:
                self.registry.release(preview)
            self._active.release()

    def _read_duration(self, source_path: Path) -> float:
        source = self.source_factory(source_path)
        try:
            with error_context("read video metadata", MediaLoadError, logger=logger):
                source.load()
            return source.total_duration
        finally:
            source.release()
