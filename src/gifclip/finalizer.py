"""Turns the encoder's output, or a failure, into the job's terminal report."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from pathlib import PurePath

from .config import DEFAULT_CONVERSION_CONFIG, ConversionConfig
from .error_handling import EncodingError, as_gifclip_error, clean_error_message
from .handles import ArtifactHandle, HandleRegistry
from .job import ConversionOutcome, ConversionResult, JobState

logger = logging.getLogger(__name__)

_EXTENSION_RE = re.compile(r"\.[A-Za-z0-9]{1,4}$")

FALLBACK_STEM = "video"


def strip_extensions(file_name: str) -> str:
    """Remove every trailing extension-like suffix (``a.tar.gz`` -> ``a``).

    Directory components are dropped first. Applying this twice gives the
    same result as applying it once.
    """
    stem = PurePath(file_name).name
    while True:
        stripped = _EXTENSION_RE.sub("", stem)
        if stripped == stem or not stripped:
            break
        stem = stripped
    return stem


def suggest_file_name(
    source_name: str,
    suffix: str = DEFAULT_CONVERSION_CONFIG.OUTPUT_SUFFIX,
    extension: str = DEFAULT_CONVERSION_CONFIG.OUTPUT_EXTENSION,
) -> str:
    """Download name for the GIF made from *source_name*.

    >>> suggest_file_name("holiday.mp4")
    'holiday_converted.gif'
    """
    stem = strip_extensions(source_name)
    if not stem or _EXTENSION_RE.fullmatch(stem):
        stem = FALLBACK_STEM
    return f"{stem}{suffix}{extension}"


class ResultFinalizer:
    """Produces exactly one terminal outcome per job.

    ``complete`` stores the artifact behind a handle and reports success;
    ``fail`` reports the error kind, releases the transient handles it was
    given and produces no artifact. Whichever is called first wins; a second
    call raises ``RuntimeError``.
    """

    def __init__(
        self,
        source_name: str,
        registry: HandleRegistry,
        config: ConversionConfig = DEFAULT_CONVERSION_CONFIG,
        on_result: Callable[[ConversionResult], None] | None = None,
        on_error: Callable[[ConversionOutcome], None] | None = None,
    ):
        self.source_name = source_name
        self.registry = registry
        self.config = config
        self.state = JobState.RUNNING
        self._on_result = on_result
        self._on_error = on_error
        self._transient: list[ArtifactHandle] = []

    def track(self, handle: ArtifactHandle) -> ArtifactHandle:
        """Register a handle to be released if the job fails."""
        self._transient.append(handle)
        return handle

    def complete(
        self, artifact: bytes, frames_captured: int = 0, frames_planned: int = 0
    ) -> ConversionOutcome:
        self._ensure_open()

        if not artifact:
            return self.fail(
                EncodingError("Encoder produced an empty artifact"),
                frames_captured=frames_captured,
                frames_planned=frames_planned,
            )

        try:
            handle = self.registry.allocate_bytes(
                artifact, kind="artifact", suffix=self.config.OUTPUT_EXTENSION
            )
        except Exception as e:
            return self.fail(
                EncodingError("Could not store the encoded GIF", cause=e),
                frames_captured=frames_captured,
                frames_planned=frames_planned,
            )

        result = ConversionResult(
            artifact_handle=handle,
            byte_size=len(artifact),
            suggested_file_name=suggest_file_name(
                self.source_name, self.config.OUTPUT_SUFFIX, self.config.OUTPUT_EXTENSION
            ),
        )
        self.state = JobState.SUCCEEDED
        logger.info(
            f"✅ Created {result.suggested_file_name} ({result.byte_size} bytes, "
            f"{frames_captured} frames)"
        )

        if self._on_result is not None:
            self._on_result(result)

        return ConversionOutcome(
            state=JobState.SUCCEEDED,
            result=result,
            frames_captured=frames_captured,
            frames_planned=frames_planned,
        )

    def fail(
        self, error: Exception, frames_captured: int = 0, frames_planned: int = 0
    ) -> ConversionOutcome:
        self._ensure_open()

        gifclip_error = as_gifclip_error(error)
        self.state = JobState.FAILED

        released = 0
        for handle in self._transient:
            if self.registry.release(handle):
                released += 1
        self._transient.clear()

        outcome = ConversionOutcome(
            state=JobState.FAILED,
            error_kind=gifclip_error.kind,
            message=clean_error_message(str(gifclip_error)),
            frames_captured=frames_captured,
            frames_planned=frames_planned,
        )
        kind_name = outcome.error_kind.value if outcome.error_kind else "Error"
        logger.error(
            f"❌ Conversion of {self.source_name} failed ({kind_name}): {outcome.message}"
        )
        if released:
            logger.debug(f"Released {released} transient handle(s)")

        if self._on_error is not None:
            self._on_error(outcome)

        return outcome

    def _ensure_open(self) -> None:
        if self.state.is_terminal:
            raise RuntimeError(f"Job already finalized as {self.state.value}")
