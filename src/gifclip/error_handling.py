"""Standardized Error Handling Utilities

Provides the error kinds a conversion job can fail with, plus consistent
error handling patterns used across the GifClip codebase.
"""

from __future__ import annotations

import logging
import re
import traceback
from collections.abc import Callable
from contextlib import contextmanager
from enum import Enum
from typing import Any


class ErrorLevel(Enum):
    """Error severity levels for consistent logging."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorKind(Enum):
    """Terminal failure kinds reported to the caller of a conversion."""

    INVALID_INPUT = "InvalidInput"
    UNSUPPORTED_MEDIA_TYPE = "UnsupportedMediaType"
    SIZE_LIMIT_EXCEEDED = "SizeLimitExceeded"
    MEDIA_LOAD_ERROR = "MediaLoadError"
    FRAME_CAPTURE_ERROR = "FrameCaptureError"
    ENCODING_ERROR = "EncodingError"


class GifClipError(Exception):
    """Base exception class for all GifClip errors."""

    kind: ErrorKind | None = None

    def __init__(
        self, message: str, cause: Exception | None = None, context: dict | None = None
    ):
        super().__init__(message)
        self.cause = cause
        self.context = context or {}

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.cause:
            return f"{base_msg} (caused by: {self.cause})"
        return base_msg


class InvalidInputError(GifClipError):
    """Raised when job parameters are unusable or the frame plan is empty."""

    kind = ErrorKind.INVALID_INPUT


class UnsupportedMediaTypeError(GifClipError):
    """Raised when the source file is not a video."""

    kind = ErrorKind.UNSUPPORTED_MEDIA_TYPE


class SizeLimitExceededError(GifClipError):
    """Raised when the source file is larger than the configured limit."""

    kind = ErrorKind.SIZE_LIMIT_EXCEEDED


class MediaLoadError(GifClipError):
    """Raised when the video source fails to open, decode or seek."""

    kind = ErrorKind.MEDIA_LOAD_ERROR


class FrameCaptureError(GifClipError):
    """Raised when capturing or forwarding a frame fails."""

    kind = ErrorKind.FRAME_CAPTURE_ERROR


class EncodingError(GifClipError):
    """Raised when the encoder reports a failure."""

    kind = ErrorKind.ENCODING_ERROR


class JobInProgressError(GifClipError):
    """Raised when a conversion is started while another one is active."""

    pass


def handle_error(
    error: Exception,
    operation: str,
    error_type: type[GifClipError] = FrameCaptureError,
    level: ErrorLevel = ErrorLevel.ERROR,
    context: dict | None = None,
    logger: logging.Logger | None = None,
    reraise: bool = True,
) -> GifClipError | None:
    """Standardized error handling with consistent logging and error transformation.

    Args:
        error: Original exception that occurred
        operation: Description of operation that failed
        error_type: Type of GifClipError to raise
        level: Logging level for the error
        context: Additional context information
        logger: Logger to use (defaults to module logger)
        reraise: Whether to reraise the transformed exception

    Returns:
        The transformed error if reraise=False, otherwise None

    Raises:
        GifClipError: Transformed error if reraise=True
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    message = f"Failed to {operation}: {error}"

    error_context = dict(context or {})
    error_context.update(
        {
            "operation": operation,
            "original_error_type": type(error).__name__,
        }
    )

    transformed_error = error_type(message, context=error_context)
    transformed_error.cause = None if isinstance(error, GifClipError) else error

    log_message = f"🚨 {operation.capitalize()} failed: {error}"
    context_str = ", ".join(
        f"{k}={v}" for k, v in error_context.items() if k != "operation"
    )
    if context_str:
        log_message += f" (context: {context_str})"

    log_func = getattr(logger, level.value)
    log_func(log_message)

    if level in [ErrorLevel.ERROR, ErrorLevel.CRITICAL]:
        logger.debug(f"Traceback for {operation}: {traceback.format_exc()}")

    if reraise:
        raise transformed_error from error
    return transformed_error


@contextmanager
def error_context(
    operation: str,
    error_type: type[GifClipError] = FrameCaptureError,
    level: ErrorLevel = ErrorLevel.ERROR,
    context: dict | None = None,
    logger: logging.Logger | None = None,
) -> Any:
    """Context manager for standardized error handling.

    Usage:
        with error_context("capture frame", FrameCaptureError, context={'index': 3}):
            risky_operation()

    GifClip errors raised inside the block keep their own kind; anything else
    is transformed into ``error_type``.
    """
    try:
        yield
    except GifClipError:
        raise
    except Exception as e:
        handle_error(e, operation, error_type, level, context, logger, reraise=True)


def as_gifclip_error(
    error: Exception, default_type: type[GifClipError] = FrameCaptureError
) -> GifClipError:
    """Return *error* unchanged if it is a GifClipError, else wrap it."""
    if isinstance(error, GifClipError):
        return error
    return default_type(str(error) or type(error).__name__, cause=error)


def log_warning_with_context(
    message: str, context: dict | None = None, logger: logging.Logger | None = None
) -> None:
    """Log a warning with standardized context formatting."""
    if logger is None:
        logger = logging.getLogger(__name__)

    warning_msg = f"⚠️  {message}"
    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        warning_msg += f" (context: {context_str})"

    logger.warning(warning_msg)


def log_info_with_context(
    message: str, context: dict | None = None, logger: logging.Logger | None = None
) -> None:
    """Log an info message with standardized context formatting."""
    if logger is None:
        logger = logging.getLogger(__name__)

    info_msg = f"ℹ️  {message}"
    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        info_msg += f" (context: {context_str})"

    logger.info(info_msg)


def safe_operation(
    operation_func: Callable[[], Any],
    operation_name: str,
    default_return: Any = None,
    logger: logging.Logger | None = None,
) -> Any:
    """Run a best-effort cleanup step, logging instead of raising on failure.

    Only used for teardown work (releasing handles, closing captures) where a
    failure must not mask the job's real outcome.
    """
    if logger is None:
        logger = logging.getLogger(__name__)
    try:
        return operation_func()
    except Exception as e:
        logger.warning(f"Safe operation '{operation_name}' failed, using default: {e}")
        return default_return


def clean_error_message(error_msg: str) -> str:
    """Collapse an error message onto a single readable line.

    Line breaks and tabs become spaces, control characters are removed and the
    result is capped at 500 characters.
    """
    cleaned = str(error_msg)
    cleaned = cleaned.replace("\n", " ").replace("\r", " ").replace("\t", " ")
    cleaned = re.sub(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]", "", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()

    max_length = 500
    if len(cleaned) > max_length:
        cleaned = cleaned[: max_length - 3] + "..."

    return cleaned
