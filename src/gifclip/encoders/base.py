"""Encoder contract consumed by the capture coordinator.

An encoder receives frames one at a time, assembles them on ``render`` and
reports through three events: ``progress`` (a fraction in 0..1),
``finished`` (the encoded bytes) and ``error`` (the exception). Rendering may
complete before ``render`` returns or later from another thread.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np

logger = logging.getLogger(__name__)

PROGRESS = "progress"
FINISHED = "finished"
ERROR = "error"

ENCODER_EVENTS = (PROGRESS, FINISHED, ERROR)


@dataclass(frozen=True)
class EncoderSettings:
    """Construction-time encoder configuration."""

    worker_count: int
    quality: int  # Palette sampling step, 1 = best
    width: int
    height: int
    loop: int = 0  # 0 = loop forever

    def __post_init__(self) -> None:
        if self.worker_count < 1:
            raise ValueError(f"worker_count must be at least 1, got {self.worker_count}")
        if self.quality < 1:
            raise ValueError(f"quality must be at least 1, got {self.quality}")
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Frame size must be positive, got {self.width}x{self.height}")


class FrameEncoder(ABC):
    """Common behaviour for animated-image encoders."""

    #: Human-readable name used in logs
    NAME: str = "encoder"

    def __init__(self, settings: EncoderSettings):
        self.settings = settings
        self._listeners: dict[str, list[Callable[[Any], None]]] = {
            event: [] for event in ENCODER_EVENTS
        }

    def on(self, event: str, callback: Callable[[Any], None]) -> None:
        """Subscribe *callback* to ``progress``, ``finished`` or ``error``."""
        if event not in self._listeners:
            raise ValueError(f"Unknown encoder event: {event}")
        self._listeners[event].append(callback)

    def emit(self, event: str, payload: Any) -> None:
        for callback in list(self._listeners[event]):
            callback(payload)

    @abstractmethod
    def add_frame(self, pixels: np.ndarray, delay_ms: int) -> None:
        """Queue one ``(height, width, 3)`` RGB frame shown for *delay_ms*."""

    @abstractmethod
    def render(self) -> None:
        """Start assembling the queued frames."""

    @property
    @abstractmethod
    def frame_count(self) -> int:
        """Number of frames queued so far."""
