"""Animated-image encoders the coordinator forwards frames to."""

from .base import (
    ENCODER_EVENTS,
    ERROR,
    FINISHED,
    PROGRESS,
    EncoderSettings,
    FrameEncoder,
)
from .pillow_gif import PillowGifEncoder, quantize_frame

__all__ = [
    "ENCODER_EVENTS",
    "ERROR",
    "FINISHED",
    "PROGRESS",
    "EncoderSettings",
    "FrameEncoder",
    "PillowGifEncoder",
    "quantize_frame",
]
