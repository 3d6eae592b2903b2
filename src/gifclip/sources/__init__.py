"""Video sources that frames are captured from."""

from .base import SeekListener, VideoSource
from .opencv_source import OpenCVVideoSource

__all__ = [
    "OpenCVVideoSource",
    "SeekListener",
    "VideoSource",
]
