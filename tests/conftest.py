"""Shared fakes and fixtures for GifClip tests."""

import threading
from pathlib import Path

import numpy as np
import pytest

from gifclip.config import ConversionConfig
from gifclip.encoders import ERROR, FINISHED, PROGRESS, EncoderSettings, FrameEncoder
from gifclip.handles import HandleRegistry
from gifclip.sources import VideoSource

FAKE_GIF_BYTES = b"GIF89a" + b"\x00" * 64


class FakeVideoSource(VideoSource):
    """In-memory source that records every call made by the coordinator.

    ``notify_mode`` controls how arrivals are reported:
    ``"sync"`` from inside ``seek_to``, ``"stale"`` sends the previous
    request id first, ``"thread"`` reports from a timer thread and
    ``"never"`` drops the arrival.
    """

    NAME = "fake"

    def __init__(
        self,
        duration: float = 10.0,
        size: tuple[int, int] = (640, 360),
        notify_mode: str = "sync",
        fail_capture_at: int | None = None,
        fail_load: bool = False,
    ):
        super().__init__()
        self.duration = duration
        self.size = size
        self.notify_mode = notify_mode
        self.fail_capture_at = fail_capture_at
        self.fail_load = fail_load
        self.loaded = False
        self.released = False
        self.seeks: list[tuple[float, int]] = []
        self.captures = 0
        self.position: float | None = None

    def load(self) -> None:
        if self.fail_load:
            raise RuntimeError("decoder could not open stream")
        self.loaded = True

    @property
    def total_duration(self) -> float:
        return self.duration

    @property
    def frame_size(self) -> tuple[int, int]:
        return self.size

    def seek_to(self, timestamp: float, request_id: int) -> None:
        self.seeks.append((timestamp, request_id))
        self.position = timestamp
        if self.notify_mode == "sync":
            self.notify_seeked(request_id)
        elif self.notify_mode == "stale":
            self.notify_seeked(request_id - 1)
            self.notify_seeked(request_id + 1)
            self.notify_seeked(request_id)
        elif self.notify_mode == "thread":
            threading.Timer(0.001, self.notify_seeked, args=(request_id,)).start()

    def current_raster_frame(self, width: int, height: int) -> np.ndarray:
        self.captures += 1
        if self.fail_capture_at is not None and self.captures == self.fail_capture_at:
            raise RuntimeError("canvas is tainted")
        value = self.captures % 256
        return np.full((height, width, 3), value, dtype=np.uint8)

    def release(self) -> None:
        super().release()
        self.released = True


class FakeEncoder(FrameEncoder):
    """Encoder double that records frames and reports a canned result."""

    NAME = "fake"

    def __init__(self, settings: EncoderSettings, fail: bool = False, artifact: bytes = FAKE_GIF_BYTES):
        super().__init__(settings)
        self.fail = fail
        self.artifact = artifact
        self.frames: list[np.ndarray] = []
        self.delays: list[int] = []
        self.render_calls = 0

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    def add_frame(self, pixels: np.ndarray, delay_ms: int) -> None:
        self.frames.append(pixels)
        self.delays.append(delay_ms)

    def render(self) -> None:
        self.render_calls += 1
        self.emit(PROGRESS, 0.5)
        if self.fail:
            self.emit(ERROR, RuntimeError("worker crashed"))
            return
        self.emit(PROGRESS, 1.0)
        self.emit(FINISHED, self.artifact)


class EncoderFactory:
    """Callable factory that remembers the encoders it built."""

    def __init__(self, **encoder_kwargs):
        self.encoder_kwargs = encoder_kwargs
        self.created: list[FakeEncoder] = []

    def __call__(self, settings: EncoderSettings) -> FakeEncoder:
        encoder = FakeEncoder(settings, **self.encoder_kwargs)
        self.created.append(encoder)
        return encoder

    @property
    def encoder(self) -> FakeEncoder:
        assert len(self.created) == 1
        return self.created[0]


class PauseRecorder:
    def __init__(self):
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def fake_source():
    return FakeVideoSource()


@pytest.fixture
def encoder_factory():
    return EncoderFactory()


@pytest.fixture
def pause():
    return PauseRecorder()


@pytest.fixture
def fast_config():
    return ConversionConfig(SEEK_TIMEOUT_S=0.2, ENCODE_TIMEOUT_S=1.0)


@pytest.fixture
def registry(tmp_path):
    registry = HandleRegistry(spool_dir=tmp_path / "spool")
    yield registry
    registry.release_all()


@pytest.fixture
def video_file(tmp_path) -> Path:
    """A small file with a video extension (content is never decoded)."""
    path = tmp_path / "holiday.mp4"
    path.write_bytes(b"\x00" * 1024)
    return path


@pytest.fixture
def make_source():
    """Build a FakeVideoSource with custom behaviour."""
    return FakeVideoSource


@pytest.fixture
def make_encoder_factory():
    """Build an EncoderFactory with custom encoder behaviour."""
    return EncoderFactory


@pytest.fixture
def fake_gif_bytes():
    return FAKE_GIF_BYTES
