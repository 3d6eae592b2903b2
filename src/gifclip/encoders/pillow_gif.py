"""Animated GIF encoder built on Pillow."""

from __future__ import annotations

import io
import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed

import numpy as np
from PIL import Image

from .base import ERROR, FINISHED, PROGRESS, EncoderSettings, FrameEncoder

logger = logging.getLogger(__name__)


def quantize_frame(pixels: np.ndarray, quality: int) -> Image.Image:
    """Reduce one RGB frame to a 256-colour palette image.

    The palette is built from every ``quality``-th pixel in each direction, so
    ``quality=1`` looks at the whole frame and larger values trade accuracy
    for speed.
    """
    image = Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))

    sample = pixels[::quality, ::quality] if quality > 1 else pixels
    palette_source = Image.fromarray(np.ascontiguousarray(sample, dtype=np.uint8))
    palette = palette_source.quantize(colors=256, method=Image.Quantize.MEDIANCUT)

    return image.quantize(palette=palette, dither=Image.Dither.FLOYDSTEINBERG)


class PillowGifEncoder(FrameEncoder):
    """Quantizes frames on a thread pool and writes the GIF in memory.

    ``render`` runs to completion in the calling thread, so ``finished`` or
    ``error`` has been emitted by the time it returns.
    """

    NAME = "pillow-gif"

    def __init__(self, settings: EncoderSettings):
        super().__init__(settings)
        self._frames: list[np.ndarray] = []
        self._delays: list[int] = []
        self._rendered = False

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    def add_frame(self, pixels: np.ndarray, delay_ms: int) -> None:
        if self._rendered:
            raise RuntimeError("Cannot add frames after render()")

        expected = (self.settings.height, self.settings.width)
        if pixels.ndim != 3 or pixels.shape[:2] != expected or pixels.shape[2] < 3:
            raise ValueError(
                f"Frame shape {pixels.shape} does not match encoder size "
                f"{self.settings.width}x{self.settings.height}"
            )

        self._frames.append(np.array(pixels[:, :, :3], dtype=np.uint8, copy=True))
        self._delays.append(int(delay_ms))

    def render(self) -> None:
        if self._rendered:
            raise RuntimeError("render() already called")
        self._rendered = True

        try:
            data = self._encode()
        except Exception as e:
            logger.error(f"GIF encoding failed: {e}")
            self.emit(ERROR, e)
            return
        finally:
            self._frames = []

        self.emit(FINISHED, data)

    def _encode(self) -> bytes:
        total = len(self._frames)
        if total == 0:
            raise ValueError("No frames to encode")

        start = time.perf_counter()
        quantized: list[Image.Image | None] = [None] * total

        # Final assembly counts as one extra step so progress only hits 1.0
        # once the GIF bytes exist.
        steps = total + 1
        with ThreadPoolExecutor(max_workers=self.settings.worker_count) as pool:
            futures = {
                pool.submit(quantize_frame, frame, self.settings.quality): index
                for index, frame in enumerate(self._frames)
            }
            for done, future in enumerate(as_completed(futures), start=1):
                quantized[futures[future]] = future.result()
                self.emit(PROGRESS, done / steps)

        buffer = io.BytesIO()
        first, *rest = quantized
        first.save(
            buffer,
            format="GIF",
            save_all=True,
            append_images=rest,
            duration=self._delays,
            loop=self.settings.loop,
            optimize=False,
        )
        self.emit(PROGRESS, 1.0)

        data = buffer.getvalue()
        logger.debug(
            f"Encoded {total} frames into {len(data)} bytes "
            f"in {int((time.perf_counter() - start) * 1000)} ms"
        )
        return data
