"""Configuration settings for GifClip."""

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class ConversionConfig:
    """Configuration for video-to-GIF conversion jobs with environment overrides."""

    # Encoder worker threads used while quantizing frames.
    # Override with: GIFCLIP_WORKER_COUNT
    WORKER_COUNT: int = 2

    # Pause between captured frames, keeps each capture iteration short.
    # Override with: GIFCLIP_INTER_FRAME_PAUSE_MS
    INTER_FRAME_PAUSE_MS: int = 50

    # Upper bound on waiting for a seek to arrive.
    # Override with: GIFCLIP_SEEK_TIMEOUT_S
    SEEK_TIMEOUT_S: float = 10.0

    # Upper bound on waiting for the encoder to finish rendering.
    # Override with: GIFCLIP_ENCODE_TIMEOUT_S
    ENCODE_TIMEOUT_S: float = 300.0

    # Source file size limit checked before a job starts.
    # Override with: GIFCLIP_MAX_FILE_SIZE_MB
    MAX_FILE_SIZE_MB: float = 100.0

    # Narrowest output accepted from the boundary layer
    MIN_TARGET_WIDTH: int = 50

    # Suggested output name is "<source stem><OUTPUT_SUFFIX><OUTPUT_EXTENSION>"
    OUTPUT_SUFFIX: str = "_converted"
    OUTPUT_EXTENSION: str = ".gif"

    # GIF loop count (0 = infinite)
    LOOP_COUNT: int = 0

    # Duration used when a requested window is longer than the source
    DEFAULT_DURATION_S: float = 3.0

    def __post_init__(self) -> None:
        """Apply environment variable overrides, then validate."""
        env_overrides = {
            "WORKER_COUNT": ("GIFCLIP_WORKER_COUNT", int),
            "INTER_FRAME_PAUSE_MS": ("GIFCLIP_INTER_FRAME_PAUSE_MS", int),
            "SEEK_TIMEOUT_S": ("GIFCLIP_SEEK_TIMEOUT_S", float),
            "ENCODE_TIMEOUT_S": ("GIFCLIP_ENCODE_TIMEOUT_S", float),
            "MAX_FILE_SIZE_MB": ("GIFCLIP_MAX_FILE_SIZE_MB", float),
        }

        for attr_name, (env_var_name, cast) in env_overrides.items():
            env_value = os.getenv(env_var_name)
            if env_value:
                try:
                    setattr(self, attr_name, cast(env_value))
                except ValueError as e:
                    raise ValueError(
                        f"{env_var_name} must be a valid {cast.__name__}, got {env_value!r}"
                    ) from e

        if self.WORKER_COUNT < 1:
            raise ValueError(f"WORKER_COUNT must be at least 1, got {self.WORKER_COUNT}")

        if self.INTER_FRAME_PAUSE_MS < 0:
            raise ValueError(
                f"INTER_FRAME_PAUSE_MS must be non-negative, got {self.INTER_FRAME_PAUSE_MS}"
            )

        if self.SEEK_TIMEOUT_S <= 0:
            raise ValueError(f"SEEK_TIMEOUT_S must be positive, got {self.SEEK_TIMEOUT_S}")

        if self.ENCODE_TIMEOUT_S <= 0:
            raise ValueError(
                f"ENCODE_TIMEOUT_S must be positive, got {self.ENCODE_TIMEOUT_S}"
            )

        if self.MAX_FILE_SIZE_MB <= 0:
            raise ValueError(
                f"MAX_FILE_SIZE_MB must be positive, got {self.MAX_FILE_SIZE_MB}"
            )

        if self.MIN_TARGET_WIDTH < 1:
            raise ValueError(
                f"MIN_TARGET_WIDTH must be at least 1, got {self.MIN_TARGET_WIDTH}"
            )

        if not self.OUTPUT_EXTENSION.startswith("."):
            raise ValueError(
                f"OUTPUT_EXTENSION must start with '.', got {self.OUTPUT_EXTENSION!r}"
            )

        if self.LOOP_COUNT < 0:
            raise ValueError(f"LOOP_COUNT must be non-negative, got {self.LOOP_COUNT}")

        if self.DEFAULT_DURATION_S <= 0:
            raise ValueError(
                f"DEFAULT_DURATION_S must be positive, got {self.DEFAULT_DURATION_S}"
            )

    @property
    def max_file_size_bytes(self) -> int:
        return int(self.MAX_FILE_SIZE_MB * 1024 * 1024)

    @property
    def inter_frame_pause_s(self) -> float:
        return self.INTER_FRAME_PAUSE_MS / 1000.0


@dataclass
class PathConfig:
    """Configuration for file paths and directories."""

    OUTPUT_DIR: Path = Path("output")
    # Spool directory for artifact handles (None = system temp directory)
    TMP_DIR: Path | None = None
    LOGS_DIR: Path = Path("logs")

    def __post_init__(self) -> None:
        tmp_override = os.getenv("GIFCLIP_TMP_DIR")
        if tmp_override:
            self.TMP_DIR = Path(tmp_override)

        for name in ("OUTPUT_DIR", "TMP_DIR", "LOGS_DIR"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, Path):
                setattr(self, name, Path(value))


# Default configuration instances
DEFAULT_CONVERSION_CONFIG = ConversionConfig()
DEFAULT_PATH_CONFIG = PathConfig()
