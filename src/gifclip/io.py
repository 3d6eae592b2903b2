"""I/O utilities for logging setup, atomic writes and size formatting."""

import logging
import tempfile
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from shutil import move


def setup_logging(log_dir: Path, log_level: str = "INFO") -> logging.Logger:
    """Set up logging configuration for GifClip.

    Args:
        log_dir: Directory to store log files
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured logger instance
    """
    ensure_directories(log_dir)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"gifclip_{timestamp}.log"

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ],
        force=True,
    )

    return logging.getLogger("gifclip")


@contextmanager
def atomic_write(target_path: Path, mode: str = "w"):
    """Context manager for atomic file writes using temporary files.

    Args:
        target_path: Final path where file should be written
        mode: File open mode

    Yields:
        File handle for writing

    Example:
        with atomic_write(Path("clip.gif"), mode="wb") as f:
            f.write(data)
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode=mode,
        dir=target_path.parent,
        delete=False,
        suffix=f".tmp_{target_path.name}"
    ) as temp_file:
        try:
            yield temp_file
            temp_file.flush()
        except Exception:
            Path(temp_file.name).unlink(missing_ok=True)
            raise

    # Move after the handle is closed so this also works on Windows
    move(temp_file.name, target_path)


def format_file_size(num_bytes: int) -> str:
    """Human-readable size, e.g. ``1536`` -> ``"1.5 KB"``.

    Uses 1024-based units up to GB with at most two decimals.
    """
    if num_bytes <= 0:
        return "0 Bytes"

    units = ["Bytes", "KB", "MB", "GB"]
    value = float(num_bytes)
    exponent = 0
    while value >= 1024 and exponent < len(units) - 1:
        value /= 1024
        exponent += 1
    return f"{round(value, 2):g} {units[exponent]}"


def ensure_directories(*paths: Path) -> None:
    """Ensure that all specified directories exist."""
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)
