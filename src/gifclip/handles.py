"""Handles for transient conversion resources.

A handle stands for something a caller can fetch later (a spooled GIF, a
reference to the source being previewed). Whoever allocates a handle releases
it; anything still alive at interpreter exit is released by ``atexit``.
"""

from __future__ import annotations

import atexit
import logging
import tempfile
import threading
import uuid
from dataclasses import dataclass
from pathlib import Path

from .config import DEFAULT_PATH_CONFIG

logger = logging.getLogger(__name__)


class HandleReleasedError(LookupError):
    """Raised when reading through a handle that was already released."""


@dataclass(frozen=True)
class ArtifactHandle:
    """Opaque reference to a resource owned by a HandleRegistry."""

    handle_id: str
    kind: str
    path: Path
    registry: HandleRegistry

    @property
    def is_released(self) -> bool:
        return not self.registry.is_live(self)

    def read_bytes(self) -> bytes:
        if self.is_released:
            raise HandleReleasedError(f"Handle {self.handle_id} has been released")
        return self.path.read_bytes()

    def release(self) -> None:
        self.registry.release(self)


class HandleRegistry:
    """Allocates and releases handles.

    ``allocate_bytes`` spools data into a private temporary directory and
    owns the file; ``allocate_reference`` only points at an existing path,
    which is never deleted.
    """

    def __init__(self, spool_dir: Path | None = None):
        self._spool_dir = Path(spool_dir) if spool_dir is not None else None
        self._live: dict[str, tuple[ArtifactHandle, bool]] = {}
        self._lock = threading.Lock()

    def allocate_bytes(self, data: bytes, kind: str = "artifact", suffix: str = "") -> ArtifactHandle:
        """Spool *data* to disk and return an owning handle."""
        if self._spool_dir is not None:
            self._spool_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=self._spool_dir,
            prefix="gifclip_",
            suffix=suffix,
            delete=False,
        ) as spool:
            spool.write(data)
            path = Path(spool.name)

        return self._register(kind, path, owned=True)

    def allocate_reference(self, path: Path, kind: str = "source") -> ArtifactHandle:
        """Return a non-owning handle for an existing file."""
        return self._register(kind, Path(path), owned=False)

    def is_live(self, handle: ArtifactHandle) -> bool:
        with self._lock:
            return handle.handle_id in self._live

    def release(self, handle: ArtifactHandle) -> bool:
        """Release *handle*. Returns False if it was not live."""
        with self._lock:
            entry = self._live.pop(handle.handle_id, None)
        if entry is None:
            return False

        _, owned = entry
        if owned:
            handle.path.unlink(missing_ok=True)
        logger.debug(f"Released {handle.kind} handle {handle.handle_id}")
        return True

    def release_all(self) -> int:
        """Release every live handle and return how many were released."""
        with self._lock:
            handles = [handle for handle, _ in self._live.values()]
        released = 0
        for handle in handles:
            try:
                if self.release(handle):
                    released += 1
            except OSError as e:
                logger.warning(f"⚠️  Could not release handle {handle.handle_id}: {e}")
        return released

    def live_handles(self) -> list[ArtifactHandle]:
        with self._lock:
            return [handle for handle, _ in self._live.values()]

    def _register(self, kind: str, path: Path, owned: bool) -> ArtifactHandle:
        handle = ArtifactHandle(
            handle_id=uuid.uuid4().hex,
            kind=kind,
            path=path,
            registry=self,
        )
        with self._lock:
            self._live[handle.handle_id] = (handle, owned)
        logger.debug(f"Allocated {kind} handle {handle.handle_id} -> {path}")
        return handle


_default_registry: HandleRegistry | None = None


def get_default_registry() -> HandleRegistry:
    """Process-wide registry, released automatically at exit."""
    global _default_registry
    if _default_registry is None:
        _default_registry = HandleRegistry(spool_dir=DEFAULT_PATH_CONFIG.TMP_DIR)
        atexit.register(_default_registry.release_all)
    return _default_registry
