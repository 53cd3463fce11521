"""Local filesystem object store."""

import logging
from pathlib import Path
from typing import Iterable

from mperf.exceptions import MissingParentDirectoryError, StorageError, TransientUploadError
from mperf.storage.base import ObjectStore

logger = logging.getLogger(__name__)


class LocalObjectStore(ObjectStore):
    """Object store backed by a directory on the local filesystem.

    Writes never create the parent directory, so a missing shard directory
    surfaces the same way it does on a remote store with real directories.
    """

    def __init__(self, base_path: str | Path = "data/mperf"):
        self.base_path = Path(base_path)

    def _resolve(self, path: str) -> Path:
        """Map a '/'-separated object path below base_path."""
        parts = [p for p in path.split("/") if p and p != "."]
        if any(p == ".." for p in parts):
            raise StorageError(f"Path escapes store root: {path}")
        return self.base_path.joinpath(*parts)

    async def write_object(
        self, path: str, chunks: Iterable[bytes], size: int, content_type: str
    ) -> int:
        """Write chunks to a file; the parent directory must already exist."""
        target = self._resolve(path)
        return await self._run_blocking(self._write, target, chunks, size)

    def _write(self, target: Path, chunks: Iterable[bytes], size: int) -> int:
        written = 0
        try:
            with open(target, "wb") as f:
                for chunk in chunks:
                    f.write(chunk)
                    written += len(chunk)
        except FileNotFoundError as e:
            raise MissingParentDirectoryError(
                f"Parent directory does not exist: {target.parent}"
            ) from e
        except OSError as e:
            logger.error(
                "Failed to write object",
                extra={"target": str(target), "error": str(e)},
            )
            raise TransientUploadError(f"Failed to write object: {e}") from e

        if written != size:
            raise TransientUploadError(
                f"Size mismatch for {target}: declared {size}, wrote {written}"
            )
        return written

    async def mkdirp(self, path: str) -> None:
        """Create directory and ancestors; safe to race with other callers."""
        target = self._resolve(path)
        try:
            await self._run_blocking(target.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create directory {target}: {e}") from e

    def get_backend_name(self) -> str:
        return "local"
