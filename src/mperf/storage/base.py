"""Abstract object store interface."""

import asyncio
import functools
from abc import ABC, abstractmethod
from concurrent.futures import Executor
from typing import Any, Callable, Iterable, Optional


class ObjectStore(ABC):
    """Abstract base class for object store backends.

    Backends do blocking I/O on ``executor``. When it is None the event
    loop's default executor is used, which caps concurrency at its own
    worker count; a run session installs a pool sized to its admission gate.
    """

    executor: Optional[Executor] = None

    async def _run_blocking(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a blocking call on the store's executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, functools.partial(func, *args, **kwargs))

    @abstractmethod
    async def write_object(
        self, path: str, chunks: Iterable[bytes], size: int, content_type: str
    ) -> int:
        """Stream chunks into a new object.

        Args:
            path: Object path, '/'-separated
            chunks: Content to write, consumed once
            size: Declared object size in bytes
            content_type: MIME type stored with the object

        Returns:
            Number of bytes written

        Raises:
            MissingParentDirectoryError: If the parent directory does not exist
            TransientUploadError: If the upload fails for any other reason
        """
        pass

    @abstractmethod
    async def mkdirp(self, path: str) -> None:
        """Create a directory and all missing ancestors.

        Succeeds without change when the directory already exists.

        Raises:
            StorageError: If the directory cannot be created
        """
        pass

    @abstractmethod
    def get_backend_name(self) -> str:
        """Return backend identifier."""
        pass
