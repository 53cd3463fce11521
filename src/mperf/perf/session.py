"""Run session: configuration, object store and admission state."""

import logging
import posixpath
from concurrent.futures import ThreadPoolExecutor
from uuid import uuid4

from mperf.core.config import Settings
from mperf.exceptions import BootstrapError
from mperf.perf.gate import AdmissionGate
from mperf.storage.base import ObjectStore

logger = logging.getLogger(__name__)


class Session:
    """State shared by every upload of one run.

    The root directory is a fresh ``<PARENT_DIR>/<uuid>`` path so that
    concurrent or repeated runs never write into each other's trees. It must
    be created with :meth:`bootstrap` before any upload is admitted.

    The store runs its blocking I/O on a pool with one worker per admission
    slot, so every admitted upload has a sink open at once. A retry only
    starts after its heal has finished, so it never needs a second worker.
    """

    def __init__(self, settings: Settings, store: ObjectStore):
        self.settings = settings
        self.store = store
        self.root_directory = posixpath.join(settings.PARENT_DIR, str(uuid4()))
        self.gate = AdmissionGate(settings.MAX_OUTSTANDING)
        self.executor = ThreadPoolExecutor(
            max_workers=settings.MAX_OUTSTANDING, thread_name_prefix="mperf-io"
        )
        store.executor = self.executor

    @property
    def object_size_bytes(self) -> int:
        return self.settings.object_size_bytes

    @property
    def max_outstanding(self) -> int:
        return self.gate.capacity

    @property
    def tick_interval_ms(self) -> int:
        return self.settings.INTERVAL_MS

    @property
    def outstanding_count(self) -> int:
        return self.gate.outstanding

    async def bootstrap(self) -> None:
        """Create the root directory.

        Raises:
            BootstrapError: If the directory could not be created
        """
        try:
            await self.store.mkdirp(self.root_directory)
        except Exception as e:
            logger.error(
                "Failed to create session root directory",
                extra={
                    "root_directory": self.root_directory,
                    "backend": self.store.get_backend_name(),
                    "error": str(e),
                },
            )
            raise BootstrapError(
                f"Could not create root directory {self.root_directory}: {e}"
            ) from e

        logger.info(
            "Session initialized",
            extra={
                "root_directory": self.root_directory,
                "backend": self.store.get_backend_name(),
                "object_size_bytes": self.object_size_bytes,
                "max_outstanding": self.max_outstanding,
                "interval_ms": self.tick_interval_ms,
            },
        )
