"""Admission-controlled upload orchestration."""

import asyncio
import logging
import posixpath
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Callable, Optional
from uuid import uuid4

from mperf.core.logging import object_path_context
from mperf.exceptions import HealError, MissingParentDirectoryError
from mperf.perf.healer import DirectoryHealer
from mperf.perf.session import Session
from mperf.perf.stream import ZeroStream

logger = logging.getLogger(__name__)


class AttemptState(str, Enum):
    """Upload attempt state enumeration."""

    PENDING = "pending"  # Admitted, sink not opened yet
    STREAMING = "streaming"
    HEALING = "healing"  # Recreating a missing shard directory
    RETRYING = "retrying"  # Second and last sink
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class UploadAttempt:
    """One admitted upload."""

    object_id: str
    shard_prefix: str
    object_path: str
    state: AttemptState = AttemptState.PENDING
    retries: int = 0
    bytes_written: int = 0
    error: Optional[Exception] = None

    @property
    def shard_directory(self) -> str:
        return posixpath.dirname(self.object_path)


@dataclass
class RunStats:
    """Counters for a run."""

    ticks: int = 0
    admitted: int = 0
    denied: int = 0
    succeeded: int = 0
    failed: int = 0
    retried: int = 0
    bytes_written: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class UploadOrchestrator:
    """Turns timer ticks into uploads under the session's admission gate.

    Each admitted tick becomes an asyncio task that streams a fresh
    :class:`ZeroStream` into the store. A write that fails because its shard
    directory is missing gets the directory recreated and exactly one more
    try; every other failure is final.

    Args:
        session: Bootstrapped run session
        on_complete: Called with each attempt once it is terminal
        healer: Directory healer, defaults to one over the session's store
    """

    def __init__(
        self,
        session: Session,
        on_complete: Callable[[UploadAttempt], None] | None = None,
        healer: DirectoryHealer | None = None,
    ):
        self.session = session
        self.on_complete = on_complete
        self.healer = healer or DirectoryHealer(session.store)
        self.stats = RunStats()
        self._tasks: set[asyncio.Task] = set()

    def new_attempt(self) -> UploadAttempt:
        """Create an attempt with a fresh object id and its sharded path."""
        object_id = str(uuid4())
        shard_prefix = object_id[:2]
        object_path = posixpath.join(self.session.root_directory, shard_prefix, object_id)
        return UploadAttempt(
            object_id=object_id,
            shard_prefix=shard_prefix,
            object_path=object_path,
        )

    def tick(self) -> asyncio.Task | None:
        """Admit and start one upload, or drop the tick if the gate is full.

        Must be called from a running event loop. Never blocks.

        Returns:
            The task driving the new attempt, or None if the tick was dropped
        """
        self.stats.ticks += 1
        if not self.session.gate.try_acquire():
            self.stats.denied += 1
            logger.info(
                "rate limiting put",
                extra={"outstanding": self.session.outstanding_count},
            )
            return None

        self.stats.admitted += 1
        attempt = self.new_attempt()
        task = asyncio.create_task(self.run_attempt(attempt))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run_attempt(self, attempt: UploadAttempt) -> UploadAttempt:
        """Drive an admitted attempt to a terminal state.

        The caller must hold a gate slot for the attempt; it is released here
        exactly once, whatever the outcome.
        """
        object_path_context.set(attempt.object_path)
        try:
            await self._drive(attempt)
        finally:
            self.session.gate.release()
            self._record(attempt)

        if self.on_complete is not None:
            self.on_complete(attempt)
        return attempt

    async def _drive(self, attempt: UploadAttempt) -> None:
        try:
            await self._upload(attempt)
        except MissingParentDirectoryError as e:
            attempt.error = e
            await self._heal_and_retry(attempt)
            return
        except Exception as e:
            self._fail(attempt, "put fail", e)
            return
        self._succeed(attempt)

    async def _heal_and_retry(self, attempt: UploadAttempt) -> None:
        attempt.state = AttemptState.HEALING
        try:
            await self.healer.ensure(attempt.shard_directory)
        except HealError as e:
            self._fail(attempt, "mkdir fail", e)
            return

        attempt.state = AttemptState.RETRYING
        attempt.retries += 1
        try:
            await self._upload(attempt)
        except Exception as e:
            self._fail(attempt, "put fail", e)
            return
        self._succeed(attempt)

    async def _upload(self, attempt: UploadAttempt) -> None:
        if attempt.state is AttemptState.PENDING:
            attempt.state = AttemptState.STREAMING
        size = self.session.object_size_bytes
        stream = ZeroStream(size, self.session.settings.CHUNK_SIZE_BYTES)
        attempt.bytes_written = await self.session.store.write_object(
            attempt.object_path,
            stream,
            size=size,
            content_type=self.session.settings.CONTENT_TYPE,
        )

    def _succeed(self, attempt: UploadAttempt) -> None:
        attempt.state = AttemptState.SUCCEEDED
        attempt.error = None
        logger.debug(
            "put done",
            extra={"object_path": attempt.object_path, "retries": attempt.retries},
        )

    def _fail(self, attempt: UploadAttempt, message: str, error: Exception) -> None:
        attempt.state = AttemptState.FAILED
        attempt.error = error
        logger.warning(
            message,
            extra={
                "object_path": attempt.object_path,
                "retries": attempt.retries,
                "error_type": type(error).__name__,
                "error": str(error),
            },
        )

    def _record(self, attempt: UploadAttempt) -> None:
        self.stats.retried += attempt.retries
        if attempt.state is AttemptState.SUCCEEDED:
            self.stats.succeeded += 1
            self.stats.bytes_written += attempt.bytes_written
        else:
            self.stats.failed += 1

    async def drain(self) -> None:
        """Wait for every in-flight attempt to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def log_stats(self) -> None:
        logger.info(
            "Run statistics",
            extra={**self.stats.as_dict(), "outstanding": self.session.outstanding_count},
        )

    async def run(self, max_ticks: int | None = None) -> RunStats:
        """Call :meth:`tick` every INTERVAL_MS until cancelled.

        Ticks are scheduled at a fixed rate, independent of how long uploads
        take. After a stall the next tick fires once, not in a burst. With
        ``max_ticks`` the loop stops after that many ticks and
        waits for in-flight attempts to finish.
        """
        settings = self.session.settings
        loop = asyncio.get_running_loop()
        interval = settings.tick_interval_seconds
        next_tick = loop.time() + interval
        fired = 0
        try:
            while max_ticks is None or fired < max_ticks:
                await asyncio.sleep(max(0.0, next_tick - loop.time()))
                # Intervals missed while the loop was stalled are skipped
                next_tick = max(next_tick + interval, loop.time())
                self.tick()
                fired += 1
                if fired % settings.STATS_INTERVAL_TICKS == 0:
                    self.log_stats()
            await self.drain()
        finally:
            self.log_stats()
        return self.stats
