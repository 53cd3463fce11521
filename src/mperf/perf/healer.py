"""Recreates directories that uploads found missing."""

import logging

from mperf.exceptions import HealError
from mperf.storage.base import ObjectStore

logger = logging.getLogger(__name__)


class DirectoryHealer:
    """Idempotent "create directory and all missing ancestors" operation."""

    def __init__(self, store: ObjectStore):
        self.store = store

    async def ensure(self, path: str) -> None:
        """Make sure ``path`` exists.

        Many uploads can discover the same missing shard directory at once,
        so concurrent calls for one path must all succeed.

        Raises:
            HealError: If the directory could not be created
        """
        logger.debug("Creating missing directory", extra={"path": path})
        try:
            await self.store.mkdirp(path)
        except Exception as e:
            raise HealError(f"Failed to create directory {path}: {e}") from e
