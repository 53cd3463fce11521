"""Pytest configuration and shared fixtures."""

import asyncio
from typing import Iterable

import pytest

from mperf.core.config import load_settings
from mperf.perf.session import Session
from mperf.storage.base import ObjectStore


class FakeObjectStore(ObjectStore):
    """In-memory object store with scriptable failures.

    ``write_errors`` is consumed one entry per write; a None entry lets that
    write succeed. When ``hold`` is set, writes wait for it before finishing.
    """

    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.write_calls: list[str] = []
        self.write_errors: list[Exception | None] = []
        self.mkdir_calls: list[str] = []
        self.mkdir_error: Exception | None = None
        self.directories: set[str] = set()
        self.hold: asyncio.Event | None = None

    async def write_object(
        self, path: str, chunks: Iterable[bytes], size: int, content_type: str
    ) -> int:
        self.write_calls.append(path)
        if self.hold is not None:
            await self.hold.wait()
        data = b"".join(chunks)
        if self.write_errors:
            error = self.write_errors.pop(0)
            if error is not None:
                raise error
        self.objects[path] = (data, content_type)
        return len(data)

    async def mkdirp(self, path: str) -> None:
        self.mkdir_calls.append(path)
        if self.mkdir_error is not None:
            raise self.mkdir_error
        self.directories.add(path)

    def get_backend_name(self) -> str:
        return "fake"


@pytest.fixture
def fake_store():
    return FakeObjectStore()


@pytest.fixture
def settings():
    """Small, fast run settings."""
    return load_settings(
        OBJECT_SIZE_MB=1,
        PARENT_DIR="stor/mperf",
        MAX_OUTSTANDING=2,
        INTERVAL_MS=100,
    )


@pytest.fixture
def session(settings, fake_store):
    return Session(settings, fake_store)
