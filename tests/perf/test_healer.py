"""Tests for the directory healer."""

import asyncio

import pytest

from mperf.exceptions import HealError, StorageError
from mperf.perf.healer import DirectoryHealer
from mperf.storage.local import LocalObjectStore


@pytest.mark.asyncio
async def test_ensure_creates_directory_and_ancestors(tmp_path):
    healer = DirectoryHealer(LocalObjectStore(tmp_path))

    await healer.ensure("stor/mperf/run/ab")

    assert (tmp_path / "stor" / "mperf" / "run" / "ab").is_dir()


@pytest.mark.asyncio
async def test_ensure_is_idempotent(tmp_path):
    healer = DirectoryHealer(LocalObjectStore(tmp_path))

    await healer.ensure("stor/mperf/ab")
    await healer.ensure("stor/mperf/ab")

    assert (tmp_path / "stor" / "mperf" / "ab").is_dir()


@pytest.mark.asyncio
async def test_concurrent_ensure_same_path(tmp_path):
    healer = DirectoryHealer(LocalObjectStore(tmp_path))

    await asyncio.gather(*(healer.ensure("stor/mperf/run/cd") for _ in range(20)))

    assert (tmp_path / "stor" / "mperf" / "run" / "cd").is_dir()


@pytest.mark.asyncio
async def test_store_failure_becomes_heal_error(fake_store):
    fake_store.mkdir_error = StorageError("quota exceeded")
    healer = DirectoryHealer(fake_store)

    with pytest.raises(HealError, match="quota exceeded"):
        await healer.ensure("stor/mperf/ef")
