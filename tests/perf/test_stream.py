"""Tests for the zero-filled payload stream."""

import pytest

from mperf.perf.stream import DEFAULT_CHUNK_SIZE, ZeroStream


def test_total_length_matches_size():
    stream = ZeroStream(1024 * 1024 + 17, chunk_size=4096)
    chunks = list(stream)

    assert sum(len(c) for c in chunks) == 1024 * 1024 + 17
    assert all(0 < len(c) <= 4096 for c in chunks)
    assert len(chunks[-1]) == 17


def test_content_is_all_zero():
    data = b"".join(ZeroStream(100_000, chunk_size=3000))
    assert data == bytes(100_000)


def test_exact_multiple_of_chunk_size():
    chunks = list(ZeroStream(8192, chunk_size=4096))
    assert [len(c) for c in chunks] == [4096, 4096]


def test_default_chunk_size():
    stream = ZeroStream(10)
    assert stream.chunk_size == DEFAULT_CHUNK_SIZE == 65536
    assert list(stream) == [bytes(10)]


def test_empty_stream_yields_nothing():
    assert list(ZeroStream(0)) == []


def test_stream_is_single_use():
    stream = ZeroStream(5000, chunk_size=1024)
    assert len(b"".join(stream)) == 5000
    assert list(stream) == []
    assert stream.remaining_bytes == 0


def test_read_respects_requested_size():
    stream = ZeroStream(10, chunk_size=4)

    assert stream.read(3) == bytes(3)
    assert stream.read(100) == bytes(7)
    assert stream.read(1) == b""


def test_read_all():
    stream = ZeroStream(200_000, chunk_size=1024)
    assert stream.read() == bytes(200_000)
    assert stream.read() == b""


@pytest.mark.parametrize("size,chunk_size", [(-1, 10), (10, 0)])
def test_invalid_arguments(size, chunk_size):
    with pytest.raises(ValueError):
        ZeroStream(size, chunk_size=chunk_size)
