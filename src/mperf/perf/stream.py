"""Zero-filled synthetic upload payload."""

DEFAULT_CHUNK_SIZE = 65536


class ZeroStream:
    """Finite, single-use iterator of zero-filled byte chunks.

    The content is constant so that generating it costs next to nothing and
    throughput numbers reflect I/O alone. A new attempt needs a new instance.

    Args:
        size: Total number of bytes to produce
        chunk_size: Upper bound on the length of each chunk
    """

    def __init__(self, size: int, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if size < 0:
            raise ValueError(f"size must be non-negative, got {size}")
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.remaining_bytes = size
        self.chunk_size = chunk_size
        self._buf = bytes(chunk_size)

    def __iter__(self) -> "ZeroStream":
        return self

    def __next__(self) -> bytes:
        chunk = self.read(self.chunk_size)
        if not chunk:
            raise StopIteration
        return chunk

    def read(self, size: int = -1) -> bytes:
        """Return up to ``size`` zero bytes, or b"" once exhausted."""
        if size is None or size < 0:
            size = self.remaining_bytes
        n = min(size, self.remaining_bytes)
        self.remaining_bytes -= n
        if n <= self.chunk_size:
            # Slicing the shared buffer avoids allocating per chunk
            return self._buf[:n]
        return bytes(n)
