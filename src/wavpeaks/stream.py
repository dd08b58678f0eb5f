"""Forward-only byte reading over asynchronous sources.

The parser and the waveform generator share one ``ByteReader``. It owns the
source exclusively and only ever moves forward, so a reader handed from the
header parse to the sample scan continues exactly where the parse stopped.

Any object with an ``async read(n) -> bytes`` method works as a source,
including ``asyncio.StreamReader``. An empty result means end of stream.
"""

import asyncio
import struct
from pathlib import Path
from types import TracebackType
from typing import BinaryIO, Protocol, Self

import numpy as np
from numpy.typing import NDArray

from wavpeaks.errors import UnexpectedEndOfStream, UnsupportedSampleFormat

# numpy dtypes for the sample widths the reader can decode
SAMPLE_DTYPES = {
    8: np.dtype("i1"),
    16: np.dtype("<i2"),
}


class ByteSource(Protocol):
    """Anything that can hand out bytes asynchronously."""

    async def read(self, n: int) -> bytes: ...


class BytesSource:
    """Serve an in-memory buffer as a byte source.

    Args:
        data: The bytes to serve.
        chunk_size: Largest number of bytes returned per ``read`` call.
            ``None`` returns as much as was asked for.
    """

    def __init__(self, data: bytes, chunk_size: int | None = None) -> None:
        if chunk_size is not None and chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self._data = memoryview(data)
        self._offset = 0
        self._chunk_size = chunk_size

    async def read(self, n: int) -> bytes:
        if self._chunk_size is not None:
            n = min(n, self._chunk_size)
        chunk = self._data[self._offset : self._offset + n]
        self._offset += len(chunk)
        return bytes(chunk)


class FileSource:
    """Read a file without blocking the event loop.

    Use as an async context manager so the file handle is closed::

        async with FileSource("take.wav") as source:
            metadata = await parse(source)
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._file: BinaryIO | None = None

    async def open(self) -> None:
        if self._file is None:
            self._file = await asyncio.to_thread(open, self.path, "rb")

    async def read(self, n: int) -> bytes:
        if self._file is None:
            await self.open()
        assert self._file is not None
        return await asyncio.to_thread(self._file.read, n)

    async def close(self) -> None:
        if self._file is not None:
            await asyncio.to_thread(self._file.close)
            self._file = None

    async def __aenter__(self) -> Self:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


class ByteReader:
    """Sequential little-endian reads on top of a ``ByteSource``."""

    def __init__(self, source: ByteSource) -> None:
        self._source = source
        self.position = 0
        """Number of bytes consumed from the source so far."""

    async def read_exact(self, n: int) -> bytes:
        """Read exactly ``n`` bytes.

        Raises:
            UnexpectedEndOfStream: If the source ends first.
        """
        if n < 0:
            raise ValueError(f"Cannot read a negative number of bytes: {n}")
        buf = bytearray()
        while len(buf) < n:
            chunk = await self._source.read(n - len(buf))
            if not chunk:
                self.position += len(buf)
                raise UnexpectedEndOfStream(n, len(buf))
            buf.extend(chunk)
        self.position += n
        return bytes(buf)

    async def skip(self, n: int) -> None:
        """Discard ``n`` bytes, reading in bounded pieces."""
        remaining = n
        while remaining > 0:
            step = min(remaining, 64 * 1024)
            try:
                await self.read_exact(step)
            except UnexpectedEndOfStream as e:
                raise UnexpectedEndOfStream(n, n - remaining + e.received) from e
            remaining -= step

    async def read_u16_le(self) -> int:
        return struct.unpack("<H", await self.read_exact(2))[0]

    async def read_u32_le(self) -> int:
        return struct.unpack("<I", await self.read_exact(4))[0]

    async def read_i8(self) -> int:
        return struct.unpack("<b", await self.read_exact(1))[0]

    async def read_i16_le(self) -> int:
        return struct.unpack("<h", await self.read_exact(2))[0]

    async def read_fixed_string(self, n: int) -> str:
        """Read ``n`` bytes as latin-1 text, so every byte maps to one character."""
        return (await self.read_exact(n)).decode("latin-1")

    async def read_fourcc(self) -> str:
        """Read a four character chunk identifier."""
        return await self.read_fixed_string(4)

    async def read_samples(self, count: int, bits_per_sample: int) -> NDArray[np.int64]:
        """Read ``count`` signed PCM samples of the given width.

        Args:
            count: Number of samples (not frames) to read.
            bits_per_sample: 8 or 16.

        Returns:
            A 1-D int64 array of sample values.
        """
        dtype = SAMPLE_DTYPES.get(bits_per_sample)
        if dtype is None:
            raise UnsupportedSampleFormat(
                f"Unsupported bits per sample: {bits_per_sample} (expected 8 or 16)"
            )
        data = await self.read_exact(count * dtype.itemsize)
        return np.frombuffer(data, dtype=dtype).astype(np.int64)
