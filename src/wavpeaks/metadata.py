"""The parsed WAV description handed back to callers."""

import asyncio
import json
from collections.abc import Mapping
from typing import Any

from wavpeaks.options import merge_options, validate_options
from wavpeaks.stream import ByteReader
from wavpeaks.types import (
    ContainerHeader,
    DataDescriptor,
    FormatDescriptor,
    WaveForm,
    WaveformOptions,
)
from wavpeaks.waveform import compute_waveform


class WaveMetadata:
    """Header information of a PCM WAV stream plus its lazily built waveform.

    The instance keeps the reader the header was parsed from, positioned at
    the first sample byte. ``compute_waveform`` consumes the rest of the
    stream once and caches the result; later calls return the cached
    waveform without reading.
    """

    def __init__(
        self,
        header: ContainerHeader,
        fmt: FormatDescriptor,
        data: DataDescriptor,
        reader: ByteReader,
    ) -> None:
        self.header = header
        self.fmt = fmt
        self.data = data
        self._reader = reader
        self._waveform: WaveForm | None = None
        self._samples_per_pixel: int | None = None
        self._lock: asyncio.Lock | None = None

    def __repr__(self) -> str:
        return (
            f"WaveMetadata(channels={self.num_channels}, sample_rate={self.sample_rate}, "
            f"bits_per_sample={self.bits_per_sample}, frames={self.frame_count})"
        )

    @property
    def num_channels(self) -> int:
        return self.fmt.num_channels

    @property
    def sample_rate(self) -> int:
        return self.fmt.sample_rate

    @property
    def byte_rate(self) -> int:
        return self.fmt.byte_rate

    @property
    def bits_per_sample(self) -> int:
        return self.fmt.bits_per_sample

    @property
    def data_size(self) -> int:
        return self.data.size

    @property
    def frame_count(self) -> int:
        """Number of whole sample frames in the data chunk.

        A trailing partial frame in a truncated data chunk is not counted.
        """
        frame_bytes = self.fmt.bytes_per_sample * self.fmt.num_channels
        if frame_bytes == 0:
            return 0
        return self.data.size // frame_bytes

    @property
    def duration(self) -> float:
        """Length of the audio in seconds."""
        if self.fmt.byte_rate == 0:
            return 0.0
        return self.data.size / self.fmt.byte_rate

    @property
    def bit_rate(self) -> int:
        """Bits per second."""
        return self.fmt.byte_rate * 8

    @property
    def waveform(self) -> WaveForm | None:
        """The cached waveform, or None before ``compute_waveform`` ran."""
        return self._waveform

    @property
    def samples_per_pixel(self) -> int | None:
        """Bucket size the cached waveform was built with."""
        return self._samples_per_pixel

    async def compute_waveform(
        self,
        options: WaveformOptions | Mapping[str, Any] | None = None,
    ) -> WaveForm:
        """Build the waveform from the remaining sample data.

        Options are merged over the defaults and validated before anything
        is read. Once a waveform exists it is returned as-is, whatever
        options are passed.

        Raises:
            InvalidConfiguration: If the options are invalid.
            UnsupportedSampleFormat: If the sample width is not 8 or 16 bits.
            UnexpectedEndOfStream: If the data chunk is shorter than declared.
        """
        resolved = validate_options(merge_options(options))
        if self._waveform is not None:
            return self._waveform

        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if self._waveform is None:
                waveform = await compute_waveform(
                    self._reader, self.fmt, self.frame_count, resolved
                )
                self._samples_per_pixel = resolved.samples_per_pixel
                self._waveform = waveform
        return self._waveform

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready view of the metadata, without the reader."""
        waveform = None
        if self._waveform is not None:
            waveform = [[[p.minimum, p.maximum] for p in lane] for lane in self._waveform]
        return {
            "chunk_id": self.header.chunk_id,
            "chunk_size": self.header.chunk_size,
            "format": self.header.format,
            "subchunk1_id": self.fmt.subchunk_id,
            "subchunk1_size": self.fmt.subchunk_size,
            "audio_format": self.fmt.audio_format,
            "num_channels": self.fmt.num_channels,
            "sample_rate": self.fmt.sample_rate,
            "byte_rate": self.fmt.byte_rate,
            "block_align": self.fmt.block_align,
            "bits_per_sample": self.fmt.bits_per_sample,
            "data_chunk_size": self.data.size,
            "skipped_chunks": list(self.data.skipped_chunks),
            "frame_count": self.frame_count,
            "duration": self.duration,
            "bit_rate": self.bit_rate,
            "samples_per_pixel": self._samples_per_pixel,
            "waveform": waveform,
        }

    def to_json(self, **kwargs: Any) -> str:
        """Serialize ``to_dict()`` with ``json.dumps``."""
        return json.dumps(self.to_dict(), **kwargs)
