"""Streaming RIFF/WAVE header parser.

The parser walks the container front to back without seeking:

    +----------------------------------------+
    | "RIFF" size "WAVE"                     |
    +----------------------------------------+
    | "fmt " chunk (must come first)         |
    +----------------------------------------+
    | any number of other chunks (skipped)   |
    +----------------------------------------+
    | "data" size  <- reader stops here      |
    +----------------------------------------+

It returns a ``WaveMetadata`` whose reader sits on the first sample byte,
ready for ``WaveMetadata.compute_waveform``.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from wavpeaks.errors import MalformedContainer, MissingFormatChunk
from wavpeaks.metadata import WaveMetadata
from wavpeaks.options import merge_options, validate_options
from wavpeaks.stream import ByteReader, ByteSource, BytesSource, FileSource
from wavpeaks.types import ContainerHeader, DataDescriptor, FormatDescriptor, WaveformOptions

logger = logging.getLogger(__name__)

# FourCC identifiers
RIFF_ID = "RIFF"
WAVE_ID = "WAVE"
FMT_ID = "fmt "
DATA_ID = "data"

# Audio format codes
WAVE_FORMAT_PCM = 1

# Bytes of the fmt chunk body read field by field
FMT_BODY_SIZE = 16


def _as_reader(source: ByteReader | ByteSource | bytes) -> ByteReader:
    if isinstance(source, ByteReader):
        return source
    if isinstance(source, (bytes, bytearray, memoryview)):
        return ByteReader(BytesSource(bytes(source)))
    return ByteReader(source)


async def read_chunk_header(reader: ByteReader) -> tuple[str, int]:
    """Read a RIFF chunk header (FourCC + size).

    Raises:
        UnexpectedEndOfStream: If the header cannot be read.
    """
    chunk_id = await reader.read_fourcc()
    chunk_size = await reader.read_u32_le()
    return chunk_id, chunk_size


async def read_container_header(reader: ByteReader) -> ContainerHeader:
    """Read and check the outer RIFF header.

    Raises:
        MalformedContainer: If the RIFF or WAVE marker is wrong.
    """
    chunk_id = await reader.read_fourcc()
    if chunk_id != RIFF_ID:
        raise MalformedContainer(f"Not a RIFF file: expected {RIFF_ID!r}, got {chunk_id!r}")
    chunk_size = await reader.read_u32_le()
    fmt = await reader.read_fourcc()
    if fmt != WAVE_ID:
        raise MalformedContainer(f"Not a WAVE file: expected {WAVE_ID!r}, got {fmt!r}")
    return ContainerHeader(chunk_id=chunk_id, chunk_size=chunk_size, format=fmt)


async def read_format_chunk(reader: ByteReader) -> FormatDescriptor:
    """Read the ``fmt `` chunk, which must be the first subchunk.

    Extension bytes past the 16-byte PCM body are discarded.

    Raises:
        MissingFormatChunk: If the next chunk is not ``fmt ``.
    """
    subchunk_id = await reader.read_fourcc()
    if subchunk_id != FMT_ID:
        raise MissingFormatChunk(f"Expected {FMT_ID!r} chunk, got {subchunk_id!r}")

    fmt = FormatDescriptor(
        subchunk_id=subchunk_id,
        subchunk_size=await reader.read_u32_le(),
        audio_format=await reader.read_u16_le(),
        num_channels=await reader.read_u16_le(),
        sample_rate=await reader.read_u32_le(),
        byte_rate=await reader.read_u32_le(),
        block_align=await reader.read_u16_le(),
        bits_per_sample=await reader.read_u16_le(),
    )
    if fmt.subchunk_size > FMT_BODY_SIZE:
        await reader.skip(fmt.subchunk_size - FMT_BODY_SIZE)
    if fmt.audio_format != WAVE_FORMAT_PCM:
        logger.debug("Audio format code %d is not plain PCM", fmt.audio_format)
    return fmt


async def find_data_chunk(reader: ByteReader) -> DataDescriptor:
    """Skip chunks until the ``data`` chunk header has been read.

    Exactly the declared size of each chunk is skipped. Odd-sized chunks
    followed by a RIFF pad byte are not supported: the pad byte is read
    as the start of the next chunk header.

    Raises:
        UnexpectedEndOfStream: If the stream ends before a data chunk.
    """
    skipped: list[str] = []
    while True:
        chunk_id, chunk_size = await read_chunk_header(reader)
        if chunk_id == DATA_ID:
            return DataDescriptor(
                subchunk_id=chunk_id, size=chunk_size, skipped_chunks=tuple(skipped)
            )
        logger.debug("Skipping %r chunk of %d bytes", chunk_id, chunk_size)
        await reader.skip(chunk_size)
        skipped.append(chunk_id)


async def parse(source: ByteReader | ByteSource | bytes) -> WaveMetadata:
    """Parse a WAV header from a byte source.

    Args:
        source: A ``ByteReader``, anything with ``async read(n)`` such as an
            ``asyncio.StreamReader``, or a bytes buffer.

    Returns:
        Metadata whose reader is positioned at the first sample byte.

    Raises:
        MalformedContainer: If the RIFF or WAVE marker is wrong.
        MissingFormatChunk: If ``fmt `` is not the first subchunk.
        UnexpectedEndOfStream: If the stream ends before the data chunk.
    """
    reader = _as_reader(source)
    header = await read_container_header(reader)
    fmt = await read_format_chunk(reader)
    data = await find_data_chunk(reader)

    metadata = WaveMetadata(header, fmt, data, reader)
    logger.debug(
        "Parsed WAV: %d ch, %d Hz, %d bit, %d frames (%.3f s), data at byte %d",
        fmt.num_channels,
        fmt.sample_rate,
        fmt.bits_per_sample,
        metadata.frame_count,
        metadata.duration,
        reader.position,
    )
    return metadata


async def load(
    source: ByteReader | ByteSource | bytes,
    options: WaveformOptions | Mapping[str, Any] | None = None,
) -> WaveMetadata:
    """Parse a WAV header and, if ``generate_waveform`` is set, its waveform.

    Options are validated before the stream is touched.
    """
    resolved = merge_options(options)
    if resolved.generate_waveform:
        validate_options(resolved)
    metadata = await parse(source)
    if resolved.generate_waveform:
        await metadata.compute_waveform(resolved)
    return metadata


async def parse_file(
    path: Path | str,
    options: WaveformOptions | Mapping[str, Any] | None = None,
) -> WaveMetadata:
    """Open a WAV file and ``load`` it.

    The file is closed on return, so request the waveform through
    ``generate_waveform`` if it is needed.
    """
    async with FileSource(path) as source:
        return await load(source, options)
