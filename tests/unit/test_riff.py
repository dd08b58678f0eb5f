"""Unit tests for the RIFF/WAVE header parser."""

import asyncio
import struct
from pathlib import Path

import pytest

from wavpeaks import (
    ByteReader,
    BytesSource,
    InvalidConfiguration,
    MalformedContainer,
    MissingFormatChunk,
    UnexpectedEndOfStream,
    WaveMetadata,
    load,
    parse,
    parse_file,
)

HEADER_SIZE = 44


class TestParse:
    """Tests for parse."""

    def test_basic_header(self, make_wav) -> None:
        """Test that every header field is read."""
        data = make_wav([1, 2, 3, 4], num_channels=2, sample_rate=44100)
        wav = asyncio.run(parse(data))

        assert isinstance(wav, WaveMetadata)
        assert wav.header.chunk_id == "RIFF"
        assert wav.header.chunk_size == len(data) - 8
        assert wav.header.format == "WAVE"
        assert wav.fmt.subchunk_id == "fmt "
        assert wav.fmt.subchunk_size == 16
        assert wav.fmt.audio_format == 1
        assert wav.num_channels == 2
        assert wav.sample_rate == 44100
        assert wav.byte_rate == 44100 * 4
        assert wav.fmt.block_align == 4
        assert wav.bits_per_sample == 16
        assert wav.data.subchunk_id == "data"
        assert wav.data_size == 8
        assert wav.data.skipped_chunks == ()

    def test_reader_positioned_at_samples(self, make_wav) -> None:
        """Test that parsing stops on the first sample byte."""
        reader = ByteReader(BytesSource(make_wav([0x1234])))
        asyncio.run(parse(reader))
        assert reader.position == HEADER_SIZE
        assert asyncio.run(reader.read_i16_le()) == 0x1234

    def test_derived_fields(self, make_wav) -> None:
        """Test frame count, duration and bit rate."""
        wav = asyncio.run(parse(make_wav([0] * 16000, num_channels=2, sample_rate=8000)))
        assert wav.frame_count == 8000
        assert wav.duration == pytest.approx(1.0)
        assert wav.bit_rate == 8000 * 4 * 8

    def test_partial_trailing_frame_dropped(self, make_wav) -> None:
        """Test that a data size that is not a whole number of frames is floored."""
        wav = asyncio.run(parse(make_wav([0] * 4, num_channels=2, data_size=7)))
        assert wav.frame_count == 1

    def test_accepts_small_source_reads(self, make_wav) -> None:
        """Test parsing from a source that returns one byte at a time."""
        data = make_wav([5, 6, 7], extra_chunks=[(b"LIST", b"INFOabcd")])
        wav = asyncio.run(parse(BytesSource(data, chunk_size=1)))
        assert wav.frame_count == 3
        assert wav.data.skipped_chunks == ("LIST",)

    @pytest.mark.parametrize(
        "chunks",
        [
            [],
            [(b"LIST", b"x" * 26)],
            [(b"fact", b"\x04\x00\x00\x00"), (b"JUNK", b""), (b"bext", b"y" * 602)],
        ],
    )
    def test_skips_interleaved_chunks(self, make_wav, chunks) -> None:
        """Test that any number of chunks before data are skipped."""
        wav = asyncio.run(parse(make_wav([1, -1], extra_chunks=chunks)))
        assert wav.data_size == 4
        assert wav.data.skipped_chunks == tuple(c[0].decode() for c in chunks)

    def test_fmt_extension_skipped(self, make_wav) -> None:
        """Test that fmt chunks longer than 16 bytes are fully consumed."""
        data = make_wav([9, 8], fmt_extension=b"\x00\x00")
        reader = ByteReader(BytesSource(data))
        wav = asyncio.run(parse(reader))
        assert wav.fmt.subchunk_size == 18
        assert wav.data_size == 4
        assert reader.position == HEADER_SIZE + 2


class TestParseErrors:
    """Tests for parse failures."""

    def test_wave_instead_of_riff(self, make_wav) -> None:
        """Test that a stream starting with WAVE is not a container."""
        reader = ByteReader(BytesSource(make_wav([1], riff_id=b"WAVE")))
        with pytest.raises(MalformedContainer):
            asyncio.run(parse(reader))
        # Only the first tag was consumed
        assert reader.position == 4

    def test_bad_format_marker(self, make_wav) -> None:
        """Test that a wrong format tag is rejected."""
        with pytest.raises(MalformedContainer):
            asyncio.run(parse(make_wav([1], wave_id=b"AVI ")))

    def test_missing_fmt_chunk(self, make_wav) -> None:
        """Test that fmt must be the first subchunk."""
        with pytest.raises(MissingFormatChunk):
            asyncio.run(parse(make_wav([1], fmt_id=b"LIST")))

    def test_no_data_chunk(self, make_wav) -> None:
        """Test that a stream without a data chunk raises."""
        data = make_wav([1, 2])
        without_data = data[: HEADER_SIZE - 8] + b"LIST" + struct.pack("<I", 2) + b"ab"
        with pytest.raises(UnexpectedEndOfStream):
            asyncio.run(parse(without_data))

    def test_truncated_at_every_offset(self, make_wav) -> None:
        """Test that any truncation before the data size field raises."""
        data = make_wav([1, 2, 3], extra_chunks=[(b"LIST", b"abcdef")])
        for cut in range(len(data) - 6):
            with pytest.raises(UnexpectedEndOfStream):
                asyncio.run(parse(data[:cut]))

    def test_padded_odd_chunk_not_skipped(self, make_wav) -> None:
        """Test that a pad byte after an odd-sized chunk is not consumed."""
        data = make_wav([1, 2])
        fmt_end = HEADER_SIZE - 8
        padded = data[:fmt_end] + b"LIST" + struct.pack("<I", 3) + b"abc\x00" + data[fmt_end:]

        # the next header is read one byte late as "\x00dat" with a bogus size
        with pytest.raises(UnexpectedEndOfStream):
            asyncio.run(parse(padded))

    def test_empty_stream(self) -> None:
        """Test that an empty stream raises UnexpectedEndOfStream."""
        with pytest.raises(UnexpectedEndOfStream):
            asyncio.run(parse(b""))


class TestLoad:
    """Tests for load and parse_file."""

    def test_load_without_waveform(self, alternating_mono) -> None:
        """Test that load only parses by default."""
        wav = asyncio.run(load(alternating_mono))
        assert wav.waveform is None
        assert wav.samples_per_pixel is None

    def test_load_with_waveform(self, alternating_mono) -> None:
        """Test that generate_waveform computes the waveform during load."""
        options = {"generate_waveform": True, "samples_per_pixel": 4}
        wav = asyncio.run(load(alternating_mono, options))
        assert wav.waveform == [[(-20, 20), (-40, 40)]]
        assert wav.samples_per_pixel == 4

    def test_load_rejects_options_before_reading(self, alternating_mono) -> None:
        """Test that invalid options fail before the stream is read."""
        reader = ByteReader(BytesSource(alternating_mono))
        with pytest.raises(InvalidConfiguration):
            asyncio.run(load(reader, {"generate_waveform": True, "samples_per_pixel": 1}))
        assert reader.position == 0

    def test_parse_file(self, tmp_path: Path, alternating_mono) -> None:
        """Test loading a WAV file from disk."""
        path = tmp_path / "alternating.wav"
        path.write_bytes(alternating_mono)

        wav = asyncio.run(parse_file(path, {"generate_waveform": True, "samples_per_pixel": 3}))

        assert wav.frame_count == 8
        assert wav.waveform == [[(-10, 20), (-30, 30), (-40, 40)]]
