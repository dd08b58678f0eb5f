"""Shared fixtures for building WAV byte streams in tests."""

import struct
from collections.abc import Callable, Sequence

import numpy as np
import pytest

WavBuilder = Callable[..., bytes]


def build_wav(
    samples: Sequence[int] | np.ndarray = (),
    *,
    num_channels: int = 1,
    sample_rate: int = 8000,
    bits_per_sample: int = 16,
    extra_chunks: Sequence[tuple[bytes, bytes]] = (),
    fmt_extension: bytes = b"",
    data_size: int | None = None,
    riff_id: bytes = b"RIFF",
    wave_id: bytes = b"WAVE",
    fmt_id: bytes = b"fmt ",
) -> bytes:
    """Build a PCM WAV byte string.

    ``samples`` are interleaved values; ``extra_chunks`` are (id, payload)
    pairs placed between the fmt and data chunks. ``data_size`` overrides the
    declared data chunk size.
    """
    dtype = "<i2" if bits_per_sample == 16 else "i1"
    payload = np.asarray(samples, dtype=dtype).tobytes()
    block_align = num_channels * bits_per_sample // 8
    byte_rate = sample_rate * block_align

    fmt_body = struct.pack(
        "<HHIIHH",
        1,
        num_channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
    )
    fmt_body += fmt_extension

    body = bytearray(wave_id)
    body += fmt_id + struct.pack("<I", len(fmt_body)) + fmt_body
    for chunk_id, chunk_payload in extra_chunks:
        body += chunk_id + struct.pack("<I", len(chunk_payload)) + chunk_payload
    declared = len(payload) if data_size is None else data_size
    body += b"data" + struct.pack("<I", declared) + payload

    return riff_id + struct.pack("<I", len(body)) + bytes(body)


@pytest.fixture(scope="session")
def make_wav() -> WavBuilder:
    """Return the ``build_wav`` helper."""
    return build_wav


@pytest.fixture(scope="session")
def alternating_mono() -> bytes:
    """16-bit mono stream with frames 10, -10, 20, -20, 30, -30, 40, -40."""
    return build_wav([10, -10, 20, -20, 30, -30, 40, -40])
