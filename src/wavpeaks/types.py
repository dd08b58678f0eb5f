"""Record types shared by the parser and the waveform generator."""

from dataclasses import dataclass, field
from typing import NamedTuple, TypeAlias


@dataclass(frozen=True)
class ContainerHeader:
    """The outer RIFF header."""

    chunk_id: str
    """Container tag, always "RIFF" once parsed."""

    chunk_size: int
    """Declared size of everything after the size field. Not validated."""

    format: str
    """Format tag, always "WAVE" once parsed."""


@dataclass(frozen=True)
class FormatDescriptor:
    """Contents of the ``fmt `` subchunk."""

    subchunk_id: str
    subchunk_size: int
    audio_format: int
    """1 for integer PCM."""

    num_channels: int
    sample_rate: int
    """Frames per second."""

    byte_rate: int
    """Bytes per second, sample_rate * block_align for PCM."""

    block_align: int
    """Bytes per sample frame."""

    bits_per_sample: int

    @property
    def bytes_per_sample(self) -> int:
        return self.bits_per_sample // 8


@dataclass(frozen=True)
class DataDescriptor:
    """Header of the ``data`` subchunk."""

    subchunk_id: str
    size: int
    """Declared size of the sample data in bytes."""

    skipped_chunks: tuple[str, ...] = field(default=())
    """Tags of the chunks skipped between ``fmt `` and ``data``."""


class Peak(NamedTuple):
    """Extremes of one bucket of samples."""

    minimum: int
    maximum: int


Lane: TypeAlias = list[Peak]
WaveForm: TypeAlias = list[Lane]


@dataclass(frozen=True)
class WaveformOptions:
    """Settings for waveform generation."""

    samples_per_pixel: int = 256
    """Sample frames summarized by each bucket. Must be at least 2."""

    split_channels: bool = False
    """One lane per source channel instead of a single averaged lane."""

    generate_waveform: bool = False
    """Compute the waveform as part of ``load``."""


DEFAULT_OPTIONS = WaveformOptions()
