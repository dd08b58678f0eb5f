"""wavpeaks - streaming WAV header parsing and waveform peaks.

This package reads PCM RIFF/WAVE data from any asynchronous byte source,
extracts the format metadata and decimates the samples into (min, max)
pairs suitable for drawing a waveform preview.

Example Usage
-------------
>>> import asyncio
>>> from wavpeaks import parse_file
>>>
>>> async def main():
...     wav = await parse_file(
...         "take.wav",
...         {"generate_waveform": True, "samples_per_pixel": 512},
...     )
...     print(wav.duration, len(wav.waveform[0]))
>>>
>>> asyncio.run(main())

Streams work the same way; the header is parsed first and the waveform
is computed from where the parse stopped:

>>> wav = await parse(stream_reader)
>>> lanes = await wav.compute_waveform({"split_channels": True})
"""

from wavpeaks.errors import (
    InvalidConfiguration,
    MalformedContainer,
    MissingFormatChunk,
    UnexpectedEndOfStream,
    UnsupportedSampleFormat,
    WavError,
)
from wavpeaks.metadata import WaveMetadata
from wavpeaks.options import merge_options, validate_options
from wavpeaks.riff import load, parse, parse_file
from wavpeaks.stream import ByteReader, ByteSource, BytesSource, FileSource
from wavpeaks.types import (
    DEFAULT_OPTIONS,
    ContainerHeader,
    DataDescriptor,
    FormatDescriptor,
    Peak,
    WaveForm,
    WaveformOptions,
)

__all__ = [
    # Parsing
    "parse",
    "load",
    "parse_file",
    "WaveMetadata",
    # Types
    "ContainerHeader",
    "FormatDescriptor",
    "DataDescriptor",
    "Peak",
    "WaveForm",
    "WaveformOptions",
    "DEFAULT_OPTIONS",
    # Options
    "merge_options",
    "validate_options",
    # Streams
    "ByteReader",
    "ByteSource",
    "BytesSource",
    "FileSource",
    # Errors
    "WavError",
    "MalformedContainer",
    "UnsupportedSampleFormat",
    "MissingFormatChunk",
    "UnexpectedEndOfStream",
    "InvalidConfiguration",
]
