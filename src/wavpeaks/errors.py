"""Exceptions raised while reading WAV streams and building waveforms."""


class WavError(Exception):
    """Error reading a WAV stream."""


class MalformedContainer(WavError):
    """The RIFF or WAVE marker is missing or wrong."""


class UnsupportedSampleFormat(MalformedContainer):
    """The stream holds samples this reader cannot decode."""


class MissingFormatChunk(WavError):
    """The first subchunk is not the ``fmt `` chunk."""


class UnexpectedEndOfStream(WavError):
    """The source ran out of bytes before a read could be satisfied."""

    def __init__(self, expected: int, received: int) -> None:
        self.expected = expected
        self.received = received
        super().__init__(
            f"Unexpected end of stream: needed {expected} bytes, got {received}"
        )


class InvalidConfiguration(WavError, ValueError):
    """An option value was rejected."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)
