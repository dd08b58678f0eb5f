"""Single-pass min/max decimation of PCM sample data.

The generator reads every sample frame exactly once, in stream order, and
folds each run of ``samples_per_pixel`` frames into one ``Peak`` per lane:

    frames:   |f0 f1 f2 f3|f4 f5 f6 f7|f8 f9|
    lane:     | Peak 0    | Peak 1    |P 2 |

The last bucket covers whatever frames remain, so a lane holds
``ceil(frame_count / samples_per_pixel)`` peaks.

Frames are pulled from the stream in blocks of at most ``READ_BLOCK_FRAMES``
and never across a bucket boundary, which keeps memory bounded regardless of
the bucket size.
"""

import logging

import numpy as np
from numpy.typing import NDArray

from wavpeaks.errors import UnsupportedSampleFormat
from wavpeaks.stream import SAMPLE_DTYPES, ByteReader
from wavpeaks.types import FormatDescriptor, Peak, WaveForm, WaveformOptions

logger = logging.getLogger(__name__)

READ_BLOCK_FRAMES = 4096

# Identity elements for min/max; never emitted since every bucket holds a frame
_MIN_SENTINEL = np.iinfo(np.int64).max
_MAX_SENTINEL = np.iinfo(np.int64).min


class _Accumulator:
    """Running (min, max) per lane for the bucket in progress."""

    def __init__(self, num_lanes: int) -> None:
        self.lo = np.full(num_lanes, _MIN_SENTINEL, dtype=np.int64)
        self.hi = np.full(num_lanes, _MAX_SENTINEL, dtype=np.int64)

    def update(self, values: NDArray[np.int64]) -> None:
        """Fold a (frames, lanes) block into the running extremes."""
        np.minimum(self.lo, values.min(axis=0), out=self.lo)
        np.maximum(self.hi, values.max(axis=0), out=self.hi)

    def flush(self, lanes: WaveForm) -> None:
        for lane, lo, hi in zip(lanes, self.lo, self.hi, strict=True):
            lane.append(Peak(int(lo), int(hi)))
        self.lo.fill(_MIN_SENTINEL)
        self.hi.fill(_MAX_SENTINEL)


def merge_channels(frames: NDArray[np.int64]) -> NDArray[np.int64]:
    """Average the channels of each frame into a single column.

    The sum is floor-divided by the channel count so peaks stay integers in
    the sample's native range.
    """
    num_channels = frames.shape[1]
    return (frames.sum(axis=1) // num_channels).reshape(-1, 1)


async def compute_waveform(
    reader: ByteReader,
    fmt: FormatDescriptor,
    frame_count: int,
    options: WaveformOptions,
) -> WaveForm:
    """Decimate ``frame_count`` frames from ``reader`` into peaks.

    Args:
        reader: Reader positioned at the first sample byte.
        fmt: Format of the samples.
        frame_count: Number of sample frames to consume.
        options: Validated options; ``samples_per_pixel`` sets the bucket
            size and ``split_channels`` the lane layout.

    Returns:
        One lane when channels are merged, ``num_channels`` lanes otherwise.

    Raises:
        UnsupportedSampleFormat: If the sample width is not 8 or 16 bits.
        UnexpectedEndOfStream: If the stream holds fewer frames than declared.
    """
    if fmt.bits_per_sample not in SAMPLE_DTYPES:
        raise UnsupportedSampleFormat(
            f"Unsupported bits per sample: {fmt.bits_per_sample} (expected 8 or 16)"
        )

    num_channels = fmt.num_channels
    spp = options.samples_per_pixel
    num_lanes = num_channels if options.split_channels else 1
    lanes: WaveForm = [[] for _ in range(num_lanes)]
    if frame_count <= 0 or num_channels <= 0:
        return lanes

    acc = _Accumulator(num_lanes)
    remaining = frame_count
    in_bucket = 0

    while remaining > 0:
        take = min(remaining, spp - in_bucket, READ_BLOCK_FRAMES)
        samples = await reader.read_samples(take * num_channels, fmt.bits_per_sample)
        frames = samples.reshape(take, num_channels)
        acc.update(frames if options.split_channels else merge_channels(frames))

        in_bucket += take
        remaining -= take
        if in_bucket == spp or remaining == 0:
            acc.flush(lanes)
            in_bucket = 0

    logger.debug(
        "Built waveform: %d frames, %d lane(s) of %d peaks",
        frame_count,
        num_lanes,
        len(lanes[0]),
    )
    return lanes
