import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console
from rich.table import Table

from wavpeaks.cli.validators import validate_samples_per_pixel
from wavpeaks.errors import WavError
from wavpeaks.riff import parse_file
from wavpeaks.types import WaveformOptions

app = App(name="wavpeaks", help="Inspect PCM WAV files and build waveform peak data")
console = Console()


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(message, style="bold red")


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(message, style="bold green")


def configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


@app.command
def info(
    file: Path,
    output_json: Annotated[bool, Parameter(name=["--json"])] = False,
    verbose: bool = False,
) -> int:
    """
    Display the header information of a WAV file.

    Parameters
    ----------
    file: Path
        The path to the .wav file
    output_json: bool
        Output the metadata as JSON (default: False)
    verbose: bool
        Log parser activity to stderr (default: False)
    """
    configure_logging(verbose)

    if not file.exists():
        print_error(f"Error: File {file} does not exist")
        return 1

    try:
        wav = asyncio.run(parse_file(file))
    except (WavError, OSError) as e:
        print_error(f"Error: {e}")
        return 1

    if output_json:
        console.print_json(wav.to_json())
        return 0

    table = Table(title=str(file))
    table.add_column("Field")
    table.add_column("Value", justify="right")
    table.add_row("Audio format", str(wav.fmt.audio_format))
    table.add_row("Channels", str(wav.num_channels))
    table.add_row("Sample rate", f"{wav.sample_rate} Hz")
    table.add_row("Bits per sample", str(wav.bits_per_sample))
    table.add_row("Block align", str(wav.fmt.block_align))
    table.add_row("Byte rate", str(wav.byte_rate))
    table.add_row("Bit rate", f"{wav.bit_rate} bit/s")
    table.add_row("Data size", f"{wav.data_size} bytes")
    table.add_row("Frames", str(wav.frame_count))
    table.add_row("Duration", f"{wav.duration:.3f} s")
    if wav.data.skipped_chunks:
        table.add_row("Skipped chunks", ", ".join(repr(c) for c in wav.data.skipped_chunks))
    console.print(table)
    return 0


@app.command
def waveform(
    file: Path,
    samples_per_pixel: Annotated[int, Parameter(validator=validate_samples_per_pixel)] = 256,
    split_channels: bool = False,
    output: Path | None = None,
    verbose: bool = False,
) -> int:
    """
    Compute waveform peaks for a WAV file and write them as JSON.

    Parameters
    ----------
    file: Path
        The path to the .wav file
    samples_per_pixel: int
        Sample frames summarized by each peak. Must be at least 2 (default: 256)
    split_channels: bool
        Produce one lane per channel instead of averaging them (default: False)
    output: Path | None
        Destination .json file. Prints to stdout when omitted
    verbose: bool
        Log parser activity to stderr (default: False)
    """
    configure_logging(verbose)

    if not file.exists():
        print_error(f"Error: File {file} does not exist")
        return 1

    options = WaveformOptions(
        samples_per_pixel=samples_per_pixel,
        split_channels=split_channels,
        generate_waveform=True,
    )
    try:
        wav = asyncio.run(parse_file(file, options))
    except (WavError, OSError) as e:
        print_error(f"Error: {e}")
        return 1

    if output is None:
        console.print_json(wav.to_json())
        return 0

    try:
        output.write_text(json.dumps(wav.to_dict(), indent=2))
    except OSError as e:
        print_error(f"Error: Cannot write {output}: {e}")
        return 1

    lanes = wav.waveform or []
    print_success(
        f"Wrote {len(lanes)} lane(s) of {len(lanes[0]) if lanes else 0} peaks to {output}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(app())
