"""Merging and validation of waveform options."""

import numbers
from collections.abc import Mapping
from dataclasses import fields, replace
from typing import Any

from wavpeaks.errors import InvalidConfiguration
from wavpeaks.types import DEFAULT_OPTIONS, WaveformOptions

MIN_SAMPLES_PER_PIXEL = 2

_OPTION_NAMES = frozenset(f.name for f in fields(WaveformOptions))


def merge_options(
    overrides: WaveformOptions | Mapping[str, Any] | None = None,
    base: WaveformOptions = DEFAULT_OPTIONS,
) -> WaveformOptions:
    """Return ``base`` with the fields in ``overrides`` replaced.

    A ``WaveformOptions`` instance is taken as-is. A mapping only replaces the
    keys it contains, so ``{"split_channels": True}`` keeps the default bucket
    size.

    Raises:
        InvalidConfiguration: If the mapping names an unknown option.
    """
    if overrides is None:
        return base
    if isinstance(overrides, WaveformOptions):
        return overrides

    unknown = sorted(set(overrides) - _OPTION_NAMES)
    if unknown:
        raise InvalidConfiguration(f"Unknown option(s): {', '.join(unknown)}", field=unknown[0])
    return replace(base, **dict(overrides))


def validate_options(options: WaveformOptions) -> WaveformOptions:
    """Check that ``options`` can drive a waveform computation.

    Raises:
        InvalidConfiguration: If a value is out of range or of the wrong type.
    """
    spp = options.samples_per_pixel
    # bool is an int subclass but never a sensible bucket size
    if not isinstance(spp, numbers.Integral) or isinstance(spp, bool):
        raise InvalidConfiguration(
            f"samples_per_pixel must be an integer, got {type(spp).__name__}",
            field="samples_per_pixel",
        )
    if spp < MIN_SAMPLES_PER_PIXEL:
        raise InvalidConfiguration(
            f"samples_per_pixel must be at least {MIN_SAMPLES_PER_PIXEL}, got {spp}",
            field="samples_per_pixel",
        )
    if not isinstance(options.split_channels, bool):
        raise InvalidConfiguration(
            f"split_channels must be a bool, got {type(options.split_channels).__name__}",
            field="split_channels",
        )
    if type(spp) is not int:
        # numpy integers and other Integral types
        options = replace(options, samples_per_pixel=int(spp))
    return options
