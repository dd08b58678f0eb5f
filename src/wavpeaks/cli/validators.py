from wavpeaks.options import MIN_SAMPLES_PER_PIXEL


def validate_samples_per_pixel(type_: object, value: int) -> None:
    """Validate that the bucket size is large enough."""
    if value < MIN_SAMPLES_PER_PIXEL:
        raise ValueError(f"Samples per pixel must be at least {MIN_SAMPLES_PER_PIXEL}")
