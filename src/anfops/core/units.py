"""Size conversions used for pool and volume quotas."""

_GIB = 1024**3
_TIB = 1024**4


def gib_to_bytes(size: int) -> int:
    """Convert gibibytes (GiB) to bytes."""
    return size * _GIB


def tib_to_bytes(size: int) -> int:
    """Convert tebibytes (TiB) to bytes."""
    return size * _TIB


def bytes_to_gib(size: int) -> int:
    """Convert bytes to whole gibibytes, rounding down."""
    return size // _GIB


def bytes_to_tib(size: int) -> int:
    """Convert bytes to whole tebibytes, rounding down."""
    return size // _TIB
