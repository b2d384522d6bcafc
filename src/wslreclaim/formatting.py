"""Size formatting for disk usage reports."""

KB_PER_GB = 1048576
KB_PER_MB = 1024
# One tenth of a gigabyte in KB, truncated. Kept as an integer so the
# decimal digit is a truncating integer division.
KB_PER_TENTH_GB = 104857


def is_large(size_kb: int) -> bool:
    """Whether a size falls in the gigabyte class."""
    return size_kb >= KB_PER_GB


def format_size_kb(size_kb: int) -> str:
    """
    Format a size in KB as a fixed-width string.

    Gigabytes get one decimal digit, megabytes and kilobytes are whole
    numbers. All divisions truncate.

    Args:
        size_kb: Size in kilobytes

    Returns:
        Display string, e.g. "   1.9G", "   146M" or "   512K"
    """
    if size_kb < 0:
        raise ValueError(f"size must be non-negative, got {size_kb}")

    if size_kb >= KB_PER_GB:
        gb = size_kb // KB_PER_GB
        tenths = (size_kb % KB_PER_GB) // KB_PER_TENTH_GB
        return "%4d.%1dG" % (gb, tenths)
    elif size_kb >= KB_PER_MB:
        return "%6dM" % (size_kb // KB_PER_MB)
    else:
        return "%6dK" % size_kb


def format_bytes(size_bytes: int) -> str:
    """Format a byte count using the same policy as format_size_kb."""
    return format_size_kb(max(size_bytes, 0) // 1024).strip()
