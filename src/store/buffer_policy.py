"""Size-tiered IO buffer selection.

Small collection files get small buffers and large files get large
ones, keeping per-read overhead and idle memory both low.
"""

from __future__ import annotations

from core.constants import BUFFER_SIZE_TIERS, LARGEST_BUFFER_SIZE


def select_buffer_size(file_size: int) -> int:
    """Pick a read/write buffer size for a file.

    Args:
        file_size: Current file size in bytes.

    Returns:
        Buffer size in bytes from the tier table.

    Raises:
        ValueError: If file size is negative.
    """
    if file_size < 0:
        raise ValueError(f"File size must be non-negative, got {file_size}.")
    for upper_bound, buffer_size in BUFFER_SIZE_TIERS:
        if file_size <= upper_bound:
            return buffer_size
    return LARGEST_BUFFER_SIZE
