"""Byte/gigabyte conversion (binary gigabytes, 1024**3 bytes)."""

from __future__ import annotations

import math

BYTES_PER_GB = 1024 ** 3


def bytes_to_gb(num_bytes: int) -> float:
    """Convert a byte count to binary gigabytes."""
    return num_bytes / BYTES_PER_GB


def gb_to_bytes(gb: float) -> int:
    """Convert binary gigabytes to a whole byte count, rounding half up."""
    return int(math.floor(gb * BYTES_PER_GB + 0.5))
