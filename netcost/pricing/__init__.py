"""
Tiered pricing: unit conversion, tier tables, allocation and the AWS
price catalog.
"""

from netcost.pricing.allocator import allocate
from netcost.pricing.models import (
    AllocationResult,
    PriceTier,
    TierAllocation,
    validate_tier_table,
)
from netcost.pricing.units import BYTES_PER_GB, bytes_to_gb, gb_to_bytes

__all__ = [
    "allocate",
    "AllocationResult",
    "PriceTier",
    "TierAllocation",
    "validate_tier_table",
    "BYTES_PER_GB",
    "bytes_to_gb",
    "gb_to_bytes",
]
