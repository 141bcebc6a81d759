"""
Price tier data model.

A tier table is an ordered list of contiguous usage ranges, each billed at a
constant unit price. Only the final tier is unbounded.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from netcost.core.errors import MalformedTierTableError


def to_float32(value: float) -> float:
    """
    Round a value to single precision.

    Billed amounts are reported as single precision floats, which is the
    currency rounding boundary for every downstream consumer.
    """
    return float(np.float32(value))


@dataclass(frozen=True)
class PriceTier:
    """A contiguous usage range (in GB) billed at one unit price."""
    begin_gb: float
    end_gb: float
    price_per_unit_usd: float
    unit: str = "GB"
    description: str = ""

    @property
    def is_unbounded(self) -> bool:
        return math.isinf(self.end_gb)

    def to_dict(self) -> dict:
        return {
            "begin_gb": self.begin_gb,
            "end_gb": "Inf" if self.is_unbounded else self.end_gb,
            "price_per_unit_usd": self.price_per_unit_usd,
            "unit": self.unit,
            "description": self.description,
        }


@dataclass(frozen=True)
class TierAllocation:
    """Usage billed at a single tier by one allocation."""
    tier_index: int
    billed_gb: float
    billed_cost: float


@dataclass(frozen=True)
class AllocationResult:
    """Per-tier breakdown of one allocation plus the updated baseline."""
    items: list[TierAllocation]
    baseline_bytes: int

    @property
    def total_gb(self) -> float:
        return sum(item.billed_gb for item in self.items)

    @property
    def total_cost(self) -> float:
        return sum(item.billed_cost for item in self.items)


def validate_tier_table(tiers: Sequence[PriceTier]) -> None:
    """
    Check the invariants the allocator relies on.

    Raises:
        MalformedTierTableError: if the table is empty, unsorted, has gaps or
            overlaps, or does not end in exactly one unbounded tier.
    """
    if not tiers:
        raise MalformedTierTableError("tier table is empty")

    for index, tier in enumerate(tiers):
        if tier.end_gb <= tier.begin_gb:
            raise MalformedTierTableError(
                f"end {tier.end_gb} is not after begin {tier.begin_gb}", index
            )
        if tier.price_per_unit_usd < 0:
            raise MalformedTierTableError("negative unit price", index)

        is_last = index == len(tiers) - 1
        if tier.is_unbounded and not is_last:
            raise MalformedTierTableError("only the last tier may be unbounded", index)
        if is_last and not tier.is_unbounded:
            raise MalformedTierTableError("last tier must be unbounded", index)

        if index > 0:
            previous = tiers[index - 1]
            if tier.begin_gb < previous.begin_gb:
                raise MalformedTierTableError("tiers are not sorted by begin range", index)
            if tier.begin_gb != previous.end_gb:
                raise MalformedTierTableError(
                    f"tier begins at {tier.begin_gb} but previous tier ends at {previous.end_gb}",
                    index,
                )
