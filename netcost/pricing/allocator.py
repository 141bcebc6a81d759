"""
Tiered usage allocation.

Bills pending usage against a graduated price table, starting from the
cumulative usage already billed in the current billing period. The baseline
returned by one allocation seeds the next, so successive calls walk up the
tiers exactly as the provider's invoice would.
"""

from __future__ import annotations

from typing import Sequence

import structlog

from netcost.pricing.models import (
    AllocationResult,
    PriceTier,
    TierAllocation,
    to_float32,
    validate_tier_table,
)
from netcost.pricing.units import bytes_to_gb, gb_to_bytes

logger = structlog.get_logger(__name__)


def allocate(
    baseline_bytes: int,
    pending_bytes: int,
    tiers: Sequence[PriceTier],
) -> AllocationResult:
    """
    Bill ``pending_bytes`` across ``tiers`` on top of ``baseline_bytes``.

    Args:
        baseline_bytes: Bytes already billed in the current billing period
        pending_bytes: New bytes to bill
        tiers: Sorted, contiguous tier table ending in an unbounded tier

    Returns:
        The per-tier breakdown and the baseline after billing

    Raises:
        MalformedTierTableError: if ``tiers`` violates the table invariants
        ValueError: if ``pending_bytes`` is negative
    """
    validate_tier_table(tiers)
    if pending_bytes < 0:
        raise ValueError(f"pending usage must not be negative, got {pending_bytes}")

    items: list[TierAllocation] = []
    cumulative_gb = bytes_to_gb(baseline_bytes)

    for index, tier in enumerate(tiers):
        if pending_bytes <= 0:
            break

        # Tier already used up earlier in the billing period
        if cumulative_gb >= tier.end_gb:
            continue

        capacity_gb = tier.end_gb - cumulative_gb
        billed_gb = min(bytes_to_gb(pending_bytes), capacity_gb)

        items.append(
            TierAllocation(
                tier_index=index,
                billed_gb=to_float32(billed_gb),
                billed_cost=to_float32(billed_gb * tier.price_per_unit_usd),
            )
        )

        billed_bytes = gb_to_bytes(billed_gb)
        baseline_bytes += billed_bytes
        pending_bytes -= billed_bytes
        cumulative_gb = bytes_to_gb(baseline_bytes)

    logger.debug(
        "Usage allocated across tiers",
        tiers_billed=len(items),
        baseline_bytes=baseline_bytes,
    )

    return AllocationResult(items=items, baseline_bytes=baseline_bytes)
