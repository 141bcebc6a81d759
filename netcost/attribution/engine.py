"""
Category allocation: classify samples, bill them across tiers and
accumulate the result per workload.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import structlog

from netcost.attribution.accumulator import WorkloadCostAccumulator
from netcost.attribution.classifier import classify
from netcost.core.types import TransferCategory
from netcost.metrics.models import UsageSample
from netcost.pricing.allocator import allocate
from netcost.pricing.models import PriceTier, validate_tier_table

logger = structlog.get_logger(__name__)


def allocate_category(
    samples: Iterable[UsageSample],
    category: TransferCategory,
    tiers: Sequence[PriceTier],
    baseline_bytes: int,
    accumulator: WorkloadCostAccumulator,
) -> int:
    """
    Bill every billable sample of ``category`` on top of a shared baseline.

    Samples are processed in order and each allocation starts from the
    baseline left by the previous one.

    Returns:
        The baseline after all samples have been billed

    Raises:
        MalformedTierTableError: if ``tiers`` is not a valid tier table
    """
    validate_tier_table(tiers)
    resource_name = category.resource_name

    for sample in samples:
        billable, workload = classify(sample, category)
        if not billable:
            continue

        for step, (timestamp, value) in enumerate(sample.values):
            if step > 0:
                logger.warning(
                    "Query returned data for additional step when only 1 was expected",
                    category=category.value,
                    timestamp=timestamp.isoformat(),
                    value=value,
                )
                continue

            pending_bytes = int(value)
            if pending_bytes < 0:
                logger.warning(
                    "Ignoring negative usage value",
                    category=category.value,
                    workload=str(workload),
                    value=value,
                )
                continue

            result = allocate(baseline_bytes, pending_bytes, tiers)
            baseline_bytes = result.baseline_bytes

            for item in result.items:
                accumulator.upsert(workload, resource_name, item.billed_gb, item.billed_cost)

    return baseline_bytes
