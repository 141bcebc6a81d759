"""
AWS network cost provider.

Inter-zone transfer is priced with the region's ``DataTransfer-Regional``
tiers; ingress and egress are billed against one cumulative baseline,
ingress first. Internet egress is priced with the region's
``DataTransfer-Out`` tiers against its own baseline.
"""

from __future__ import annotations

from typing import Optional

import structlog

from netcost.attribution.accumulator import WorkloadCostAccumulator
from netcost.attribution.engine import allocate_category
from netcost.attribution.windows import Window, billing_period_start
from netcost.core.config import NetworkCostConfig
from netcost.core.errors import NoPricingDataError
from netcost.core.types import PricingGroup, TransferCategory
from netcost.metrics.prometheus import PrometheusClient, PrometheusUsageSource
from netcost.pricing.aws import AwsPricingCatalog
from netcost.pricing.models import validate_tier_table
from netcost.providers.base import (
    CategoryCosts,
    NetworkCostProvider,
    PricingCatalog,
    UsageMetricsSource,
    register_provider,
)

logger = structlog.get_logger(__name__)


@register_provider("aws")
class AwsProvider(NetworkCostProvider):
    """
    Prices NetObserv flow metrics with AWS data transfer tiers.

    Collaborators may be injected; ``init`` builds the missing ones from
    configuration.
    """

    def __init__(
        self,
        catalog: Optional[PricingCatalog] = None,
        usage_source: Optional[UsageMetricsSource] = None,
        billing_period_start_day: int = 1,
    ):
        self.catalog = catalog
        self.usage_source = usage_source
        self.billing_period_start_day = billing_period_start_day
        self._prometheus: Optional[PrometheusClient] = None

    async def init(self, config: NetworkCostConfig) -> None:
        self.billing_period_start_day = config.billing.period_start_day

        if self.catalog is None:
            self.catalog = AwsPricingCatalog(
                profile=config.pricing.aws_profile,
                timeout=config.pricing.timeout,
            )

        if self.usage_source is None:
            self._prometheus = PrometheusClient(
                url=config.prometheus.url,
                timeout=config.prometheus.timeout,
                headers=config.prometheus.headers,
            )
            self.usage_source = PrometheusUsageSource(
                self._prometheus,
                step=config.prometheus.baseline_step,
            )

        logger.info(
            "AWS network cost provider initialized",
            prometheus_url=config.prometheus.url,
            billing_period_start_day=self.billing_period_start_day,
        )

    async def close(self) -> None:
        if self._prometheus is not None:
            await self._prometheus.close()

    async def compute_costs(
        self,
        window: Window,
        group: PricingGroup,
        region: str,
    ) -> CategoryCosts:
        tiers = await self.catalog.get_price_tiers(group, region)
        if not tiers:
            raise NoPricingDataError(group.value, region)
        validate_tier_table(tiers)

        categories = TransferCategory.for_group(group)
        period_start = billing_period_start(window.start, self.billing_period_start_day)

        baseline_bytes = 0
        for category in categories:
            baseline_bytes += await self.usage_source.get_baseline_usage(
                period_start, window.start, category
            )

        logger.debug(
            "Billing baseline loaded",
            group=group.value,
            window=str(window),
            billing_period_start=period_start.isoformat(),
            baseline_bytes=baseline_bytes,
        )

        result = CategoryCosts()
        for index, category in enumerate(categories):
            try:
                samples = await self.usage_source.get_window_samples(
                    category, window.start, window.end, window.duration
                )
                accumulator = WorkloadCostAccumulator()
                baseline_bytes = allocate_category(samples, category, tiers, baseline_bytes, accumulator)
            except Exception as e:
                logger.error(
                    "Error calculating category network costs",
                    category=category.value,
                    window=str(window),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                result.errors.append(
                    f"failed to calculate {category.resource_name} costs for window {window}: {e}"
                )
                # Later categories would bill on top of an unknown baseline
                for skipped in categories[index + 1:]:
                    result.errors.append(
                        f"skipped {skipped.resource_name} costs for window {window}: "
                        f"{category.resource_name} could not be billed"
                    )
                break
            result.costs[category] = accumulator.line_items()

        return result
