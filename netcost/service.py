"""
Network Cost Service

Entry point for a cost request:
- Expands the request range into windows
- Skips windows that have not started yet
- Computes every pricing group per window through the provider
- Attaches group-scoped errors without aborting the request
- Emits one response per window to the configured sink
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol

import structlog

from netcost.attribution.accumulator import BilledLineItem
from netcost.attribution.windows import Window, expand_windows
from netcost.core.config import NetworkCostConfig
from netcost.core.errors import NetworkCostError
from netcost.core.types import PricingGroup
from netcost.providers import NetworkCostProvider, get_provider_class

logger = structlog.get_logger(__name__)


@dataclass
class CostResponse:
    """Costs and errors for one window."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    domain: str = "netcost"
    cost_source: str = "network"
    version: str = "v1"
    currency: str = "USD"
    metadata: Dict[str, str] = field(default_factory=lambda: {"api_client_version": "v1"})
    errors: List[str] = field(default_factory=list)
    costs: List[BilledLineItem] = field(default_factory=list)

    @property
    def total_cost(self) -> float:
        return sum(cost.billed_cost for cost in self.costs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metadata": dict(self.metadata),
            "cost_source": self.cost_source,
            "domain": self.domain,
            "version": self.version,
            "currency": self.currency,
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
            "errors": list(self.errors),
            "costs": [cost.to_dict() for cost in self.costs],
        }


class CostSink(Protocol):
    """Receives one response per processed window."""

    def emit(self, response: CostResponse) -> None:
        ...


class CollectingSink:
    """Sink that keeps every emitted response in memory."""

    def __init__(self):
        self.responses: List[CostResponse] = []

    def emit(self, response: CostResponse) -> None:
        self.responses.append(response)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NetworkCostService:
    """
    Computes per-workload network transfer costs for a time range.

    Windows are processed one after another; each window gets its own
    baselines and accumulators inside the provider.
    """

    def __init__(
        self,
        provider: NetworkCostProvider,
        region: str,
        domain: str = "netcost",
        sink: Optional[CostSink] = None,
        clock: Callable[[], datetime] = _utcnow,
        groups: Optional[List[PricingGroup]] = None,
    ):
        self.provider = provider
        self.region = region
        self.domain = domain
        self.sink = sink or CollectingSink()
        self.clock = clock
        self.groups = groups or list(PricingGroup)

    @classmethod
    async def from_config(
        cls,
        config: NetworkCostConfig,
        sink: Optional[CostSink] = None,
    ) -> "NetworkCostService":
        """Build the configured provider and a service around it."""
        provider = get_provider_class(config.provider)()
        await provider.init(config)
        return cls(provider=provider, region=config.region, domain=config.domain, sink=sink)

    async def close(self) -> None:
        await self.provider.close()

    async def get_network_costs(
        self,
        start: datetime,
        end: datetime,
        resolution: timedelta,
    ) -> List[CostResponse]:
        """
        Compute one response per elapsed window of ``[start, end)``.

        Never raises for data or pricing problems; they are reported in the
        ``errors`` of the affected response.
        """
        try:
            windows = expand_windows(start, end, resolution)
        except NetworkCostError as e:
            message = f"failed to create windows from request parameters: {e}"
            logger.error(message)
            response = CostResponse(domain=self.domain, errors=[message])
            self.sink.emit(response)
            return [response]

        now = self.clock()
        responses = []
        for window in windows:
            if window.is_future(now):
                logger.debug("Skipping future window", window=str(window))
                continue

            response = await self.compute_window(window)
            self.sink.emit(response)
            responses.append(response)

        logger.info(
            "Network costs computed",
            provider=self.provider.name,
            region=self.region,
            windows=len(responses),
            errors=sum(len(r.errors) for r in responses),
        )
        return responses

    async def compute_window(self, window: Window) -> CostResponse:
        """Compute every pricing group for a single window."""
        response = CostResponse(start=window.start, end=window.end, domain=self.domain)

        for group in self.groups:
            try:
                result = await self.provider.compute_costs(window, group, self.region)
            except Exception as e:
                message = f"failed to calculate {group.value} network costs for window {window}: {e}"
                logger.error(
                    "Error calculating network costs",
                    group=group.value,
                    window=str(window),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                response.errors.append(message)
                continue

            response.costs.extend(result.line_items())
            response.errors.extend(result.errors)

        return response
