"""
Network cost provider interface and registry.

A provider knows how to price one cloud's network transfer. Providers are
registered under a name and instantiated by the service; their external
clients are passed in explicitly rather than held in module state.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Protocol, Sequence, Type

import structlog

from netcost.attribution.accumulator import BilledLineItem
from netcost.attribution.windows import Window
from netcost.core.config import NetworkCostConfig
from netcost.core.errors import UnknownProviderError
from netcost.core.types import PricingGroup, TransferCategory
from netcost.metrics.models import UsageSample
from netcost.pricing.models import PriceTier

logger = structlog.get_logger(__name__)


class PricingCatalog(Protocol):
    """Source of tier tables, sorted ascending by begin range."""

    async def get_price_tiers(self, group: PricingGroup, region: str) -> Sequence[PriceTier]:
        ...


class UsageMetricsSource(Protocol):
    """Source of transfer usage samples and billing-period baselines."""

    async def get_baseline_usage(
        self,
        billing_period_start: datetime,
        window_start: datetime,
        category: TransferCategory,
    ) -> int:
        ...

    async def get_window_samples(
        self,
        category: TransferCategory,
        window_start: datetime,
        window_end: datetime,
        step: timedelta,
    ) -> List[UsageSample]:
        ...


@dataclass
class CategoryCosts:
    """
    Line items of one pricing group, per category, plus the errors of the
    categories that could not be computed.
    """
    costs: Dict[TransferCategory, List[BilledLineItem]] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    def line_items(self) -> List[BilledLineItem]:
        return [item for items in self.costs.values() for item in items]


class NetworkCostProvider(ABC):
    """Computes billed network transfer costs for one cloud provider."""

    name: str = ""

    @abstractmethod
    async def init(self, config: NetworkCostConfig) -> None:
        """Prepare clients from configuration."""
        pass

    @abstractmethod
    async def compute_costs(
        self,
        window: Window,
        group: PricingGroup,
        region: str,
    ) -> CategoryCosts:
        """
        Compute line items for every category of ``group`` in ``window``.

        A category that fails is reported in the result's errors; the
        categories completed before it keep their line items.

        Raises:
            NetworkCostError: if pricing or baseline data for the whole group
                cannot be obtained or is invalid
        """
        pass

    async def close(self) -> None:
        """Release clients."""
        pass


_PROVIDERS: Dict[str, Type[NetworkCostProvider]] = {}


def register_provider(name: str) -> Callable[[Type[NetworkCostProvider]], Type[NetworkCostProvider]]:
    """Class decorator registering a provider under ``name``."""

    def decorator(cls: Type[NetworkCostProvider]) -> Type[NetworkCostProvider]:
        if name in _PROVIDERS and _PROVIDERS[name] is not cls:
            logger.warning("Replacing registered network cost provider", provider=name)
        cls.name = name
        _PROVIDERS[name] = cls
        return cls

    return decorator


def get_provider_class(name: str) -> Type[NetworkCostProvider]:
    """Look up a registered provider class."""
    try:
        return _PROVIDERS[name]
    except KeyError:
        raise UnknownProviderError(name, available_providers()) from None


def available_providers() -> List[str]:
    return sorted(_PROVIDERS)
