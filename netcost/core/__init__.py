"""Configuration, errors, logging and shared types."""

from netcost.core.config import NetworkCostConfig
from netcost.core.errors import (
    InvalidWindowError,
    MalformedTierTableError,
    MetricsQueryError,
    NetworkCostError,
    NoPricingDataError,
    PricingCatalogError,
    UnknownProviderError,
)
from netcost.core.types import PricingGroup, TransferCategory

__all__ = [
    "NetworkCostConfig",
    "NetworkCostError",
    "NoPricingDataError",
    "MetricsQueryError",
    "MalformedTierTableError",
    "PricingCatalogError",
    "InvalidWindowError",
    "UnknownProviderError",
    "PricingGroup",
    "TransferCategory",
]
