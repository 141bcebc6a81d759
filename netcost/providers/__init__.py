"""
Network cost providers.
"""

from netcost.providers.base import (
    CategoryCosts,
    NetworkCostProvider,
    PricingCatalog,
    UsageMetricsSource,
    available_providers,
    get_provider_class,
    register_provider,
)
from netcost.providers.aws import AwsProvider

__all__ = [
    "CategoryCosts",
    "NetworkCostProvider",
    "PricingCatalog",
    "UsageMetricsSource",
    "available_providers",
    "get_provider_class",
    "register_provider",
    "AwsProvider",
]
