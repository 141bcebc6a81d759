"""
Error taxonomy for network cost computation.

Every error here is scoped: it is attached to the window and category
group that failed and never aborts the rest of a request.
"""

from __future__ import annotations

from typing import Optional


class NetworkCostError(Exception):
    """Base class for all network cost errors."""


class NoPricingDataError(NetworkCostError):
    """Raised when the pricing catalog returns an empty tier table."""

    def __init__(self, category: str, region: str):
        self.category = category
        self.region = region
        super().__init__(
            f"received no pricing information for {category} in region {region}"
        )


class MetricsQueryError(NetworkCostError):
    """Raised when a metrics backend query fails or returns unusable data."""

    def __init__(self, query: str, reason: str):
        self.query = query
        self.reason = reason
        super().__init__(f"metrics query failed ({query}): {reason}")


class MalformedTierTableError(NetworkCostError):
    """Raised when a tier table violates its ordering or terminal-tier invariants."""

    def __init__(self, reason: str, tier_index: Optional[int] = None):
        self.reason = reason
        self.tier_index = tier_index
        location = f" at tier {tier_index}" if tier_index is not None else ""
        super().__init__(f"malformed tier table{location}: {reason}")


class PricingCatalogError(NetworkCostError):
    """Raised when the pricing catalog cannot be reached or parsed."""


class InvalidWindowError(NetworkCostError):
    """Raised when a request range cannot be split into windows."""


class UnknownProviderError(NetworkCostError):
    """Raised when no provider is registered under the requested name."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        super().__init__(
            f"unknown network cost provider '{name}' (available: {', '.join(available) or 'none'})"
        )
