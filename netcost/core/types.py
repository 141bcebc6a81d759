"""
Shared enumerations for network cost computation.
"""

from __future__ import annotations

from enum import Enum


class PricingGroup(str, Enum):
    """
    A group of transfer categories billed against one tier table.

    Categories in the same group share one cumulative usage baseline.
    """
    INTER_ZONE = "inter_zone"
    INTERNET = "internet"


class TransferCategory(str, Enum):
    """Billable network transfer categories."""
    INGRESS_INTER_ZONE = "ingress_inter_zone"
    EGRESS_INTER_ZONE = "egress_inter_zone"
    INTERNET_EGRESS = "internet_egress"

    @property
    def resource_name(self) -> str:
        return _RESOURCE_NAMES[self]

    @property
    def pricing_group(self) -> PricingGroup:
        if self is TransferCategory.INTERNET_EGRESS:
            return PricingGroup.INTERNET
        return PricingGroup.INTER_ZONE

    @property
    def is_cross_zone(self) -> bool:
        return self.pricing_group is PricingGroup.INTER_ZONE

    @classmethod
    def for_group(cls, group: PricingGroup) -> list["TransferCategory"]:
        """Categories of a pricing group, in allocation order."""
        return [category for category in cls if category.pricing_group is group]


_RESOURCE_NAMES = {
    TransferCategory.INGRESS_INTER_ZONE: "Ingress Inter Zone",
    TransferCategory.EGRESS_INTER_ZONE: "Egress Inter Zone",
    TransferCategory.INTERNET_EGRESS: "Internet Egress",
}
