"""
AWS Price List catalog for EC2 data transfer.

Looks up the graduated on-demand price dimensions for a region's
data-transfer usage type and converts them into a sorted tier table.
The Price List API is only served from a handful of regions, so the
client always talks to ``us-east-1`` regardless of the cluster region.
"""

from __future__ import annotations

import asyncio
import json
import math
from typing import Any, Dict, Iterable, List, Optional

import structlog

from netcost.core.errors import PricingCatalogError
from netcost.core.types import PricingGroup
from netcost.pricing.models import PriceTier

logger = structlog.get_logger(__name__)

AWS_PRICING_API_REGION = "us-east-1"
AWS_SERVICE_CODE = "AmazonEC2"
AWS_FORMAT_VERSION = "aws_v1"
DEFAULT_REGION = "us-east-1"

# Billing prefix that AWS puts in front of usage types for each region.
# us-east-1 carries no prefix.
REGION_USAGE_TYPE_PREFIXES: Dict[str, str] = {
    "us-east-1": "",
    "us-east-2": "USE2",
    "us-west-1": "USW1",
    "us-west-2": "USW2",
    "us-gov-east-1": "UGE1",
    "us-gov-west-1": "UGW1",
    "ca-central-1": "CAN1",
    "sa-east-1": "SAE1",
    "eu-west-1": "EU",
    "eu-west-2": "EUW2",
    "eu-west-3": "EUW3",
    "eu-central-1": "EUC1",
    "eu-north-1": "EUN1",
    "ap-northeast-1": "APN1",
    "ap-northeast-2": "APN2",
    "ap-northeast-3": "APN3",
    "ap-southeast-1": "APS1",
    "ap-southeast-2": "APS2",
    "ap-south-1": "APS3",
}

_USAGE_TYPE_SUFFIXES = {
    PricingGroup.INTER_ZONE: "DataTransfer-Regional-Bytes",
    PricingGroup.INTERNET: "DataTransfer-Out-Bytes",
}


def usage_type_for_region(region: str, group: PricingGroup) -> str:
    """
    Build the AWS usage type that prices ``group`` transfer in ``region``.

    Unknown regions fall back to us-east-1 pricing.
    """
    if region not in REGION_USAGE_TYPE_PREFIXES:
        logger.warning(
            "No usage type prefix for region, using default region",
            region=region,
            default_region=DEFAULT_REGION,
        )
    prefix = REGION_USAGE_TYPE_PREFIXES.get(region, REGION_USAGE_TYPE_PREFIXES[DEFAULT_REGION])
    suffix = _USAGE_TYPE_SUFFIXES[group]
    return f"{prefix}-{suffix}" if prefix else suffix


def _parse_range(value: str, field_name: str) -> float:
    if value == "Inf":
        return math.inf
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise PricingCatalogError(f"failed to parse {field_name} '{value}': {e}") from e


def _parse_dimension(dimension: Dict[str, Any]) -> PriceTier:
    price = dimension.get("pricePerUnit", {}).get("USD")
    try:
        price_per_unit = float(price)
    except (TypeError, ValueError) as e:
        raise PricingCatalogError(f"failed to parse price per unit '{price}': {e}") from e

    return PriceTier(
        begin_gb=_parse_range(dimension.get("beginRange"), "begin range"),
        end_gb=_parse_range(dimension.get("endRange"), "end range"),
        price_per_unit_usd=price_per_unit,
        unit=dimension.get("unit", "GB"),
        description=dimension.get("description", ""),
    )


def parse_price_list(entries: Iterable[str]) -> List[PriceTier]:
    """
    Convert Price List API entries into a tier table sorted by begin range.

    Only the first on-demand term is used; any further terms are logged
    and skipped.

    Raises:
        PricingCatalogError: if an entry is not valid JSON or a price
            dimension cannot be parsed
    """
    tiers: List[PriceTier] = []

    for entry in entries:
        try:
            product = json.loads(entry)
        except json.JSONDecodeError as e:
            raise PricingCatalogError(f"failed to unmarshal pricing entry: {e}") from e

        on_demand = product.get("terms", {}).get("OnDemand", {})
        for term_id, term in on_demand.items():
            if tiers:
                logger.warning("Unexpected on-demand pricing term, skipping", term_id=term_id)
                continue
            for dimension in term.get("priceDimensions", {}).values():
                tiers.append(_parse_dimension(dimension))

    tiers.sort(key=lambda tier: tier.begin_gb)
    return tiers


class AwsPricingCatalog:
    """
    Fetches data-transfer tier tables from the AWS Price List API.

    The boto3 client is created lazily and reused for the lifetime of the
    catalog. Calls run in the default executor under ``timeout`` seconds.
    """

    def __init__(
        self,
        profile: Optional[str] = None,
        timeout: float = 30.0,
        client: Any = None,
    ):
        self.profile = profile
        self.timeout = timeout
        self._client = client

    def _get_client(self):
        """Get or create the pricing client."""
        if self._client is None:
            try:
                import boto3
            except ImportError:
                raise PricingCatalogError("boto3 is required for AWS pricing")
            session = boto3.Session(profile_name=self.profile, region_name=AWS_PRICING_API_REGION)
            self._client = session.client("pricing")
        return self._client

    def _get_products(self, usage_type: str) -> List[str]:
        response = self._get_client().get_products(
            ServiceCode=AWS_SERVICE_CODE,
            Filters=[
                {"Field": "usagetype", "Type": "TERM_MATCH", "Value": usage_type},
            ],
            FormatVersion=AWS_FORMAT_VERSION,
            MaxResults=1,
        )
        return response.get("PriceList", [])

    async def get_price_tiers(self, group: PricingGroup, region: str) -> List[PriceTier]:
        """
        Get the sorted tier table for ``group`` transfer in ``region``.

        Raises:
            PricingCatalogError: if the API call fails, times out, or returns
                unparseable data
        """
        usage_type = usage_type_for_region(region, group)
        loop = asyncio.get_running_loop()

        try:
            entries = await asyncio.wait_for(
                loop.run_in_executor(None, self._get_products, usage_type),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise PricingCatalogError(
                f"timed out after {self.timeout}s fetching AWS products for {usage_type}"
            ) from e
        except PricingCatalogError:
            raise
        except Exception as e:
            raise PricingCatalogError(f"failed to get AWS products for {usage_type}: {e}") from e

        tiers = parse_price_list(entries)
        logger.debug("Fetched AWS price tiers", usage_type=usage_type, tiers=len(tiers))
        return tiers
