"""
Usage classification.

Decides whether a sample is billable for a transfer category and which
workload it is attributed to.
"""

from __future__ import annotations

from typing import Tuple

import structlog

from netcost.core.types import TransferCategory
from netcost.metrics.models import (
    LABEL_DST_ZONE,
    LABEL_SRC_OWNER_NAME,
    LABEL_SRC_OWNER_TYPE,
    LABEL_SRC_ZONE,
    UsageSample,
    Workload,
)

logger = structlog.get_logger(__name__)


def is_cross_zone(sample: UsageSample) -> bool:
    """
    True when the sample moved data between two different zones.

    Samples missing either zone label cannot be evaluated and are excluded
    without logging.
    """
    src_zone = sample.label(LABEL_SRC_ZONE)
    dst_zone = sample.label(LABEL_DST_ZONE)
    if src_zone is None or dst_zone is None:
        return False
    return src_zone != dst_zone


def workload_for(sample: UsageSample) -> Workload:
    """Workload identity from the source owner labels; missing labels become ''."""
    name = sample.label(LABEL_SRC_OWNER_NAME)
    if name is None:
        logger.warning("Prometheus data is missing label", label=LABEL_SRC_OWNER_NAME)
        name = ""

    owner_type = sample.label(LABEL_SRC_OWNER_TYPE)
    if owner_type is None:
        logger.warning("Prometheus data is missing label", label=LABEL_SRC_OWNER_TYPE)
        owner_type = ""

    return Workload(name=name, type=owner_type)


def classify(sample: UsageSample, category: TransferCategory) -> Tuple[bool, Workload]:
    """
    Classify a sample for ``category``.

    Returns:
        Tuple of (is_billable, workload). The workload is only derived for
        billable samples; excluded samples get an empty workload.
    """
    if category.is_cross_zone and not is_cross_zone(sample):
        return False, Workload()
    return True, workload_for(sample)
