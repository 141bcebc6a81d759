"""
Usage sample model and NetObserv label/query constants.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

# NetObserv flow labels
LABEL_SRC_ZONE = "SrcK8S_Zone"
LABEL_DST_ZONE = "DstK8S_Zone"
LABEL_SRC_OWNER_NAME = "SrcK8S_OwnerName"
LABEL_SRC_OWNER_TYPE = "SrcK8S_OwnerType"

# Range query templates; ``%s`` is replaced with the step duration
QUERY_WORKLOAD_INGRESS_BYTES_TOTAL = "increase(netobserv_workload_ingress_bytes_total[%s])"
QUERY_WORKLOAD_EGRESS_BYTES_TOTAL = "increase(netobserv_workload_egress_bytes_total[%s])"
QUERY_WORKLOAD_INTERNET_EGRESS_BYTES_TOTAL = (
    'increase(netobserv_workload_egress_bytes_total{DstK8S_Zone=""}[%s])'
)


@dataclass(frozen=True)
class Workload:
    """Identity of the workload a transfer is attributed to."""
    name: str = ""
    type: str = ""

    def __str__(self) -> str:
        return f"{self.type}/{self.name}"


@dataclass
class UsageSample:
    """
    One time-series stream: a label set plus its observations.

    Each observation is a ``(timestamp, bytes)`` pair for one query step.
    """
    labels: Dict[str, str] = field(default_factory=dict)
    values: List[Tuple[datetime, float]] = field(default_factory=list)

    def label(self, name: str) -> Optional[str]:
        return self.labels.get(name)

    def total_bytes(self) -> int:
        return sum(int(value) for _, value in self.values)
