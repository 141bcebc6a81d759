"""
Per-workload cost accumulation.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

import numpy as np

from netcost.metrics.models import Workload


@dataclass
class BilledLineItem:
    """Billed network transfer cost for one workload and resource."""
    workload: Workload
    resource_name: str
    billed_cost: float = 0.0
    usage_quantity_gb: float = 0.0
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    charge_category: str = "Usage"
    resource_type: str = "Network"
    usage_unit: str = "GB"

    @property
    def description(self) -> str:
        return f"{self.resource_name} Network Data Transfer"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "resource_name": self.resource_name,
            "resource_type": self.resource_type,
            "charge_category": self.charge_category,
            "description": self.description,
            "workload_name": self.workload.name,
            "workload_type": self.workload.type,
            "billed_cost": self.billed_cost,
            "usage_quantity": self.usage_quantity_gb,
            "usage_unit": self.usage_unit,
        }


class WorkloadCostAccumulator:
    """
    Running totals keyed by (workload, resource name).

    Totals are summed in single precision to match the line item
    representation.
    """

    def __init__(self):
        self._items: Dict[Tuple[Workload, str], BilledLineItem] = {}

    def upsert(
        self,
        workload: Workload,
        resource_name: str,
        billed_gb: float,
        billed_cost: float,
    ) -> BilledLineItem:
        """Add usage and cost to the entry for ``(workload, resource_name)``."""
        key = (workload, resource_name)
        item = self._items.get(key)
        if item is None:
            item = BilledLineItem(
                workload=workload,
                resource_name=resource_name,
                billed_cost=float(np.float32(billed_cost)),
                usage_quantity_gb=float(np.float32(billed_gb)),
            )
            self._items[key] = item
        else:
            item.billed_cost = float(np.float32(item.billed_cost) + np.float32(billed_cost))
            item.usage_quantity_gb = float(np.float32(item.usage_quantity_gb) + np.float32(billed_gb))
        return item

    def get(self, workload: Workload, resource_name: str):
        return self._items.get((workload, resource_name))

    def line_items(self) -> List[BilledLineItem]:
        """Flatten to a list; order is not significant."""
        return list(self._items.values())

    def __len__(self) -> int:
        return len(self._items)
