"""
Cost attribution to workloads.
"""

from netcost.attribution.accumulator import BilledLineItem, WorkloadCostAccumulator
from netcost.attribution.classifier import classify, is_cross_zone, workload_for
from netcost.attribution.engine import allocate_category
from netcost.attribution.windows import Window, billing_period_start, expand_windows

__all__ = [
    "BilledLineItem",
    "WorkloadCostAccumulator",
    "classify",
    "is_cross_zone",
    "workload_for",
    "allocate_category",
    "Window",
    "billing_period_start",
    "expand_windows",
]
