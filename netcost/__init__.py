"""
netcost - Network Transfer Cost Attribution

Attributes cluster network transfer cost to individual workloads with:
- Tiered (graduated) usage-to-cost allocation
- Billing-period baselines carried across allocations
- Cross-zone and internet egress classification of flow metrics
- Per-workload line items per time window
"""

__version__ = "0.1.0"

from netcost.core.config import NetworkCostConfig
from netcost.service import CostResponse, NetworkCostService

__all__ = ["NetworkCostConfig", "NetworkCostService", "CostResponse", "__version__"]
