"""Flow metrics: usage samples and the Prometheus client."""

from netcost.metrics.models import UsageSample, Workload
from netcost.metrics.prometheus import PrometheusClient, PrometheusUsageSource

__all__ = ["UsageSample", "Workload", "PrometheusClient", "PrometheusUsageSource"]
