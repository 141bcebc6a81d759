"""
Prometheus range-query client for NetObserv flow metrics.

Provides:
- Range queries with a bounded per-call timeout
- Matrix result parsing into usage samples
- Baseline sums since the start of the billing period
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx
import structlog

from netcost.core.errors import MetricsQueryError
from netcost.core.types import TransferCategory
from netcost.metrics.models import (
    LABEL_DST_ZONE,
    LABEL_SRC_ZONE,
    QUERY_WORKLOAD_EGRESS_BYTES_TOTAL,
    QUERY_WORKLOAD_INGRESS_BYTES_TOTAL,
    QUERY_WORKLOAD_INTERNET_EGRESS_BYTES_TOTAL,
    UsageSample,
)

logger = structlog.get_logger(__name__)

CATEGORY_QUERIES: Dict[TransferCategory, str] = {
    TransferCategory.INGRESS_INTER_ZONE: QUERY_WORKLOAD_INGRESS_BYTES_TOTAL,
    TransferCategory.EGRESS_INTER_ZONE: QUERY_WORKLOAD_EGRESS_BYTES_TOTAL,
    TransferCategory.INTERNET_EGRESS: QUERY_WORKLOAD_INTERNET_EGRESS_BYTES_TOTAL,
}


def format_duration(step: timedelta) -> str:
    """Render a timedelta as a Prometheus duration (e.g. ``1d``, ``1h30m``)."""
    seconds = int(step.total_seconds())
    if seconds <= 0:
        raise ValueError(f"step must be positive, got {step}")

    parts = []
    for unit, size in (("d", 86400), ("h", 3600), ("m", 60), ("s", 1)):
        count, seconds = divmod(seconds, size)
        if count:
            parts.append(f"{count}{unit}")
    return "".join(parts)


def parse_matrix(result: List[Dict[str, Any]]) -> List[UsageSample]:
    """Convert a Prometheus matrix result into usage samples."""
    samples = []
    for stream in result:
        values = [
            (datetime.fromtimestamp(float(ts), tz=timezone.utc), float(value))
            for ts, value in stream.get("values", [])
        ]
        samples.append(UsageSample(labels=dict(stream.get("metric", {})), values=values))
    return samples


def sum_cross_zone_bytes(samples: List[UsageSample]) -> int:
    """Sum all observations of streams whose source and destination zones differ."""
    total = 0
    for sample in samples:
        src_zone = sample.label(LABEL_SRC_ZONE)
        dst_zone = sample.label(LABEL_DST_ZONE)
        if src_zone is None or dst_zone is None:
            continue
        if src_zone != dst_zone:
            total += sample.total_bytes()
    return total


def sum_bytes(samples: List[UsageSample]) -> int:
    """Sum all observations of all streams."""
    return sum(sample.total_bytes() for sample in samples)


class PrometheusClient:
    """
    Async client for the Prometheus HTTP API.

    Every request is bounded by ``timeout`` seconds; failures surface as
    MetricsQueryError and are never retried here.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.headers = headers or {}
        self._transport = transport
        self._session: Optional[httpx.AsyncClient] = None

    async def _ensure_session(self) -> None:
        if self._session is None:
            self._session = httpx.AsyncClient(
                base_url=self.url,
                timeout=self.timeout,
                headers=self.headers,
                transport=self._transport,
            )

    async def close(self) -> None:
        if self._session is not None:
            await self._session.aclose()
            self._session = None

    async def query_range(
        self,
        query_template: str,
        start: datetime,
        end: datetime,
        step: timedelta,
    ) -> List[UsageSample]:
        """
        Run a range query and return its matrix as usage samples.

        Args:
            query_template: PromQL with a ``%s`` placeholder for the step
            start: Range start
            end: Range end
            step: Query resolution, also used as the increase() window

        Raises:
            MetricsQueryError: on transport errors, timeouts, error status or
                a non-matrix result
        """
        query = query_template % format_duration(step)
        params = {
            "query": query,
            "start": start.timestamp(),
            "end": end.timestamp(),
            "step": step.total_seconds(),
        }

        await self._ensure_session()
        try:
            response = await asyncio.wait_for(
                self._session.get("/api/v1/query_range", params=params),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise MetricsQueryError(query, f"timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise MetricsQueryError(query, str(e)) from e

        try:
            body = response.json()
        except ValueError as e:
            raise MetricsQueryError(query, f"invalid response body (HTTP {response.status_code})") from e

        for warning in body.get("warnings", []):
            logger.warning("Non-critical error while querying prometheus", query=query, warning=warning)

        if response.status_code >= 400 or body.get("status") != "success":
            reason = body.get("error") or f"HTTP {response.status_code}"
            raise MetricsQueryError(query, reason)

        data = body.get("data", {})
        if data.get("resultType") != "matrix":
            raise MetricsQueryError(query, f"expected matrix result, got {data.get('resultType')}")

        return parse_matrix(data.get("result", []))


class PrometheusUsageSource:
    """
    Usage metrics source backed by Prometheus.

    Range queries are evaluated at every point from start to end inclusive,
    and each point reports ``increase()`` over the step before it. Ranges are
    therefore started one step after the interval they cover: baselines
    evaluate at ``(billing_period_start, window_start]`` and window samples
    evaluate once, at ``window_end``.
    """

    def __init__(self, client: PrometheusClient, step: Optional[timedelta] = None):
        self.client = client
        self.step = step

    def _baseline_step(self, span: timedelta) -> timedelta:
        if self.step is None or self.step >= span:
            return span
        if span % self.step:
            logger.debug(
                "Baseline span is not a multiple of the configured step, using one step",
                span=str(span),
                step=str(self.step),
            )
            return span
        return self.step

    async def get_baseline_usage(
        self,
        billing_period_start: datetime,
        window_start: datetime,
        category: TransferCategory,
    ) -> int:
        """Bytes of ``category`` transfer billed since the billing period started."""
        if billing_period_start >= window_start:
            return 0

        step = self._baseline_step(window_start - billing_period_start)
        samples = await self.client.query_range(
            CATEGORY_QUERIES[category], billing_period_start + step, window_start, step
        )
        if category.is_cross_zone:
            return sum_cross_zone_bytes(samples)
        return sum_bytes(samples)

    async def get_window_samples(
        self,
        category: TransferCategory,
        window_start: datetime,
        window_end: datetime,
        step: timedelta,
    ) -> List[UsageSample]:
        """Samples of ``category`` transfer observed inside one window, one point per stream."""
        return await self.client.query_range(
            CATEGORY_QUERIES[category], window_end, window_end, step
        )
