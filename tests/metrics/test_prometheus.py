"""
Tests for the Prometheus flow metrics client.
"""

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from netcost.core.errors import MetricsQueryError
from netcost.core.types import TransferCategory
from netcost.metrics.models import (
    QUERY_WORKLOAD_EGRESS_BYTES_TOTAL,
    QUERY_WORKLOAD_INGRESS_BYTES_TOTAL,
    UsageSample,
)
from netcost.metrics.prometheus import (
    PrometheusClient,
    PrometheusUsageSource,
    format_duration,
    parse_matrix,
    sum_bytes,
    sum_cross_zone_bytes,
)

START = datetime(2025, 6, 9, tzinfo=timezone.utc)
END = datetime(2025, 6, 10, tzinfo=timezone.utc)


def matrix_body(result, warnings=None):
    body = {"status": "success", "data": {"resultType": "matrix", "result": result}}
    if warnings:
        body["warnings"] = warnings
    return body


def stream(labels, *values):
    return {"metric": labels, "values": [[START.timestamp() + i * 86400, str(v)] for i, v in enumerate(values)]}


def make_client(handler):
    return PrometheusClient("http://prometheus:9090/", timeout=5.0, transport=httpx.MockTransport(handler))


# =============================================================================
# Helpers
# =============================================================================

class TestHelpers:
    """Tests for duration formatting and result parsing."""

    @pytest.mark.parametrize(
        "step,expected",
        [
            (timedelta(days=1), "1d"),
            (timedelta(hours=1), "1h"),
            (timedelta(hours=1, minutes=30), "1h30m"),
            (timedelta(seconds=45), "45s"),
            (timedelta(days=2, seconds=5), "2d5s"),
        ],
    )
    def test_format_duration(self, step, expected):
        assert format_duration(step) == expected

    def test_format_duration_rejects_zero(self):
        with pytest.raises(ValueError):
            format_duration(timedelta(0))

    def test_parse_matrix(self):
        samples = parse_matrix([stream({"SrcK8S_Zone": "a"}, 10, 20)])

        assert len(samples) == 1
        assert samples[0].labels == {"SrcK8S_Zone": "a"}
        assert [value for _, value in samples[0].values] == [10.0, 20.0]
        assert samples[0].values[0][0] == START

    def test_sum_cross_zone_bytes(self):
        samples = [
            UsageSample({"SrcK8S_Zone": "a", "DstK8S_Zone": "b"}, [(START, 100.0), (END, 50.0)]),
            UsageSample({"SrcK8S_Zone": "a", "DstK8S_Zone": "a"}, [(START, 1000.0)]),
            UsageSample({"SrcK8S_Zone": "a"}, [(START, 1000.0)]),
            UsageSample({"DstK8S_Zone": "b"}, [(START, 1000.0)]),
            UsageSample({"SrcK8S_Zone": "c", "DstK8S_Zone": "b"}, [(START, 7.0)]),
        ]

        assert sum_cross_zone_bytes(samples) == 157

    def test_sum_bytes(self):
        samples = [
            UsageSample({}, [(START, 100.0), (END, 50.0)]),
            UsageSample({"DstK8S_Zone": ""}, [(START, 1.0)]),
        ]

        assert sum_bytes(samples) == 151


# =============================================================================
# Client
# =============================================================================

class TestPrometheusClient:
    """Tests for range queries against a mocked Prometheus API."""

    @pytest.mark.asyncio
    async def test_query_range(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=matrix_body([stream({"SrcK8S_Zone": "a"}, 42)]))

        client = make_client(handler)
        try:
            samples = await client.query_range(QUERY_WORKLOAD_INGRESS_BYTES_TOTAL, START, END, timedelta(days=1))
        finally:
            await client.close()

        assert seen["path"] == "/api/v1/query_range"
        assert seen["params"]["query"] == "increase(netobserv_workload_ingress_bytes_total[1d])"
        assert float(seen["params"]["step"]) == 86400.0
        assert float(seen["params"]["start"]) == START.timestamp()
        assert samples[0].total_bytes() == 42

    @pytest.mark.asyncio
    async def test_warnings_do_not_fail_query(self):
        def handler(request):
            return httpx.Response(200, json=matrix_body([], warnings=["partial data"]))

        client = make_client(handler)
        assert await client.query_range(QUERY_WORKLOAD_INGRESS_BYTES_TOTAL, START, END, timedelta(days=1)) == []
        await client.close()

    @pytest.mark.asyncio
    async def test_error_status(self):
        def handler(request):
            return httpx.Response(400, json={"status": "error", "errorType": "bad_data", "error": "parse error"})

        client = make_client(handler)
        with pytest.raises(MetricsQueryError, match="parse error"):
            await client.query_range(QUERY_WORKLOAD_INGRESS_BYTES_TOTAL, START, END, timedelta(days=1))
        await client.close()

    @pytest.mark.asyncio
    async def test_non_matrix_result(self):
        def handler(request):
            return httpx.Response(200, json={"status": "success", "data": {"resultType": "vector", "result": []}})

        client = make_client(handler)
        with pytest.raises(MetricsQueryError, match="expected matrix"):
            await client.query_range(QUERY_WORKLOAD_INGRESS_BYTES_TOTAL, START, END, timedelta(days=1))
        await client.close()

    @pytest.mark.asyncio
    async def test_invalid_body(self):
        def handler(request):
            return httpx.Response(502, text="bad gateway")

        client = make_client(handler)
        with pytest.raises(MetricsQueryError, match="HTTP 502"):
            await client.query_range(QUERY_WORKLOAD_INGRESS_BYTES_TOTAL, START, END, timedelta(days=1))
        await client.close()

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)
        with pytest.raises(MetricsQueryError, match="connection refused"):
            await client.query_range(QUERY_WORKLOAD_INGRESS_BYTES_TOTAL, START, END, timedelta(days=1))
        await client.close()


# =============================================================================
# Usage Source
# =============================================================================

class FlowCounters:
    """
    Mock Prometheus evaluating increase() the way a range query does.

    Every point from start to end inclusive, spaced by step, reports the bytes
    counted during the step before it. Usage is given per day and per stream.
    """

    def __init__(self, *streams):
        self.streams = streams
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        self.requests.append(params)
        start, end, step = float(params["start"]), float(params["end"]), float(params["step"])

        result = []
        for labels, daily_bytes in self.streams:
            values = []
            point = start
            while point <= end:
                increase = sum(
                    count for day, count in daily_bytes.items()
                    if point - step <= day.timestamp() and day.timestamp() + 86400 <= point
                )
                values.append([point, str(increase)])
                point += step
            result.append({"metric": labels, "values": values})
        return httpx.Response(200, json=matrix_body(result))


CROSS_ZONE = {"SrcK8S_Zone": "us-east-1a", "DstK8S_Zone": "us-east-1b"}
SAME_ZONE = {"SrcK8S_Zone": "us-east-1a", "DstK8S_Zone": "us-east-1a"}
PERIOD_START = datetime(2025, 6, 1, tzinfo=timezone.utc)
GIB = 1024 ** 3


def daily(first, days, count):
    return {first + timedelta(days=i): count for i in range(days)}


class TestPrometheusUsageSource:
    """Tests for baselines and window samples."""

    @pytest.mark.asyncio
    async def test_baseline_zero_when_period_starts_at_window(self):
        def handler(request):
            raise AssertionError("no query expected")

        source = PrometheusUsageSource(make_client(handler))

        assert await source.get_baseline_usage(START, START, TransferCategory.INGRESS_INTER_ZONE) == 0

    @pytest.mark.asyncio
    async def test_baseline_counts_each_day_once(self):
        """Eight days at 1 GiB bill as 8 GiB; the window's own day is excluded."""
        usage = daily(PERIOD_START, 8, GIB)
        usage[START] = 50 * GIB
        counters = FlowCounters((CROSS_ZONE, usage), (SAME_ZONE, daily(PERIOD_START, 9, GIB)))
        source = PrometheusUsageSource(make_client(counters))

        baseline = await source.get_baseline_usage(PERIOD_START, START, TransferCategory.EGRESS_INTER_ZONE)

        assert baseline == 8 * GIB
        assert len(counters.requests) == 1
        params = counters.requests[0]
        assert params["query"] == QUERY_WORKLOAD_EGRESS_BYTES_TOTAL % "8d"
        assert float(params["start"]) == START.timestamp()
        assert float(params["end"]) == START.timestamp()
        await source.client.close()

    @pytest.mark.asyncio
    async def test_configured_baseline_step(self):
        counters = FlowCounters(({}, daily(PERIOD_START, 9, GIB)))
        source = PrometheusUsageSource(make_client(counters), step=timedelta(days=1))

        baseline = await source.get_baseline_usage(PERIOD_START, START, TransferCategory.INTERNET_EGRESS)

        assert baseline == 8 * GIB
        params = counters.requests[0]
        assert float(params["step"]) == 86400.0
        assert float(params["start"]) == (PERIOD_START + timedelta(days=1)).timestamp()
        assert float(params["end"]) == START.timestamp()
        await source.client.close()

    @pytest.mark.asyncio
    async def test_baseline_step_not_dividing_period(self):
        counters = FlowCounters(({}, daily(PERIOD_START, 9, GIB)))
        source = PrometheusUsageSource(make_client(counters), step=timedelta(days=3))

        baseline = await source.get_baseline_usage(PERIOD_START, START, TransferCategory.INTERNET_EGRESS)

        assert baseline == 8 * GIB
        assert float(counters.requests[0]["step"]) == timedelta(days=8).total_seconds()
        await source.client.close()

    @pytest.mark.asyncio
    async def test_window_samples_cover_only_the_window(self):
        """Usage on the day before the window is not billed in it."""
        usage = {START - timedelta(days=1): 100 * GIB, START: GIB}
        counters = FlowCounters(({"SrcK8S_OwnerName": "api", **CROSS_ZONE}, usage))
        source = PrometheusUsageSource(make_client(counters))

        samples = await source.get_window_samples(
            TransferCategory.INGRESS_INTER_ZONE, START, END, timedelta(days=1)
        )

        assert len(samples) == 1
        assert samples[0].label("SrcK8S_OwnerName") == "api"
        assert samples[0].values == [(END, float(GIB))]
        assert samples[0].total_bytes() == GIB
        params = counters.requests[0]
        assert params["query"] == QUERY_WORKLOAD_INGRESS_BYTES_TOTAL % "1d"
        assert float(params["start"]) == float(params["end"]) == END.timestamp()
        await source.client.close()
