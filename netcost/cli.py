"""
netcost Command Line Interface

Runs network cost computations from the command line.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import re
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional

from netcost.core.config import NetworkCostConfig
from netcost.core.logging import setup_logging
from netcost.core.types import PricingGroup
from netcost.providers import available_providers
from netcost.service import NetworkCostService

_DURATION_PATTERN = re.compile(r"(\d+)([dhms])")
_DURATION_UNITS = {"d": 86400, "h": 3600, "m": 60, "s": 1}


def parse_duration(value: str) -> timedelta:
    """Parse a Prometheus-style duration such as ``1d`` or ``1h30m``."""
    parts = _DURATION_PATTERN.findall(value)
    if not parts or "".join(f"{n}{u}" for n, u in parts) != value:
        raise argparse.ArgumentTypeError(f"invalid duration: {value}")
    return timedelta(seconds=sum(int(n) * _DURATION_UNITS[u] for n, u in parts))


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid timestamp: {value}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def load_config(path: Optional[Path]) -> NetworkCostConfig:
    if path is not None:
        return NetworkCostConfig.from_file(path)
    return NetworkCostConfig()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="netcost",
        description="netcost - network transfer cost attribution",
    )
    parser.add_argument("--config", type=Path, help="JSON config file")
    parser.add_argument("--log-level", help="Override the configured log level")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    costs_parser = subparsers.add_parser("costs", help="Compute network costs for a time range")
    costs_parser.add_argument("--start", type=parse_timestamp, required=True, help="Range start (ISO 8601)")
    costs_parser.add_argument("--end", type=parse_timestamp, required=True, help="Range end (ISO 8601)")
    costs_parser.add_argument("--resolution", type=parse_duration, default=timedelta(days=1), help="Window size, e.g. 1d")
    costs_parser.add_argument(
        "--group",
        action="append",
        choices=[group.value for group in PricingGroup],
        help="Pricing group to compute (repeatable, default: all)",
    )

    subparsers.add_parser("providers", help="List registered providers")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "providers":
        for name in available_providers():
            print(name)
        return 0

    config = load_config(args.config)
    setup_logging(args.log_level or config.logging.level.value, config.logging.format)

    if args.command == "costs":
        groups = [PricingGroup(g) for g in args.group] if args.group else None
        return asyncio.run(cmd_costs(config, args.start, args.end, args.resolution, groups))

    return 0


async def cmd_costs(
    config: NetworkCostConfig,
    start: datetime,
    end: datetime,
    resolution: timedelta,
    groups: Optional[List[PricingGroup]] = None,
) -> int:
    """Compute costs and print the responses as JSON."""
    service = await NetworkCostService.from_config(config)
    if groups:
        service.groups = groups

    try:
        responses = await service.get_network_costs(start, end, resolution)
    finally:
        await service.close()

    print(json.dumps([r.to_dict() for r in responses], indent=2))
    return 1 if any(r.errors for r in responses) else 0


if __name__ == "__main__":
    sys.exit(main())
