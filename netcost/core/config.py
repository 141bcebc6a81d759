"""
netcost Configuration

Settings for the network cost plugin with:
- Environment-based configuration (NETCOST_ prefix)
- Type-safe settings with Pydantic
- JSON config file loading
"""

from __future__ import annotations

import json
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class PrometheusConfig(BaseModel):
    """Connection settings for the Prometheus metrics backend."""
    url: str = "http://localhost:9090"
    timeout: float = 30.0  # seconds per query
    baseline_step: Optional[timedelta] = None  # defaults to one step spanning the billing period so far
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v


class PricingConfig(BaseModel):
    """Settings for the cloud pricing catalog."""
    aws_profile: Optional[str] = None
    timeout: float = 30.0


class BillingConfig(BaseModel):
    """Billing period settings."""
    period_start_day: int = Field(default=1, ge=1, le=31)
    currency: Literal["USD"] = "USD"


class LoggingConfig(BaseModel):
    """Logging output settings."""
    level: LogLevel = LogLevel.INFO
    format: Literal["json", "text"] = "json"


class NetworkCostConfig(BaseSettings):
    """
    Main configuration.

    Loads configuration from environment variables and/or a JSON file.
    Environment variables are prefixed with NETCOST_ (e.g.
    NETCOST_PROMETHEUS__URL=http://prometheus:9090).
    """

    provider: str = "aws"
    region: str = "us-east-1"
    domain: str = "netcost"

    prometheus: PrometheusConfig = Field(default_factory=PrometheusConfig)
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    billing: BillingConfig = Field(default_factory=BillingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "NETCOST_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }

    @field_validator("provider", "region")
    @classmethod
    def normalize(cls, v: str) -> str:
        return v.strip().lower()

    @classmethod
    def from_file(cls, config_path: Path) -> "NetworkCostConfig":
        """Load configuration from a JSON file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            config_data = json.load(f)

        return cls(**config_data)

    def to_file(self, config_path: Path) -> None:
        """Save configuration to a JSON file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)
