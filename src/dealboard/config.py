"""Engine configuration: YAML file with DEALBOARD_* environment overrides."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from dealboard.errors import ConfigError

FINANCE_DEALS = "financeDeals"
SINGLE_FINANCE_DEALS = "singleFinanceDeals"

# Env var -> config field, for scalar overrides
ENV_OVERRIDES: dict[str, str] = {
    "DEALBOARD_GOAL_DEALS": "goal_deals",
    "DEALBOARD_MANAGER_SALES_GOAL": "manager_sales_goal",
    "DEALBOARD_REFRESH_INTERVAL": "refresh_interval_seconds",
    "DEALBOARD_DEFAULT_TIME_PERIOD": "default_time_period",
    "DEALBOARD_CACHE_MAX_ENTRIES": "cache_max_entries",
    "DEALBOARD_STORE_URL": "store_url",
    "DEALBOARD_STORE_DB": "store_db_path",
}


def _default_partitions() -> dict[str, list[str]]:
    return {
        "single-finance": [SINGLE_FINANCE_DEALS, FINANCE_DEALS],
        "sales": [FINANCE_DEALS],
        "finance": [FINANCE_DEALS],
        "sales-manager": [FINANCE_DEALS],
    }


def _default_role_dashboards() -> dict[str, str]:
    return {
        "salesperson": "sales",
        "finance_manager": "finance",
        "single_finance_manager": "single-finance",
        "sales_manager": "sales-manager",
    }


class DealboardConfig(BaseModel):
    """Tunable constants and store wiring for the dashboard engine."""

    goal_deals: int = Field(15, gt=0, description="Monthly deal goal per salesperson")
    manager_sales_goal: int = Field(100, gt=0, description="Dealership-wide monthly deal goal")
    refresh_interval_seconds: float = Field(30.0, gt=0)
    default_time_period: str = "this-month"
    cache_max_entries: int = Field(64, ge=0, description="0 disables aggregation caching")

    partitions: dict[str, list[str]] = Field(default_factory=_default_partitions)
    default_partitions: list[str] = Field(default_factory=lambda: [FINANCE_DEALS])
    role_dashboards: dict[str, str] = Field(default_factory=_default_role_dashboards)
    default_dashboard_type: str = "sales"

    store_url: Optional[str] = None
    store_db_path: Optional[Path] = None

    def partitions_for(self, dashboard_type: Optional[str]) -> list[str]:
        """Ordered partition keys for a dashboard type; first non-empty one wins."""
        return self.partitions.get(dashboard_type or "", self.default_partitions)

    @classmethod
    def from_mapping(cls, data: Mapping, environ: Optional[Mapping[str, str]] = None) -> "DealboardConfig":
        merged = dict(data)
        env = os.environ if environ is None else environ
        for var, field in ENV_OVERRIDES.items():
            value = env.get(var)
            if value is not None and value.strip():
                merged[field] = value.strip()
        try:
            return cls.model_validate(merged)
        except ValidationError as e:
            raise ConfigError(f"Invalid dealboard configuration: {e}") from e

    @classmethod
    def from_yaml(cls, path: str | Path, environ: Optional[Mapping[str, str]] = None) -> "DealboardConfig":
        """Load from YAML. Supports a nested ``dealboard:`` section or a flat file."""
        try:
            data = yaml.safe_load(Path(path).read_text()) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config {path}: {e}") from e
        if not isinstance(data, Mapping):
            raise ConfigError(f"Config {path} must be a mapping")
        section = data.get("dealboard", data)
        if not isinstance(section, Mapping):
            raise ConfigError(f"Config {path}: 'dealboard' must be a mapping")
        return cls.from_mapping(section, environ)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DealboardConfig":
        return cls.from_mapping({}, environ)


def load_config(path: Optional[str | Path] = None) -> DealboardConfig:
    """Config from ``path`` if given, else defaults; env overrides apply either way."""
    if path is None:
        return DealboardConfig.from_env()
    return DealboardConfig.from_yaml(path)
