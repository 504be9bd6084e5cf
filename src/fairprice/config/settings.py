"""
Pydantic settings models for FairPrice configuration.

This module provides type-safe configuration with validation using Pydantic.
Configuration is loaded from config.yaml with environment variable substitution.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# Application Settings
# =============================================================================


class ApplicationSettings(BaseSettings):
    """Application metadata and environment configuration."""

    model_config = SettingsConfigDict(env_prefix="APP_")

    name: str = Field(default="FairPrice")
    version: str = Field(default="0.1.0")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is development or production."""
        if v not in ["development", "production"]:
            raise ValueError("environment must be 'development' or 'production'")
        return v


# =============================================================================
# Data Store Settings
# =============================================================================


class DataStoreSettings(BaseSettings):
    """Tabular data store configuration (live database or JSON snapshot)."""

    model_config = SettingsConfigDict(env_prefix="STORE_")

    url: str = Field(default="sqlite:///data/fairprice.db")
    pool_pre_ping: bool = Field(default=True)
    backend: str = Field(default="database")
    snapshot_dir: str = Field(default="data/snapshot")

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        """Validate backend is a supported store type."""
        if v not in ["database", "snapshot"]:
            raise ValueError("backend must be 'database' or 'snapshot'")
        return v


# =============================================================================
# Upstream Provider Settings
# =============================================================================


class PriceProviderSettings(BaseSettings):
    """Securities price API configuration."""

    model_config = SettingsConfigDict(env_prefix="PRICE_API_")

    base_url: str = Field(
        default="https://apis.data.go.kr/1160100/service/GetStockSecuritiesInfoService"
    )
    api_key: str = Field(default="")
    timeout: int = Field(default=30)
    max_retries: int = Field(default=3)
    backoff_seconds: float = Field(default=1.0)
    year_end_candidate_days: int = Field(default=5)

    @field_validator("max_retries")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        """Validate retry count is reasonable."""
        if not 1 <= v <= 10:
            raise ValueError("max_retries must be between 1 and 10")
        return v

    @field_validator("year_end_candidate_days")
    @classmethod
    def validate_candidate_days(cls, v: int) -> int:
        """Year-end search walks back from Dec 30, so at most 30 days."""
        if not 1 <= v <= 30:
            raise ValueError("year_end_candidate_days must be between 1 and 30")
        return v


class FilingsProviderSettings(BaseSettings):
    """Corporate filings (DART) API configuration."""

    model_config = SettingsConfigDict(env_prefix="DART_")

    base_url: str = Field(default="https://opendart.fss.or.kr/api")
    api_key: str = Field(default="")
    timeout: int = Field(default=30)
    default_fs_div: str = Field(default="CFS")
    usd_to_krw_rate: float = Field(default=1450.0)

    @field_validator("default_fs_div")
    @classmethod
    def validate_fs_div(cls, v: str) -> str:
        """Consolidated (CFS) or separate (OFS) statements only."""
        if v not in ["CFS", "OFS"]:
            raise ValueError("default_fs_div must be 'CFS' or 'OFS'")
        return v


# =============================================================================
# Screening Settings
# =============================================================================


class ScreeningSettings(BaseSettings):
    """Population-wide screen configuration."""

    model_config = SettingsConfigDict(env_prefix="SCREEN_")

    page_size: int = Field(default=1000)
    batch_size: int = Field(default=1000)
    min_margin_of_safety: float = Field(default=0.30)
    discount_rate: float = Field(default=0.08)
    missing_numeric_policy: str = Field(default="zero")

    @field_validator("page_size", "batch_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        """Validate page/batch size stays within store-side limits."""
        if not 1 <= v <= 10000:
            raise ValueError("must be between 1 and 10000")
        return v

    @field_validator("min_margin_of_safety")
    @classmethod
    def validate_margin(cls, v: float) -> float:
        """Validate margin of safety is a fraction."""
        if not 0 <= v <= 1:
            raise ValueError("min_margin_of_safety must be between 0 and 1")
        return v

    @field_validator("discount_rate")
    @classmethod
    def validate_discount_rate(cls, v: float) -> float:
        """Validate discount rate is a positive fraction."""
        if not 0 < v < 1:
            raise ValueError("discount_rate must be between 0 and 1 (exclusive)")
        return v

    @field_validator("missing_numeric_policy")
    @classmethod
    def validate_policy(cls, v: str) -> str:
        """Validate the policy for absent numeric fields."""
        if v not in ["zero", "skip"]:
            raise ValueError("missing_numeric_policy must be 'zero' or 'skip'")
        return v


# =============================================================================
# Valuation Settings
# =============================================================================


class ValuationSettings(BaseSettings):
    """Single-stock fair-value engine configuration."""

    model_config = SettingsConfigDict(env_prefix="VALUATION_")

    outlier_upper_multiple: float = Field(default=3.0)
    outlier_lower_divisor: float = Field(default=3.0)
    extreme_per_threshold: float = Field(default=100.0)

    @field_validator("outlier_upper_multiple", "outlier_lower_divisor", "extreme_per_threshold")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Validate value is positive."""
        if v <= 0:
            raise ValueError("must be positive")
        return v


# =============================================================================
# Main Configuration
# =============================================================================


class FairPriceConfig(BaseSettings):
    """
    Master configuration - single source of truth.

    This configuration is loaded from config.yaml with environment variable
    substitution and validated using Pydantic.

    Example:
        >>> config = FairPriceConfig.from_yaml("config.yaml")
        >>> print(config.store.url)
        sqlite:///data/fairprice.db
    """

    model_config = SettingsConfigDict(extra="allow")

    application: ApplicationSettings = Field(default_factory=ApplicationSettings)
    store: DataStoreSettings = Field(default_factory=DataStoreSettings)
    price_provider: PriceProviderSettings = Field(default_factory=PriceProviderSettings)
    filings_provider: FilingsProviderSettings = Field(default_factory=FilingsProviderSettings)
    screening: ScreeningSettings = Field(default_factory=ScreeningSettings)
    valuation: ValuationSettings = Field(default_factory=ValuationSettings)

    @classmethod
    def from_yaml(cls, config_path: str | Path = "config.yaml") -> "FairPriceConfig":
        """
        Load configuration from YAML file with environment variable substitution.

        Args:
            config_path: Path to config.yaml file (default: "config.yaml")

        Returns:
            Validated FairPriceConfig instance

        Raises:
            ValidationError: If configuration is invalid
            FileNotFoundError: If config file doesn't exist
            ValueError: If required environment variable is missing
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            yaml_content = f.read()

        # Pattern: ${VAR_NAME} or ${VAR_NAME:-default_value}
        def env_var_replacer(match):
            var_spec = match.group(1)
            if ":-" in var_spec:
                var_name, default = var_spec.split(":-", 1)
                return os.getenv(var_name, default)
            value = os.getenv(var_spec)
            if value is None:
                raise ValueError(f"Environment variable {var_spec} not set and no default provided")
            return value

        yaml_content = re.sub(r"\$\{([^}]+)\}", env_var_replacer, yaml_content)

        config_dict = yaml.safe_load(yaml_content) or {}

        return cls(**config_dict)


def get_settings(config_path: Optional[str | Path] = None) -> FairPriceConfig:
    """
    Load settings from config.yaml.

    Returns:
        FairPriceConfig: Application settings
    """
    return FairPriceConfig.from_yaml(config_path or "config.yaml")


try:
    settings = get_settings()
except (FileNotFoundError, ValueError):
    # Defaults keep the package importable before config.yaml exists
    settings = FairPriceConfig()


__all__ = [
    "FairPriceConfig",
    "ApplicationSettings",
    "DataStoreSettings",
    "PriceProviderSettings",
    "FilingsProviderSettings",
    "ScreeningSettings",
    "ValuationSettings",
    "get_settings",
    "settings",
]
