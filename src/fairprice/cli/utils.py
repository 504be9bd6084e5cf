"""
Shared CLI utilities for FairPrice
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from fairprice.config.settings import FairPriceConfig


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """Configure application logging to stdout and an optional file."""
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=numeric_level,
        format=log_format,
        handlers=handlers,
        force=True,
    )

    # Quiet noisy third-party loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def load_config(config_file: str = "config.yaml") -> FairPriceConfig:
    """Load configuration from YAML file, or defaults when it does not exist."""
    config_path = Path(config_file)

    if not config_path.exists():
        return FairPriceConfig()

    try:
        return FairPriceConfig.from_yaml(config_path)
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration {config_path}: {e}") from e


def format_number(value, digits: int = 0) -> str:
    """``12345.6 -> "12,346"``; ``None`` renders as ``-``."""
    if value is None:
        return "-"
    return f"{value:,.{digits}f}"
