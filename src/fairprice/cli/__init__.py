"""
FairPrice CLI

Click-based command line for single-stock valuation and screens.
"""

from .main import cli, main

__all__ = ["cli", "main"]
