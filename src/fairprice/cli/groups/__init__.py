"""
CLI command groups for FairPrice
"""

from .checklist import checklist
from .screen import screen
from .value import value

__all__ = ["checklist", "screen", "value"]
