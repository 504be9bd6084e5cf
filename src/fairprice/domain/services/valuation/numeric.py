"""Numeric coercion helpers that keep downstream arithmetic total."""

from __future__ import annotations

import math
from typing import Any, Iterable, List, Optional


def safe_number(value: Any) -> float:
    """
    Coerce an arbitrary stored value to a finite float.

    ``None``, non-numeric strings, NaN and infinities all become ``0.0`` so
    that no NaN ever reaches later arithmetic.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def parse_shares(value: Any) -> float:
    """Parse a share count that may be stored as ``"5,969,782,550"``."""
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    return safe_number(value)


def floor_index_median(values: Iterable[float]) -> Optional[float]:
    """
    Element at index ``n // 2`` of the ascending sort.

    For even-length input this is the upper of the two middle elements, not
    their average. Returns ``None`` for empty input.
    """
    ordered = sorted(values)
    if not ordered:
        return None
    return ordered[len(ordered) // 2]


def average_median(values: Iterable[float]) -> Optional[float]:
    """Conventional median (mean of the two middle elements for even length)."""
    ordered: List[float] = sorted(values)
    n = len(ordered)
    if n == 0:
        return None
    mid = n // 2
    if n % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return ordered[mid]


def margin_of_safety(intrinsic_value: float, current_price: float) -> float:
    """``(intrinsic - price) / intrinsic``; 0 when intrinsic value is not positive."""
    if intrinsic_value <= 0:
        return 0.0
    return (intrinsic_value - current_price) / intrinsic_value
