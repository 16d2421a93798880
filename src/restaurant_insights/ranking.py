# ========================
# src/restaurant_insights/ranking.py
# ========================

"""
Ranking and Statistics Helpers

Sort, rank and aggregate primitives shared by the analytical views.
All sorts are stable, so ties keep their input order.
"""

import math
import statistics
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar('T')


def group_by(items: Iterable[T], key: Callable[[T], Any]) -> Dict[Any, List[T]]:
    """Group items by key; groups and their members keep first-seen order."""
    groups = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return groups


def descending(value: Any) -> Tuple[bool, Any]:
    """Sort key for descending order with missing values last."""
    if value is None:
        return (True, 0)
    return (False, -value)


def ascending(value: Any) -> Tuple[bool, Any]:
    """Sort key for ascending order with missing values last."""
    if value is None:
        return (True, 0)
    return (False, value)


def standard_rank(items: Sequence[T], key: Callable[[T], Any]) -> List[int]:
    """
    Competition ranking ("1224"): tied keys share a rank and the next
    distinct key skips ahead by the size of the tie.

    Args:
        items: Items to rank
        key: Sort key; items are ranked in ascending key order

    Returns:
        list[int]: Rank of each item, aligned with `items`
    """
    order = sorted(range(len(items)), key=lambda i: key(items[i]))
    ranks = [0] * len(items)
    previous_key = None
    current_rank = 0
    for position, index in enumerate(order, start=1):
        item_key = key(items[index])
        if position == 1 or item_key != previous_key:
            current_rank = position
            previous_key = item_key
        ranks[index] = current_rank
    return ranks


def row_numbers(items: Sequence[T], key: Callable[[T], Any]) -> List[int]:
    """Sequential position of each item in key order, ties in input order."""
    order = sorted(range(len(items)), key=lambda i: key(items[i]))
    numbers = [0] * len(items)
    for position, index in enumerate(order, start=1):
        numbers[index] = position
    return numbers


def percentile_cont(values: Iterable[float], fraction: float) -> Optional[float]:
    """
    Continuous percentile with linear interpolation between the two
    nearest ranks, as SQL PERCENTILE_CONT computes it.
    """
    ordered = sorted(values)
    if not ordered:
        return None
    position = fraction * (len(ordered) - 1)
    lower = math.floor(position)
    upper = math.ceil(position)
    if lower == upper:
        return float(ordered[lower])
    weight = position - lower
    return float(ordered[lower]) + (float(ordered[upper]) - float(ordered[lower])) * weight


def mean(values: Iterable[Optional[float]]) -> Optional[float]:
    """Average of the present values, None when there are none (SQL AVG)."""
    present = [float(v) for v in values if v is not None]
    if not present:
        return None
    return sum(present) / len(present)


def missing(values: Iterable[Optional[Any]]) -> int:
    """Number of missing values, the ones `mean` leaves out."""
    return sum(1 for v in values if v is None)


def sample_stdev(values: Iterable[Optional[float]]) -> Optional[float]:
    """Sample standard deviation of the present values (SQL STDEV)."""
    present = [float(v) for v in values if v is not None]
    if len(present) < 2:
        return None
    return statistics.stdev(present)


def percentage(numerator: float, denominator: float, digits: int = 2) -> Optional[float]:
    """numerator / denominator * 100, rounded; None for an empty denominator."""
    if not denominator:
        return None
    return round(numerator / denominator * 100, digits)


def rounded(value: Optional[float], digits: int = 2) -> Optional[float]:
    """Round a possibly-missing value."""
    if value is None:
        return None
    return round(value, digits)
