# ========================
# src/restaurant_insights/models.py
# ========================

"""
Data Model

The immutable restaurant record produced by enrichment, the category
labels derived from it, and the container every analytical view returns.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

# Rating categories, best first. This is also the report ordering.
EXCELLENT = 'EXCELLENT'
GREAT = 'GREAT'
GOOD = 'GOOD'
POOR = 'POOR'
UNRATED = 'UNRATED'
RATE_CATEGORIES = (EXCELLENT, GREAT, GOOD, POOR, UNRATED)

# Price categories keyed by the price_range ordinal.
BUDGET = 'BUDGET'
MODERATE = 'MODERATE'
EXPENSIVE = 'EXPENSIVE'
LUXURY = 'LUXURY'
UNKNOWN = 'UNKNOWN'
PRICE_CATEGORIES = (BUDGET, MODERATE, EXPENSIVE, LUXURY, UNKNOWN)

# Report ordering for price categories: most expensive first.
PRICE_REPORT_ORDER = (LUXURY, EXPENSIVE, MODERATE, BUDGET, UNKNOWN)


@dataclass(frozen=True)
class Restaurant:
    """
    A cleaned and enriched restaurant row.

    Derived fields are computed once by the enricher; instances are never
    mutated afterwards. `position` is the row's index in the input and is
    used to break ties in stable input order.
    """

    id: str
    name: str
    country_code: str
    country_name: str
    city: str
    locality: str
    cuisines: str
    cuisine_list: Tuple[str, ...]
    rating: Optional[Decimal]
    votes: Optional[int]
    average_cost_for_two: Optional[float]
    price_range: Optional[int]
    has_online_delivery: bool
    has_table_booking: bool
    rate_category: str
    price_category: str
    currency: Optional[str] = None
    position: int = 0

    @property
    def has_both_services(self) -> bool:
        return self.has_online_delivery and self.has_table_booking

    @property
    def rating_value(self) -> Optional[float]:
        """Rating as a float for averaging, or None when unrated."""
        return float(self.rating) if self.rating is not None else None


@dataclass
class ViewResult:
    """
    Output of one analytical view.

    Attributes:
        name: View name, also used as the output file stem
        rows: Ordered result rows
        dropped: Rows excluded, or left out of a rating average, because
            their rating or another value the view needs was missing
        scope: Country the view was restricted to, or None for global
    """

    name: str
    rows: List[Dict[str, Any]] = field(default_factory=list)
    dropped: int = 0
    scope: Optional[str] = None

    def summary(self) -> Dict[str, Any]:
        return {
            'rows': len(self.rows),
            'dropped': self.dropped,
            'scope': self.scope or 'global',
        }
