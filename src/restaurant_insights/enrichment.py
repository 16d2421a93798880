# ========================
# src/restaurant_insights/enrichment.py
# ========================

"""
Data Enrichment Module

Turns cleaned rows into immutable Restaurant records: country name from the
lookup, rating and price categories, and the split cuisine list. Also builds
the in-memory snapshot (records plus indices) the analytical views read.
"""

import logging
from collections import Counter, defaultdict
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .models import (
    Restaurant,
    EXCELLENT, GREAT, GOOD, POOR, UNRATED,
    BUDGET, MODERATE, EXPENSIVE, LUXURY, UNKNOWN,
)
from ..utils.exceptions import LookupMiss

logger = logging.getLogger(__name__)

# Lower bounds, checked top-down; a rating on a boundary gets the higher label.
RATING_THRESHOLDS = (
    (Decimal('4.5'), EXCELLENT),
    (Decimal('3.5'), GREAT),
    (Decimal('2.5'), GOOD),
    (Decimal('1.0'), POOR),
)

PRICE_CATEGORY_MAP = {1: BUDGET, 2: MODERATE, 3: EXPENSIVE, 4: LUXURY}


def rate_category(rating: Optional[Decimal]) -> str:
    """Map a rating to its category; anything below 1.0 or missing is UNRATED."""
    if rating is None:
        return UNRATED
    for lower_bound, label in RATING_THRESHOLDS:
        if rating >= lower_bound:
            return label
    return UNRATED


def price_category(price_range: Optional[int]) -> str:
    """Map the price_range ordinal to its category; anything else is UNKNOWN."""
    if isinstance(price_range, bool):
        return UNKNOWN
    return PRICE_CATEGORY_MAP.get(price_range, UNKNOWN)


def split_cuisines(cuisines: Optional[str]) -> Tuple[str, ...]:
    """
    Split a comma-delimited cuisine string into trimmed tokens.

    Empty tokens are discarded and a repeated token is kept once, at its
    first position.

    >>> split_cuisines("North Indian, Chinese,, ")
    ('North Indian', 'Chinese')
    """
    if not cuisines:
        return ()
    tokens = []
    for token in cuisines.split(','):
        token = token.strip()
        if token and token not in tokens:
            tokens.append(token)
    return tuple(tokens)


class RestaurantEnricher:
    """
    Derives country name, categories and cuisine lists for cleaned rows.
    Rows whose country code is not in the lookup are excluded and counted.
    """

    def __init__(self, country_lookup: Mapping[str, str]):
        """
        Initialize the enricher.

        Args:
            country_lookup: Mapping of country code to country name
        """
        self.country_lookup = {str(code).strip(): name for code, name in country_lookup.items()}
        self.records_processed = 0
        self.lookup_misses = Counter()
        self.issues = []
        logger.info(f"RestaurantEnricher initialized with {len(self.country_lookup)} country codes")

    def enrich(self, rows: Iterable[Dict[str, Any]]) -> List[Restaurant]:
        """
        Enrich cleaned rows into Restaurant records.

        Args:
            rows: Cleaned rows, in input order

        Returns:
            list[Restaurant]: One record per row with a known country
        """
        restaurants = []
        for row in rows:
            position = self.records_processed
            self.records_processed += 1
            try:
                restaurants.append(self.enrich_record(row, position))
            except LookupMiss as miss:
                self.lookup_misses[miss.context.get('value')] += 1
                self.issues.append(miss.to_dict())
                logger.debug(str(miss))

        if self.lookup_misses:
            logger.warning(
                f"{sum(self.lookup_misses.values())} rows excluded: country code not in lookup "
                f"({', '.join(sorted(map(str, self.lookup_misses)))})"
            )
        logger.info(f"Enriched {len(restaurants)}/{self.records_processed} rows")
        return restaurants

    def enrich_record(self, row: Dict[str, Any], position: int = 0) -> Restaurant:
        """
        Build a single Restaurant record.

        Raises:
            LookupMiss: If the row's country code has no lookup entry
        """
        country_code = row.get('country_code')
        code_key = str(country_code).strip() if country_code is not None else ''
        country_name = self.country_lookup.get(code_key)
        if country_name is None:
            raise LookupMiss(
                f"Country code {country_code!r} has no lookup entry",
                {'row_id': row.get('id'), 'field': 'country_code', 'value': country_code},
            )

        cuisines = row.get('cuisines') or ''
        return Restaurant(
            id=row['id'],
            name=row.get('name') or '',
            country_code=code_key,
            country_name=country_name,
            city=row.get('city') or '',
            locality=row.get('locality') or '',
            cuisines=cuisines,
            cuisine_list=split_cuisines(cuisines),
            rating=row.get('rating'),
            votes=row.get('votes'),
            average_cost_for_two=row.get('average_cost_for_two'),
            price_range=row.get('price_range'),
            has_online_delivery=bool(row.get('has_online_delivery')),
            has_table_booking=bool(row.get('has_table_booking')),
            rate_category=rate_category(row.get('rating')),
            price_category=price_category(row.get('price_range')),
            currency=row.get('currency') or None,
            position=position,
        )

    def get_statistics(self) -> Dict[str, Any]:
        """Get enrichment statistics."""
        misses = sum(self.lookup_misses.values())
        return {
            'records_processed': self.records_processed,
            'records_enriched': self.records_processed - misses,
            'lookup_misses': misses,
            'unmatched_country_codes': {str(code): count for code, count in self.lookup_misses.items()},
        }


class RestaurantSnapshot:
    """
    Immutable view of all enriched records plus the indices built once for
    the analytical views.

    The cuisine index maps each cuisine to references to the records that
    serve it; records are never copied per cuisine.
    """

    def __init__(self, restaurants: Iterable[Restaurant]):
        self.restaurants = tuple(restaurants)
        by_country = defaultdict(list)
        cuisine_index = defaultdict(list)
        for restaurant in self.restaurants:
            by_country[restaurant.country_name.casefold()].append(restaurant)
            for cuisine in restaurant.cuisine_list:
                cuisine_index[cuisine].append(restaurant)
        self._by_country = {key: tuple(value) for key, value in by_country.items()}
        self._cuisine_index = {key: tuple(value) for key, value in cuisine_index.items()}

    def __len__(self) -> int:
        return len(self.restaurants)

    def scoped(self, country: Optional[str] = None) -> Tuple[Restaurant, ...]:
        """Records of one country (case-insensitive), or all when country is None."""
        if country is None:
            return self.restaurants
        return self._by_country.get(country.casefold(), ())

    def cuisine_index(self, country: Optional[str] = None) -> Dict[str, Tuple[Restaurant, ...]]:
        """Cuisine -> records serving it, optionally restricted to one country."""
        if country is None:
            return dict(self._cuisine_index)
        wanted = country.casefold()
        index = {}
        for cuisine, restaurants in self._cuisine_index.items():
            members = tuple(r for r in restaurants if r.country_name.casefold() == wanted)
            if members:
                index[cuisine] = members
        return index

    def countries(self) -> List[str]:
        """Distinct country names in first-seen order."""
        seen = {}
        for restaurant in self.restaurants:
            seen.setdefault(restaurant.country_name, None)
        return list(seen)
