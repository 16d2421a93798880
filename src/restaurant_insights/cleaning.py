# ========================
# src/restaurant_insights/cleaning.py
# ========================

"""
Data Cleaning Module

Applies the cleaning rules to raw restaurant rows: canonical column names,
denylisted country codes, explicitly excluded ids, the city encoding
artifact, and numeric type coercion.
"""

import logging
import math
from collections import Counter
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from ..utils.exceptions import ConfigurationError, SchemaViolation

logger = logging.getLogger(__name__)

RATING_QUANTUM = Decimal('0.1')
MIN_RATING = Decimal('0.0')
MAX_RATING = Decimal('5.0')

# Largest accepted decimal exponents: votes under 10**15, price range under 1000.
MAX_VOTES_EXPONENT = 14
MAX_PRICE_RANGE_EXPONENT = 2

# Header spellings seen in the raw export, lower-cased, mapped to the
# canonical field names used everywhere downstream.
COLUMN_MAP = {
    'restaurantid': 'id', 'restaurant_id': 'id', 'id': 'id',
    'restaurantname': 'name', 'restaurant_name': 'name', 'name': 'name',
    'countrycode': 'country_code', 'country_code': 'country_code',
    'city': 'city',
    'locality': 'locality',
    'cuisines': 'cuisines',
    'currency': 'currency',
    'has_table_booking': 'has_table_booking',
    'has_online_delivery': 'has_online_delivery',
    'price_range': 'price_range',
    'votes': 'votes',
    'average_cost_for_two': 'average_cost_for_two',
    'rating': 'rating', 'aggregate_rating': 'rating',
}

TEXT_FIELDS = ('id', 'name', 'country_code', 'city', 'locality', 'cuisines', 'currency')

FLAG_MAP = {'yes': True, 'no': False}


def canonicalize_columns(record: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of the row keyed by canonical field names.

    Unknown columns are kept under their original name.
    """
    canonical = {}
    for key, value in record.items():
        if key is None:
            continue
        normalized = key.strip().lower().replace(' ', '_')
        canonical[COLUMN_MAP.get(normalized, key)] = value
    return canonical


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class RestaurantCleaner:
    """
    Applies the cleaning rules to raw restaurant rows.

    Rows are dropped for a denylisted country code, an excluded id, or a
    missing id. Numeric coercion failures do not drop the row: the field is
    set to None and a SchemaViolation issue is recorded.
    """

    def __init__(self,
                 country_code_denylist: Optional[Iterable[str]] = None,
                 excluded_ids: Optional[Iterable[str]] = None,
                 city_artifact: str = '?',
                 city_replacement: str = 'i'):
        """
        Initialize the cleaner.

        Args:
            country_code_denylist: Malformed country code tokens to drop
            excluded_ids: Restaurant ids to drop regardless of content
            city_artifact: Garbled character found in city names
            city_replacement: Character that replaces the artifact

        Raises:
            ConfigurationError: If the denylist or exclusion set is malformed
        """
        self.country_code_denylist = self._token_set('country_code_denylist', country_code_denylist)
        self.excluded_ids = self._token_set('excluded_ids', excluded_ids)
        if not isinstance(city_artifact, str) or not city_artifact:
            raise ConfigurationError("city_artifact must be a non-empty string",
                                     {'field': 'city_artifact', 'value': city_artifact})
        self.city_artifact = city_artifact
        self.city_replacement = city_replacement

        self.records_processed = 0
        self.dropped = Counter()
        self.violations_by_field = Counter()
        self.records_with_violations = 0
        self.issues = []
        self._seen_ids = set()
        self.duplicate_ids = set()
        logger.info(
            f"RestaurantCleaner initialized with {len(self.country_code_denylist)} denylisted codes, "
            f"{len(self.excluded_ids)} excluded ids"
        )

    @classmethod
    def from_config(cls, config) -> 'RestaurantCleaner':
        return cls(
            country_code_denylist=config.COUNTRY_CODE_DENYLIST,
            excluded_ids=config.EXCLUDED_RESTAURANT_IDS,
            city_artifact=config.CITY_ARTIFACT_CHAR,
            city_replacement=config.CITY_ARTIFACT_REPLACEMENT,
        )

    @staticmethod
    def _token_set(name: str, values: Optional[Iterable[str]]) -> frozenset:
        if values is None:
            return frozenset()
        if isinstance(values, str) or not isinstance(values, (list, tuple, set, frozenset)):
            raise ConfigurationError(f"{name} must be a list of strings",
                                     {'field': name, 'value': values})
        tokens = set()
        for value in values:
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(f"{name} contains a blank or non-string entry",
                                         {'field': name, 'value': value})
            tokens.add(value.strip())
        return frozenset(tokens)

    def clean(self, rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Clean a sequence of raw rows.

        Args:
            rows: Raw rows as read from the source

        Returns:
            list[dict]: New cleaned rows; the input rows are not modified
        """
        cleaned = []
        for row in rows:
            cleaned_row = self.clean_record(row)
            if cleaned_row is not None:
                cleaned.append(cleaned_row)
        return cleaned

    def clean_record(self, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Apply all cleaning rules to a single row.

        Args:
            record (dict): A raw row.

        Returns:
            dict or None: The cleaned row, or None if the row is dropped.
        """
        self.records_processed += 1
        cleaned_record = canonicalize_columns(record)

        # 1. Strip text fields
        for text_field in TEXT_FIELDS:
            value = cleaned_record.get(text_field)
            cleaned_record[text_field] = value.strip() if isinstance(value, str) else value

        restaurant_id = cleaned_record.get('id')
        if _is_blank(restaurant_id):
            self._drop('missing_id')
            self._record_issue(SchemaViolation(
                "Row has no restaurant id",
                {'row_id': None, 'field': 'id', 'value': restaurant_id}))
            return None
        restaurant_id = str(restaurant_id).strip()
        cleaned_record['id'] = restaurant_id

        # 2. Drop known-bad rows
        country_code = cleaned_record.get('country_code')
        if isinstance(country_code, str) and country_code in self.country_code_denylist:
            self._drop('denylisted_country_code')
            logger.debug(f"Row {restaurant_id} dropped: denylisted country code {country_code!r}")
            return None

        if restaurant_id in self.excluded_ids:
            self._drop('excluded_id')
            logger.debug(f"Row {restaurant_id} dropped: id is excluded")
            return None

        if restaurant_id in self._seen_ids:
            self.duplicate_ids.add(restaurant_id)
        self._seen_ids.add(restaurant_id)

        # 3. Fix the city encoding artifact
        city = cleaned_record.get('city')
        if isinstance(city, str) and self.city_artifact in city:
            cleaned_record['city'] = city.replace(self.city_artifact, self.city_replacement)

        # 4. Coerce numeric and flag fields
        violations = []
        coercions = (
            ('votes', self._clean_votes),
            ('average_cost_for_two', self._clean_cost),
            ('rating', self._clean_rating),
            ('price_range', self._clean_price_range),
            ('has_online_delivery', self._clean_flag),
            ('has_table_booking', self._clean_flag),
        )
        for field_name, coerce in coercions:
            try:
                cleaned_record[field_name] = coerce(cleaned_record.get(field_name))
            except SchemaViolation as violation:
                violation.context.update({'row_id': restaurant_id, 'field': field_name})
                violations.append(violation)
                cleaned_record[field_name] = False if field_name.startswith('has_') else None

        if violations:
            self.records_with_violations += 1
            for violation in violations:
                self._record_issue(violation)

        return cleaned_record

    def _clean_votes(self, value: Any) -> int:
        """Votes must be a non-negative whole number."""
        number = self._parse_decimal(value)
        if number != number.to_integral_value() or number < 0:
            raise SchemaViolation("Votes must be a non-negative integer", {'value': value})
        if number.adjusted() > MAX_VOTES_EXPONENT:
            raise SchemaViolation("Votes are out of range", {'value': value})
        return int(number)

    def _clean_cost(self, value: Any) -> float:
        """Average cost for two must be a non-negative amount."""
        number = self._parse_decimal(value)
        if number < 0:
            raise SchemaViolation("Average cost for two must not be negative", {'value': value})
        cost = float(number)
        if not math.isfinite(cost):
            raise SchemaViolation("Average cost for two is out of range", {'value': value})
        return cost

    def _clean_rating(self, value: Any) -> Optional[Decimal]:
        """
        Ratings are fixed-point with one fractional digit in [0.0, 5.0].
        A blank rating means the restaurant is unrated.
        """
        if _is_blank(value):
            return None
        number = self._parse_decimal(value)
        if number.adjusted() > 0:
            raise SchemaViolation("Rating must be between 0.0 and 5.0", {'value': value})
        try:
            rating = number.quantize(RATING_QUANTUM, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            raise SchemaViolation("Unparsable rating", {'value': value})
        if not MIN_RATING <= rating <= MAX_RATING:
            raise SchemaViolation("Rating must be between 0.0 and 5.0", {'value': value})
        return rating

    def _clean_price_range(self, value: Any) -> Optional[int]:
        """Price range is an ordinal; blank means unknown."""
        if _is_blank(value):
            return None
        number = self._parse_decimal(value)
        if number != number.to_integral_value():
            raise SchemaViolation("Price range must be a whole number", {'value': value})
        if number.adjusted() > MAX_PRICE_RANGE_EXPONENT:
            raise SchemaViolation("Price range is out of range", {'value': value})
        return int(number)

    def _clean_flag(self, value: Any) -> bool:
        """Service flags arrive as the literal strings YES/NO."""
        if isinstance(value, bool):
            return value
        if _is_blank(value):
            return False
        flag = FLAG_MAP.get(str(value).strip().lower())
        if flag is None:
            raise SchemaViolation("Service flag must be YES or NO", {'value': value})
        return flag

    @staticmethod
    def _parse_decimal(value: Any) -> Decimal:
        if _is_blank(value):
            raise SchemaViolation("Missing numeric value", {'value': value})
        if isinstance(value, bool):
            raise SchemaViolation("Boolean is not a numeric value", {'value': value})
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation:
            raise SchemaViolation("Unparsable numeric value", {'value': value})
        if not number.is_finite():
            raise SchemaViolation("Numeric value is not finite", {'value': value})
        return number

    def _drop(self, reason: str) -> None:
        self.dropped[reason] += 1

    def _record_issue(self, violation: SchemaViolation) -> None:
        self.violations_by_field[violation.context.get('field')] += 1
        self.issues.append(violation.to_dict())
        logger.debug(str(violation))

    def get_statistics(self) -> Dict[str, Any]:
        """Get cleaning statistics."""
        records_dropped = sum(self.dropped.values())
        records_cleaned = self.records_processed - records_dropped
        return {
            'records_processed': self.records_processed,
            'records_dropped': records_dropped,
            'records_cleaned': records_cleaned,
            'dropped_by_reason': dict(self.dropped),
            'records_with_violations': self.records_with_violations,
            'violations_by_field': dict(self.violations_by_field),
            'duplicate_ids': len(self.duplicate_ids),
            'success_rate': records_cleaned / self.records_processed * 100 if self.records_processed > 0 else 0
        }
