# ========================
# src/restaurant_insights/quality.py
# ========================

"""
Data Quality and Summary Views

Assessment of the raw input (duplicate ids, column completeness) and the
headline figures of the cleaned snapshot.
"""

from collections import Counter
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from .cleaning import canonicalize_columns
from .enrichment import RestaurantSnapshot
from .models import ViewResult
from .ranking import group_by, mean, percentage, rounded

COMPLETENESS_COLUMNS = ('id', 'name', 'cuisines')


def _present(value: Any) -> bool:
    if value is None:
        return False
    return not (isinstance(value, str) and not value.strip())


class DataQualityAssessor:
    """
    Duplicate restaurant ids and completeness of the key columns in the raw
    input, before any cleaning. Blank strings count as missing.

    Rows can be observed chunk by chunk; only counters are kept.
    """

    def __init__(self):
        self.total_records = 0
        self.non_null = Counter()
        self.id_counts = Counter()

    def observe(self, raw_rows: Iterable[Dict[str, Any]]) -> None:
        for raw_row in raw_rows:
            row = canonicalize_columns(raw_row)
            self.total_records += 1
            for column in COMPLETENESS_COLUMNS:
                if _present(row.get(column)):
                    self.non_null[column] += 1
            if _present(row.get('id')):
                self.id_counts[str(row['id']).strip()] += 1

    def to_view(self) -> ViewResult:
        result = ViewResult('data_quality')
        total = self.total_records
        if not total:
            return result

        duplicated = {rid: count for rid, count in self.id_counts.items() if count > 1}
        result.rows.append({
            'check': 'duplicates',
            'column_name': 'id',
            'total_records': total,
            'non_null_count': None,
            'null_count': None,
            'completeness_pct': None,
            'duplicate_ids': len(duplicated),
            'duplicate_records': sum(duplicated.values()),
        })

        for column in COMPLETENESS_COLUMNS:
            non_null = self.non_null[column]
            result.rows.append({
                'check': 'completeness',
                'column_name': column,
                'total_records': total,
                'non_null_count': non_null,
                'null_count': total - non_null,
                'completeness_pct': percentage(non_null, total, 2),
                'duplicate_ids': None,
                'duplicate_records': None,
            })
        return result


def assess_data_quality(raw_rows: Iterable[Dict[str, Any]]) -> ViewResult:
    """Data quality view of an in-memory sequence of raw rows."""
    assessor = DataQualityAssessor()
    assessor.observe(raw_rows)
    return assessor.to_view()


def summary_statistics(snapshot: RestaurantSnapshot) -> ViewResult:
    """Restaurant, country and city counts plus the overall average rating."""
    result = ViewResult('summary_statistics')
    restaurants = snapshot.scoped(None)
    if not restaurants:
        return result

    result.rows = [
        {'metric': 'Total Restaurants', 'value': len(restaurants)},
        {'metric': 'Countries Covered', 'value': len({r.country_name for r in restaurants})},
        {'metric': 'Cities Covered', 'value': len({r.city for r in restaurants})},
        {'metric': 'Average Rating', 'value': rounded(mean(r.rating_value for r in restaurants), 2)},
    ]
    return result


def executive_kpis(snapshot: RestaurantSnapshot, country: Optional[str] = None) -> ViewResult:
    """
    Headline KPIs for the focus market. KPIs whose denominator is empty are
    left out rather than reported as zero.
    """
    result = ViewResult('executive_kpis', scope=country)
    everything = snapshot.scoped(None)
    if not everything:
        return result
    focus = snapshot.scoped(country)
    label = country or 'All Markets'

    def add(metric: str, value: Any, display: str, segment: str) -> None:
        result.rows.append({'kpi_metric': metric, 'value': value, 'display': display, 'segment': segment})

    add('Total Active Restaurants', len(everything), f"{len(everything):,}", 'All Markets')

    share = percentage(len(focus), len(everything), 2)
    add(f'{label} Market Share', share, f"{share:,.2f}%", f'{label} Focus')
    if not focus:
        return result

    avg_rating = mean(r.rating_value for r in focus)
    if avg_rating is not None:
        add(f'Average Rating ({label})', rounded(avg_rating, 2), f"{avg_rating:,.2f}", 'Quality Metric')

    digital = percentage(sum(1 for r in focus if r.has_online_delivery), len(focus), 1)
    add(f'Digital Adoption Rate ({label})', digital, f"{digital:,.1f}%", 'Digital Transformation')

    premium = percentage(
        sum(1 for r in focus if r.rating is not None and r.rating >= Decimal('4.0')), len(focus), 1
    )
    add('Premium Segment (4+ Rating)', premium, f"{premium:,.1f}%", 'Quality Distribution')

    city_counts = {city: len(members) for city, members in group_by(focus, lambda r: r.city).items()}
    top_count = max(city_counts.values())
    for city, count in city_counts.items():
        if count == top_count:
            add('Top City - Restaurant Count', count, f"{city} ({count:,})", 'Market Concentration')

    integration = percentage(sum(1 for r in focus if r.has_both_services), len(focus), 1)
    add('Service Integration Rate', integration, f"{integration:,.1f}%", 'Full Service Adoption')
    return result
