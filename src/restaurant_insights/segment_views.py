# ========================
# src/restaurant_insights/segment_views.py
# ========================

"""
Segment Views

Cuisine performance, service adoption by rating/price segment, service
tier impact, and the price x rating customer preference matrix.
"""

from decimal import Decimal
from typing import Optional

from .enrichment import RestaurantSnapshot
from .models import (
    ViewResult, Restaurant, RATE_CATEGORIES, PRICE_REPORT_ORDER,
    EXCELLENT, GREAT, POOR, BUDGET, MODERATE, LUXURY,
)
from .ranking import (
    group_by, standard_rank, row_numbers, descending, mean, missing, sample_stdev,
    percentile_cont, percentage, rounded,
)

HIGH_RATING = Decimal('4.0')


def cuisine_segment(popularity_rank: int, quality_rank: int) -> str:
    if popularity_rank <= 10 and quality_rank <= 10:
        return 'HIGH_DEMAND_HIGH_QUALITY'
    if popularity_rank <= 10:
        return 'HIGH_DEMAND_MODERATE_QUALITY'
    if quality_rank <= 10:
        return 'NICHE_HIGH_QUALITY'
    return 'EMERGING_SEGMENT'


def service_adoption_tier(both_services_ratio: float) -> str:
    if both_services_ratio >= 0.7:
        return 'SERVICE_LEADERS'
    if both_services_ratio >= 0.4:
        return 'SERVICE_ADOPTERS'
    if both_services_ratio >= 0.2:
        return 'SELECTIVE_ADOPTERS'
    return 'TRADITIONAL_MODEL'


def service_tier(restaurant: Restaurant) -> str:
    if restaurant.has_online_delivery and restaurant.has_table_booking:
        return 'FULL_SERVICE'
    if restaurant.has_online_delivery:
        return 'DELIVERY_ONLY'
    if restaurant.has_table_booking:
        return 'BOOKING_ONLY'
    return 'BASIC_SERVICE'


def preference_segment(price_category: str, rate_category: str) -> str:
    if price_category == LUXURY and rate_category == EXCELLENT:
        return 'PREMIUM_EXCELLENCE'
    if price_category == BUDGET and rate_category in (GREAT, EXCELLENT):
        return 'VALUE_CHAMPIONS'
    if price_category == MODERATE and rate_category == GREAT:
        return 'SWEET_SPOT'
    if rate_category == POOR:
        return 'REQUIRES_ATTENTION'
    return 'STANDARD_SEGMENT'


def _segment_order(rate_category: str, price_category: str):
    return (RATE_CATEGORIES.index(rate_category), PRICE_REPORT_ORDER.index(price_category))


def cuisine_performance(snapshot: RestaurantSnapshot,
                        country: Optional[str] = None,
                        min_restaurants: int = 20,
                        min_token_length: int = 3) -> ViewResult:
    """
    Popularity and quality ranking of individual cuisines.

    A restaurant serving several cuisines counts once towards each of them.
    Cuisines shorter than `min_token_length` characters or served by fewer
    than `min_restaurants` distinct restaurants are left out before ranking.
    """
    result = ViewResult('cuisine_performance', scope=country)
    unrated_ids = set()

    stats = []
    for cuisine, members in snapshot.cuisine_index(country).items():
        if len(cuisine) < min_token_length:
            continue
        restaurant_count = len({r.id for r in members})
        if restaurant_count < min_restaurants:
            continue
        unrated_ids.update(r.id for r in members if r.rating is None)
        online = sum(1 for r in members if r.has_online_delivery)
        premium = sum(1 for r in members if r.rating is not None and r.rating >= HIGH_RATING)
        stats.append({
            'cuisine': cuisine,
            'restaurant_count': restaurant_count,
            'city_presence': len({r.city for r in members}),
            'avg_rating': mean(r.rating_value for r in members),
            'avg_votes': rounded(mean(r.votes for r in members), 0),
            'avg_cost_for_two': rounded(mean(r.average_cost_for_two for r in members), 0),
            'digital_adoption_pct': percentage(online, restaurant_count, 1),
            'premium_segment_pct': percentage(premium, restaurant_count, 1),
            'rating_consistency': rounded(sample_stdev(r.rating_value for r in members), 2),
        })

    result.dropped = len(unrated_ids)

    popularity_ranks = standard_rank(stats, lambda s: -s['restaurant_count'])
    quality_ranks = standard_rank(stats, lambda s: descending(s['avg_rating']))

    for stat, popularity_rank, quality_rank in zip(stats, popularity_ranks, quality_ranks):
        result.rows.append({
            'cuisine': stat['cuisine'],
            'restaurant_count': stat['restaurant_count'],
            'popularity_rank': popularity_rank,
            'city_presence': stat['city_presence'],
            'avg_rating': rounded(stat['avg_rating'], 2),
            'quality_rank': quality_rank,
            'avg_votes': stat['avg_votes'],
            'avg_cost_for_two': stat['avg_cost_for_two'],
            'digital_adoption_pct': stat['digital_adoption_pct'],
            'premium_segment_pct': stat['premium_segment_pct'],
            'rating_consistency': stat['rating_consistency'],
            'market_segment': cuisine_segment(popularity_rank, quality_rank),
        })

    result.rows.sort(key=lambda row: -row['restaurant_count'])
    return result


def service_correlation(snapshot: RestaurantSnapshot,
                        country: Optional[str] = None) -> ViewResult:
    """
    Delivery, booking and full-service adoption per (rating, price) segment.
    """
    result = ViewResult('service_correlation', scope=country)
    groups = group_by(snapshot.scoped(country), lambda r: (r.rate_category, r.price_category))

    for (rate, price) in sorted(groups, key=lambda key: _segment_order(*key)):
        members = groups[(rate, price)]
        count = len(members)
        both = sum(1 for r in members if r.has_both_services)
        result.rows.append({
            'rate_category': rate,
            'price_category': price,
            'restaurant_count': count,
            'avg_customer_engagement': rounded(mean(r.votes for r in members), 0),
            'online_delivery_adoption_pct': percentage(sum(1 for r in members if r.has_online_delivery), count, 1),
            'table_booking_adoption_pct': percentage(sum(1 for r in members if r.has_table_booking), count, 1),
            'full_service_adoption_pct': percentage(both, count, 1),
            'service_adoption_tier': service_adoption_tier(both / count),
        })
    return result


def service_impact(snapshot: RestaurantSnapshot,
                   country: Optional[str] = None,
                   min_restaurants: int = 10) -> ViewResult:
    """
    Performance of each service tier within a (rating, price) segment.

    Groups with fewer than `min_restaurants` restaurants are left out.
    """
    result = ViewResult('service_impact', scope=country)
    groups = group_by(
        snapshot.scoped(country),
        lambda r: (service_tier(r), r.rate_category, r.price_category),
    )

    rows = []
    for (tier, rate, price), members in groups.items():
        count = len(members)
        if count < min_restaurants:
            continue
        result.dropped += missing(r.rating for r in members)
        avg_rating = mean(r.rating_value for r in members)
        avg_votes = mean(r.votes for r in members)
        avg_cost = mean(r.average_cost_for_two for r in members)
        engagement_index = None
        if avg_votes is not None and avg_cost is not None:
            engagement_index = round(avg_cost * avg_votes / 100, 0)
        rows.append({
            'service_tier': tier,
            'rate_category': rate,
            'price_category': price,
            'restaurant_count': count,
            'avg_rating': avg_rating,
            'avg_customer_engagement': rounded(avg_votes, 0),
            'avg_cost_for_two': rounded(avg_cost, 0),
            'median_customer_engagement': rounded(
                percentile_cont((r.votes for r in members if r.votes is not None), 0.5), 0),
            'top_quartile_rating': rounded(
                percentile_cont((r.rating_value for r in members if r.rating is not None), 0.75), 2),
            'engagement_revenue_index': engagement_index,
        })

    rows.sort(key=lambda row: (row['service_tier'], descending(row['avg_rating'])))
    for row in rows:
        row['avg_rating'] = rounded(row['avg_rating'], 2)
    result.rows = rows
    return result


def customer_preference(snapshot: RestaurantSnapshot,
                        country: Optional[str] = None,
                        top_cuisines: int = 3) -> ViewResult:
    """
    Price x rating preference matrix with the most-voted cuisines per cell.
    """
    result = ViewResult('customer_preference', scope=country)
    groups = group_by(snapshot.scoped(country), lambda r: (r.price_category, r.rate_category))

    price_first = lambda key: (PRICE_REPORT_ORDER.index(key[0]), RATE_CATEGORIES.index(key[1]))
    for (price, rate) in sorted(groups, key=price_first):
        members = groups[(price, rate)]
        count = len(members)
        positions = row_numbers(members, lambda r: descending(r.votes))
        most_voted = sorted(
            (position, r.cuisines[:20]) for position, r in zip(positions, members)
            if position <= top_cuisines and r.cuisines
        )
        result.rows.append({
            'price_category': price,
            'rate_category': rate,
            'restaurant_count': count,
            'avg_votes': rounded(mean(r.votes for r in members), 0),
            'avg_cost_for_two': rounded(mean(r.average_cost_for_two for r in members), 0),
            'online_adoption_pct': percentage(sum(1 for r in members if r.has_online_delivery), count, 1),
            'booking_adoption_pct': percentage(sum(1 for r in members if r.has_table_booking), count, 1),
            'market_segment_classification': preference_segment(price, rate),
            'top_cuisines': ', '.join(cuisines for _, cuisines in most_voted),
        })
    return result
