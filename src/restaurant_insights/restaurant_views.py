# ========================
# src/restaurant_insights/restaurant_views.py
# ========================

"""
Restaurant-Level Views

Per-restaurant benchmarking within each city: competitive position,
business opportunity and the success probability score. Every view here
needs a rating, so unrated rows are excluded and counted as dropped.
"""

from decimal import Decimal
from typing import Optional

from .enrichment import RestaurantSnapshot
from .models import ViewResult, Restaurant, BUDGET, MODERATE, EXPENSIVE, LUXURY
from .ranking import group_by, standard_rank, row_numbers, descending, mean, percentile_cont, rounded

COMPETITIVE_POSITIONS = (
    'MARKET_LEADER', 'QUALITY_CHAMPION', 'CUSTOMER_FAVORITE', 'VALUE_LEADER', 'STANDARD_PERFORMER',
)

POSITIONING_SCORES = {MODERATE: 25, BUDGET: 20, EXPENSIVE: 15, LUXURY: 10}

# (minimum votes, score), checked top-down.
ENGAGEMENT_BREAKPOINTS = ((1000, 25), (500, 20), (100, 15), (50, 10))


def _at_least(value, threshold) -> bool:
    """value >= threshold, false for a missing value like a SQL comparison with NULL."""
    return value is not None and value >= threshold


def _at_most(value, threshold) -> bool:
    return value is not None and value <= threshold


def _below(value, threshold) -> bool:
    return value is not None and value < threshold


def service_offerings(restaurant: Restaurant) -> str:
    if restaurant.has_both_services:
        return 'Both Services'
    if restaurant.has_online_delivery:
        return 'Online Delivery'
    if restaurant.has_table_booking:
        return 'Table Booking'
    return 'Basic Service'


def competitive_position(quality_rank: int, popularity_rank: int, restaurant: Restaurant,
                         city_rating_p90: Optional[float], city_avg_cost: Optional[float]) -> str:
    if quality_rank <= 5 and popularity_rank <= 10:
        return 'MARKET_LEADER'
    if quality_rank <= 10 and _at_least(restaurant.rating_value, city_rating_p90):
        return 'QUALITY_CHAMPION'
    if popularity_rank <= 5:
        return 'CUSTOMER_FAVORITE'
    if restaurant.rating >= Decimal('4.5') and _at_most(restaurant.average_cost_for_two, city_avg_cost):
        return 'VALUE_LEADER'
    return 'STANDARD_PERFORMER'


def competitive_ranking(snapshot: RestaurantSnapshot,
                        country: Optional[str] = None,
                        min_votes: int = 50) -> ViewResult:
    """
    Quality and popularity ranks of established restaurants within their city.

    Only restaurants with at least `min_votes` votes take part. The city's
    90th percentile rating and average cost are computed over those same
    restaurants.
    """
    result = ViewResult('competitive_ranking', scope=country)
    eligible = []
    for restaurant in snapshot.scoped(country):
        if restaurant.rating is None or restaurant.votes is None:
            result.dropped += 1
            continue
        if restaurant.votes >= min_votes:
            eligible.append(restaurant)

    rows = []
    for city, members in group_by(eligible, lambda r: r.city).items():
        quality_ranks = standard_rank(members, lambda r: (descending(r.rating), descending(r.votes)))
        popularity_ranks = standard_rank(members, lambda r: descending(r.votes))
        city_rating_p90 = percentile_cont((r.rating_value for r in members), 0.9)
        city_avg_cost = mean(r.average_cost_for_two for r in members)

        for restaurant, quality_rank, popularity_rank in zip(members, quality_ranks, popularity_ranks):
            rows.append({
                'restaurant_id': restaurant.id,
                'restaurant_name': restaurant.name,
                'city': city,
                'locality': restaurant.locality,
                'primary_cuisines': restaurant.cuisines[:50],
                'rating': float(restaurant.rating),
                'votes': restaurant.votes,
                'cost_for_two': rounded(restaurant.average_cost_for_two, 0),
                'price_category': restaurant.price_category,
                'city_quality_rank': quality_rank,
                'city_popularity_rank': popularity_rank,
                'city_rating_p90': rounded(city_rating_p90, 2),
                'competitive_position': competitive_position(
                    quality_rank, popularity_rank, restaurant, city_rating_p90, city_avg_cost
                ),
                'service_offerings': service_offerings(restaurant),
            })

    rows.sort(key=lambda row: (COMPETITIVE_POSITIONS.index(row['competitive_position']), -row['rating']))
    result.rows = rows
    return result


def opportunity_priority(restaurant: Restaurant) -> int:
    if (_at_least(restaurant.rating, Decimal('4.0')) and _at_least(restaurant.votes, 100)
            and _below(restaurant.average_cost_for_two, 1000) and restaurant.has_both_services):
        return 1
    if _at_least(restaurant.rating, Decimal('4.5')) and _below(restaurant.votes, 50):
        return 2
    return 3


def opportunity_category(restaurant: Restaurant) -> str:
    if opportunity_priority(restaurant) == 1:
        return 'HIGH_VALUE_OPPORTUNITY'
    if _at_least(restaurant.rating, Decimal('4.5')) and _below(restaurant.votes, 50):
        return 'HIDDEN_GEM'
    if (_at_most(restaurant.rating, Decimal('3.5'))
            and not restaurant.has_online_delivery and not restaurant.has_table_booking):
        return 'IMPROVEMENT_CANDIDATE'
    if _at_least(restaurant.average_cost_for_two, 2000) and _at_least(restaurant.rating, Decimal('4.0')):
        return 'PREMIUM_SEGMENT'
    return 'STANDARD_OPERATION'


def recommended_action(restaurant: Restaurant) -> str:
    if not restaurant.has_online_delivery:
        return 'Add Online Delivery'
    if not restaurant.has_table_booking:
        return 'Add Table Booking'
    if _below(restaurant.votes, 100):
        return 'Increase Marketing'
    return 'Maintain Excellence'


def opportunity_scoring(snapshot: RestaurantSnapshot,
                        country: Optional[str] = None) -> ViewResult:
    """
    Business opportunity category and in-city ranking of rated restaurants.

    Within a city restaurants are numbered by opportunity priority, then
    rating and votes, both descending; ties keep input order.
    """
    result = ViewResult('opportunity_scoring', scope=country)
    rated = []
    for restaurant in snapshot.scoped(country):
        if restaurant.rating is None:
            result.dropped += 1
        else:
            rated.append(restaurant)

    by_city = group_by(rated, lambda r: r.city)
    for city in sorted(by_city):
        members = by_city[city]
        numbers = row_numbers(
            members,
            lambda r: (opportunity_priority(r), descending(r.rating), descending(r.votes)),
        )
        ranked = sorted(zip(numbers, members), key=lambda pair: pair[0])
        for number, restaurant in ranked:
            result.rows.append({
                'restaurant_id': restaurant.id,
                'restaurant_name': restaurant.name,
                'city': city,
                'locality': restaurant.locality,
                'cuisine_offerings': restaurant.cuisines[:40],
                'rating': float(restaurant.rating),
                'customer_engagement': restaurant.votes,
                'cost_for_two': rounded(restaurant.average_cost_for_two, 0),
                'price_category': restaurant.price_category,
                'opportunity_priority': opportunity_priority(restaurant),
                'opportunity_category': opportunity_category(restaurant),
                'opportunity_rank_in_city': number,
                'recommended_action': recommended_action(restaurant),
            })
    return result


def rating_score(rating: Decimal) -> int:
    """25 points from 4.0 up, otherwise rating x 6.25 truncated."""
    if rating >= Decimal('4.0'):
        return 25
    return int(rating * Decimal('6.25'))


def engagement_score(votes: Optional[int]) -> int:
    for minimum_votes, score in ENGAGEMENT_BREAKPOINTS:
        if _at_least(votes, minimum_votes):
            return score
    return 5


def positioning_score(price_category: str) -> int:
    return POSITIONING_SCORES.get(price_category, 5)


def success_tier(total_score: int) -> str:
    if total_score >= 85:
        return 'HIGH_SUCCESS_PROBABILITY'
    if total_score >= 70:
        return 'MODERATE_SUCCESS_PROBABILITY'
    if total_score >= 55:
        return 'AVERAGE_PERFORMANCE'
    if total_score >= 40:
        return 'IMPROVEMENT_NEEDED'
    return 'HIGH_RISK_OPERATION'


def city_competitive_position(city_rank: int) -> str:
    if city_rank <= 5:
        return 'TOP_TIER_IN_CITY'
    if city_rank <= 15:
        return 'STRONG_PERFORMER'
    if city_rank <= 30:
        return 'AVERAGE_PERFORMER'
    return 'BELOW_AVERAGE'


def score_components(restaurant: Restaurant) -> dict:
    """The five weighted components of the success score."""
    return {
        'rating_score': rating_score(restaurant.rating),
        'engagement_score': engagement_score(restaurant.votes),
        'digital_score': 15 if restaurant.has_online_delivery else 0,
        'service_score': 10 if restaurant.has_table_booking else 0,
        'market_positioning_score': positioning_score(restaurant.price_category),
    }


def success_scoring(snapshot: RestaurantSnapshot,
                    country: Optional[str] = None) -> ViewResult:
    """
    Success probability score (0-100) of every rated restaurant, with its
    rank among the restaurants of its city.
    """
    result = ViewResult('success_scoring', scope=country)
    scored = []
    for restaurant in snapshot.scoped(country):
        if restaurant.rating is None:
            result.dropped += 1
            continue
        components = score_components(restaurant)
        scored.append((len(scored), restaurant, components, sum(components.values())))

    city_ranks = {}
    for city, members in group_by(scored, lambda item: item[1].city).items():
        ranks = standard_rank(members, lambda item: -item[3])
        for (index, _, _, _), rank in zip(members, ranks):
            city_ranks[index] = rank

    scored.sort(key=lambda item: -item[3])
    for index, restaurant, components, total in scored:
        city_rank = city_ranks[index]
        result.rows.append({
            'restaurant_id': restaurant.id,
            'restaurant_name': restaurant.name,
            'city': restaurant.city,
            'locality': restaurant.locality,
            'rating': float(restaurant.rating),
            'votes': restaurant.votes,
            'cost_for_two': rounded(restaurant.average_cost_for_two, 0),
            'total_success_score': total,
            'success_probability_tier': success_tier(total),
            'city_success_rank': city_rank,
            'city_competitive_position': city_competitive_position(city_rank),
            **components,
        })
    return result
