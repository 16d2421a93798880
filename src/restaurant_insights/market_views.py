# ========================
# src/restaurant_insights/market_views.py
# ========================

"""
Market and Geography Views

Country market penetration, locality performance, rolling locality
contribution within a city, and geographic hotspots.
"""

from decimal import Decimal
from typing import Optional

from .enrichment import RestaurantSnapshot
from .models import ViewResult
from .ranking import (
    group_by, standard_rank, descending, mean, missing, sample_stdev, percentage, rounded,
)

HIGH_RATING = Decimal('4.0')


def digital_maturity(delivery_ratio: float) -> str:
    if delivery_ratio >= 0.5:
        return 'DIGITAL_LEADER'
    if delivery_ratio >= 0.25:
        return 'DIGITAL_ADOPTER'
    return 'TRADITIONAL_MARKET'


def classify_locality(density_rank: int, quality_rank: int,
                      quality_restaurant_pct: float, restaurant_count: int) -> str:
    if density_rank <= 10 and quality_rank <= 10:
        return 'PREMIUM_DESTINATION'
    if density_rank <= 20 and quality_restaurant_pct >= 60:
        return 'QUALITY_HUB'
    if restaurant_count >= 50:
        return 'MAJOR_FOOD_ZONE'
    return 'EMERGING_AREA'


def classify_zone(avg_rating: Optional[float], restaurant_density: int) -> str:
    if avg_rating is not None and avg_rating >= 4.0 and restaurant_density >= 20:
        return 'PREMIUM_HOTSPOT'
    if avg_rating is not None and avg_rating >= 3.5 and restaurant_density >= 15:
        return 'QUALITY_CLUSTER'
    if restaurant_density >= 25:
        return 'HIGH_DENSITY_ZONE'
    return 'STANDARD_AREA'


def market_penetration(snapshot: RestaurantSnapshot) -> ViewResult:
    """
    Restaurant count, market share and service penetration per country.

    Market share is the country's count over every enriched record, so the
    shares of all countries add up to 100.
    """
    result = ViewResult('market_penetration')
    restaurants = snapshot.scoped(None)
    global_total = len(restaurants)
    if not global_total:
        return result

    for country, members in group_by(restaurants, lambda r: r.country_name).items():
        total = len(members)
        result.dropped += missing(r.rating for r in members)
        delivery = sum(1 for r in members if r.has_online_delivery)
        booking = sum(1 for r in members if r.has_table_booking)
        result.rows.append({
            'country_name': country,
            'total_restaurants': total,
            'market_share_pct': percentage(total, global_total, 2),
            'avg_rating': rounded(mean(r.rating_value for r in members), 2),
            'avg_votes': rounded(mean(r.votes for r in members), 0),
            # Local currency; not comparable across countries.
            'avg_cost_for_two': rounded(mean(r.average_cost_for_two for r in members), 0),
            'online_delivery_penetration_pct': percentage(delivery, total, 2),
            'table_booking_penetration_pct': percentage(booking, total, 2),
            'digital_maturity': digital_maturity(delivery / total),
        })

    result.rows.sort(key=lambda row: -row['total_restaurants'])
    return result


def locality_performance(snapshot: RestaurantSnapshot,
                         country: Optional[str] = None,
                         min_restaurants: int = 5) -> ViewResult:
    """
    Density and quality ranking of (city, locality) groups.

    Only localities with at least `min_restaurants` restaurants are ranked.
    Both ranks are standard competition ranks over the whole scope.
    """
    result = ViewResult('locality_performance', scope=country)
    groups = group_by(snapshot.scoped(country), lambda r: (r.city, r.locality))

    stats = []
    for (city, locality), members in groups.items():
        count = len(members)
        if count < min_restaurants:
            continue
        result.dropped += missing(r.rating for r in members)
        high_rated = sum(1 for r in members if r.rating is not None and r.rating >= HIGH_RATING)
        stats.append({
            'city': city,
            'locality': locality,
            'restaurant_count': count,
            'avg_rating': mean(r.rating_value for r in members),
            'avg_cost_for_two': rounded(mean(r.average_cost_for_two for r in members), 0),
            'online_penetration_pct': percentage(sum(1 for r in members if r.has_online_delivery), count, 1),
            'booking_penetration_pct': percentage(sum(1 for r in members if r.has_table_booking), count, 1),
            'quality_restaurant_pct': percentage(high_rated, count, 1),
        })

    density_ranks = standard_rank(stats, lambda s: -s['restaurant_count'])
    quality_ranks = standard_rank(stats, lambda s: descending(s['avg_rating']))

    for stat, density_rank, quality_rank in zip(stats, density_ranks, quality_ranks):
        result.rows.append({
            'city': stat['city'],
            'locality': stat['locality'],
            'restaurant_count': stat['restaurant_count'],
            'density_rank': density_rank,
            'avg_rating': rounded(stat['avg_rating'], 2),
            'quality_rank': quality_rank,
            'avg_cost_for_two': stat['avg_cost_for_two'],
            'online_penetration_pct': stat['online_penetration_pct'],
            'booking_penetration_pct': stat['booking_penetration_pct'],
            'quality_restaurant_pct': stat['quality_restaurant_pct'],
            'market_classification': classify_locality(
                density_rank, quality_rank, stat['quality_restaurant_pct'], stat['restaurant_count']
            ),
        })

    result.rows.sort(key=lambda row: -row['restaurant_count'])
    return result


def rolling_locality_contribution(snapshot: RestaurantSnapshot,
                                  country: Optional[str] = None,
                                  max_rank: Optional[int] = None) -> ViewResult:
    """
    Running share of each locality within its city.

    Localities are ordered by restaurant count, descending; the cumulative
    total runs row by row in that order while the rank is a competition
    rank, so tied localities share a rank but not a cumulative total.
    The rolling rating averages the current and two preceding localities.
    """
    result = ViewResult('rolling_locality_contribution', scope=country)
    by_city = group_by(snapshot.scoped(country), lambda r: r.city)

    for city in sorted(by_city):
        localities = []
        for locality, members in group_by(by_city[city], lambda r: r.locality).items():
            result.dropped += missing(r.rating for r in members)
            localities.append({
                'locality': locality,
                'count': len(members),
                'avg_rating': mean(r.rating_value for r in members),
                'avg_cost': mean(r.average_cost_for_two for r in members),
            })

        localities.sort(key=lambda s: -s['count'])
        ranks = standard_rank(localities, lambda s: -s['count'])

        cumulative = 0
        for index, (stat, rank) in enumerate(zip(localities, ranks)):
            cumulative += stat['count']
            window = localities[max(0, index - 2):index + 1]
            if max_rank is not None and rank > max_rank:
                continue
            result.rows.append({
                'city': city,
                'locality': stat['locality'],
                'locality_restaurant_count': stat['count'],
                'locality_rank_in_city': rank,
                'locality_avg_rating': rounded(stat['avg_rating'], 2),
                'rolling_avg_rating_3period': rounded(mean(s['avg_rating'] for s in window), 2),
                'locality_avg_cost': rounded(stat['avg_cost'], 0),
                'cumulative_restaurants_in_city': cumulative,
                'contribution_to_city_pct': percentage(stat['count'], cumulative, 2),
            })

    return result


def geographic_hotspots(snapshot: RestaurantSnapshot,
                        country: Optional[str] = None,
                        min_restaurants: int = 5) -> ViewResult:
    """
    Dense (country, city, locality) clusters ranked within their country.
    """
    result = ViewResult('geographic_hotspots', scope=country)
    groups = group_by(
        snapshot.scoped(country), lambda r: (r.country_name, r.city, r.locality)
    )

    stats = []
    for (country_name, city, locality), members in groups.items():
        density = len(members)
        if density < min_restaurants:
            continue
        result.dropped += missing(r.rating for r in members)
        stats.append({
            'country_name': country_name,
            'city': city,
            'locality': locality,
            'restaurant_density': density,
            'avg_rating': mean(r.rating_value for r in members),
            'avg_cost_for_two': rounded(mean(r.average_cost_for_two for r in members), 0),
            'online_penetration_pct': percentage(sum(1 for r in members if r.has_online_delivery), density, 1),
            'booking_penetration_pct': percentage(sum(1 for r in members if r.has_table_booking), density, 1),
            'rating_consistency': rounded(sample_stdev(r.rating_value for r in members), 2),
        })

    for country_name, members in group_by(stats, lambda s: s['country_name']).items():
        density_ranks = standard_rank(members, lambda s: -s['restaurant_density'])
        quality_ranks = standard_rank(members, lambda s: descending(s['avg_rating']))
        for stat, density_rank, quality_rank in zip(members, density_ranks, quality_ranks):
            stat['density_rank_in_country'] = density_rank
            stat['quality_rank_in_country'] = quality_rank
            stat['zone_classification'] = classify_zone(stat['avg_rating'], stat['restaurant_density'])

    stats.sort(key=lambda s: (-s['restaurant_density'], descending(s['avg_rating'])))
    for stat in stats:
        result.rows.append({
            'country_name': stat['country_name'],
            'city': stat['city'],
            'locality': stat['locality'],
            'restaurant_density': stat['restaurant_density'],
            'density_rank_in_country': stat['density_rank_in_country'],
            'avg_rating': rounded(stat['avg_rating'], 2),
            'quality_rank_in_country': stat['quality_rank_in_country'],
            'avg_cost_for_two': stat['avg_cost_for_two'],
            'online_penetration_pct': stat['online_penetration_pct'],
            'booking_penetration_pct': stat['booking_penetration_pct'],
            'rating_consistency': stat['rating_consistency'],
            'zone_classification': stat['zone_classification'],
        })
    return result
