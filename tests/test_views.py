# ========================
# tests/test_views.py
# ========================

import unittest
import sys
import os
from decimal import Decimal
from itertools import count

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.restaurant_insights.enrichment import RestaurantSnapshot, rate_category, price_category, split_cuisines
from src.restaurant_insights.models import Restaurant
from src.restaurant_insights.market_views import (
    market_penetration, locality_performance, rolling_locality_contribution, geographic_hotspots,
)
from src.restaurant_insights.segment_views import (
    cuisine_performance, service_correlation, service_impact, customer_preference,
)
from src.restaurant_insights.restaurant_views import (
    competitive_ranking, opportunity_scoring, success_scoring, rating_score, engagement_score,
)
from src.restaurant_insights.transformation import RestaurantAggregator
from src.utils.config import Config

_ids = count(1)


def make_restaurant(city='Pune', locality='Baner', rating='4.0', votes=100, cost=500.0,
                    price_range=2, delivery=False, booking=False, country='India',
                    cuisines='North Indian', name=None):
    """Build an enriched record directly."""
    restaurant_id = str(next(_ids))
    rating = Decimal(rating) if rating is not None else None
    return Restaurant(
        id=restaurant_id,
        name=name or f"Restaurant {restaurant_id}",
        country_code='1' if country == 'India' else '216',
        country_name=country,
        city=city,
        locality=locality,
        cuisines=cuisines,
        cuisine_list=split_cuisines(cuisines),
        rating=rating,
        votes=votes,
        average_cost_for_two=cost,
        price_range=price_range,
        has_online_delivery=delivery,
        has_table_booking=booking,
        rate_category=rate_category(rating),
        price_category=price_category(price_range),
    )


class TestMarketViews(unittest.TestCase):

    def test_market_shares_sum_to_100(self):
        snapshot = RestaurantSnapshot(
            [make_restaurant() for _ in range(7)]
            + [make_restaurant(country='United States', city='Orlando') for _ in range(3)]
            + [make_restaurant(country='Canada', city='Toronto')]
        )
        rows = market_penetration(snapshot).rows

        self.assertEqual([row['country_name'] for row in rows], ['India', 'United States', 'Canada'])
        self.assertAlmostEqual(sum(row['market_share_pct'] for row in rows), 100.0, places=1)

    def test_digital_maturity(self):
        snapshot = RestaurantSnapshot(
            [make_restaurant(delivery=True) for _ in range(2)] + [make_restaurant() for _ in range(2)]
        )
        row = market_penetration(snapshot).rows[0]
        self.assertEqual(row['online_delivery_penetration_pct'], 50.0)
        self.assertEqual(row['digital_maturity'], 'DIGITAL_LEADER')

    def test_unrated_restaurants_count_but_do_not_average(self):
        snapshot = RestaurantSnapshot([make_restaurant(rating='4.0'), make_restaurant(rating=None)])
        view = market_penetration(snapshot)
        row = view.rows[0]
        self.assertEqual(row['total_restaurants'], 2)
        self.assertEqual(row['avg_rating'], 4.0)
        self.assertEqual(view.dropped, 1)

    def test_unrated_rows_in_reported_groups_are_dropped(self):
        restaurants = (
            [make_restaurant(locality='Baner') for _ in range(3)]
            + [make_restaurant(locality='Baner', rating=None) for _ in range(2)]
            + [make_restaurant(locality='Wakad', rating=None) for _ in range(2)]
        )
        snapshot = RestaurantSnapshot(restaurants)

        self.assertEqual(locality_performance(snapshot, 'India', min_restaurants=5).dropped, 2)
        self.assertEqual(geographic_hotspots(snapshot, 'India', min_restaurants=5).dropped, 2)
        self.assertEqual(rolling_locality_contribution(snapshot, 'India').dropped, 4)
        self.assertEqual(market_penetration(snapshot).dropped, 4)

    def test_locality_performance_threshold_and_ranks(self):
        restaurants = (
            [make_restaurant(locality='Baner', rating='4.5') for _ in range(6)]
            + [make_restaurant(locality='Aundh', rating='3.5') for _ in range(6)]
            + [make_restaurant(locality='Kothrud', rating='4.0') for _ in range(5)]
            + [make_restaurant(locality='Wakad') for _ in range(4)]
        )
        view = locality_performance(RestaurantSnapshot(restaurants), 'India', min_restaurants=5)
        by_locality = {row['locality']: row for row in view.rows}

        self.assertNotIn('Wakad', by_locality)
        self.assertEqual(by_locality['Baner']['density_rank'], 1)
        self.assertEqual(by_locality['Aundh']['density_rank'], 1)
        self.assertEqual(by_locality['Kothrud']['density_rank'], 3)
        self.assertEqual(by_locality['Baner']['quality_rank'], 1)
        self.assertEqual(by_locality['Kothrud']['quality_rank'], 2)
        self.assertEqual(by_locality['Aundh']['quality_rank'], 3)
        self.assertEqual(by_locality['Baner']['quality_restaurant_pct'], 100.0)
        self.assertEqual(by_locality['Baner']['market_classification'], 'PREMIUM_DESTINATION')

    def test_locality_performance_other_country_is_out_of_scope(self):
        restaurants = [make_restaurant(country='United States', city='Orlando') for _ in range(5)]
        view = locality_performance(RestaurantSnapshot(restaurants), 'India')
        self.assertEqual(view.rows, [])

    def test_rolling_contribution_ties_share_rank(self):
        """Pune localities with 10, 10 and 5 restaurants rank 1, 1, 3."""
        restaurants = (
            [make_restaurant(locality='Baner', rating='4.0') for _ in range(10)]
            + [make_restaurant(locality='Aundh', rating='3.0') for _ in range(10)]
            + [make_restaurant(locality='Kothrud', rating='2.0') for _ in range(5)]
        )
        rows = rolling_locality_contribution(RestaurantSnapshot(restaurants), 'India').rows

        self.assertEqual([row['locality_rank_in_city'] for row in rows], [1, 1, 3])
        self.assertEqual([row['cumulative_restaurants_in_city'] for row in rows], [10, 20, 25])
        self.assertEqual([row['contribution_to_city_pct'] for row in rows], [100.0, 50.0, 20.0])
        self.assertEqual([row['rolling_avg_rating_3period'] for row in rows], [4.0, 3.5, 3.0])

    def test_rolling_contribution_cities_are_sorted(self):
        restaurants = [make_restaurant(city='Pune'), make_restaurant(city='Agra')]
        rows = rolling_locality_contribution(RestaurantSnapshot(restaurants), 'India').rows
        self.assertEqual([row['city'] for row in rows], ['Agra', 'Pune'])

    def test_rolling_contribution_max_rank(self):
        restaurants = (
            [make_restaurant(locality='Baner') for _ in range(3)]
            + [make_restaurant(locality='Aundh') for _ in range(2)]
        )
        rows = rolling_locality_contribution(RestaurantSnapshot(restaurants), 'India', max_rank=1).rows
        self.assertEqual([row['locality'] for row in rows], ['Baner'])

    def test_geographic_hotspots(self):
        restaurants = (
            [make_restaurant(locality='Baner', rating='4.2') for _ in range(3)]
            + [make_restaurant(country='United States', city='Orlando', locality='Downtown') for _ in range(2)]
            + [make_restaurant(locality='Aundh')]
        )
        rows = geographic_hotspots(RestaurantSnapshot(restaurants), min_restaurants=2).rows

        self.assertEqual([(row['country_name'], row['locality']) for row in rows],
                         [('India', 'Baner'), ('United States', 'Downtown')])
        self.assertEqual(rows[0]['density_rank_in_country'], 1)
        self.assertEqual(rows[1]['density_rank_in_country'], 1)
        self.assertEqual(rows[0]['zone_classification'], 'STANDARD_AREA')


class TestSegmentViews(unittest.TestCase):

    def test_cuisine_fan_out_and_thresholds(self):
        restaurants = [
            make_restaurant(cuisines='Thai, Cafe, BB'),
            make_restaurant(cuisines='Thai, Cafe', delivery=True),
            make_restaurant(cuisines='Thai, Rare', rating='4.5'),
        ]
        view = cuisine_performance(RestaurantSnapshot(restaurants), 'India',
                                   min_restaurants=2, min_token_length=3)

        self.assertEqual([row['cuisine'] for row in view.rows], ['Thai', 'Cafe'])
        thai, cafe = view.rows
        self.assertEqual(thai['restaurant_count'], 3)
        self.assertEqual(thai['popularity_rank'], 1)
        self.assertEqual(cafe['popularity_rank'], 2)
        self.assertEqual(thai['quality_rank'], 1)
        self.assertEqual(cafe['digital_adoption_pct'], 50.0)
        self.assertEqual(thai['market_segment'], 'HIGH_DEMAND_HIGH_QUALITY')

    def test_service_correlation_order(self):
        restaurants = [
            make_restaurant(rating='3.0', price_range=1),
            make_restaurant(rating='4.7', price_range=1),
            make_restaurant(rating='4.7', price_range=4, delivery=True, booking=True),
            make_restaurant(rating=None, price_range=None),
        ]
        rows = service_correlation(RestaurantSnapshot(restaurants)).rows

        self.assertEqual(
            [(row['rate_category'], row['price_category']) for row in rows],
            [('EXCELLENT', 'LUXURY'), ('EXCELLENT', 'BUDGET'), ('GOOD', 'BUDGET'), ('UNRATED', 'UNKNOWN')],
        )
        self.assertEqual(rows[0]['full_service_adoption_pct'], 100.0)
        self.assertEqual(rows[0]['service_adoption_tier'], 'SERVICE_LEADERS')
        self.assertEqual(rows[1]['service_adoption_tier'], 'TRADITIONAL_MODEL')

    def test_service_impact(self):
        restaurants = (
            [make_restaurant(votes=v, cost=400.0, delivery=True, booking=True) for v in (10, 20, 30)]
            + [make_restaurant()]
        )
        rows = service_impact(RestaurantSnapshot(restaurants), 'India', min_restaurants=3).rows

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]['service_tier'], 'FULL_SERVICE')
        self.assertEqual(rows[0]['median_customer_engagement'], 20)
        self.assertEqual(rows[0]['engagement_revenue_index'], 80.0)

    def test_segment_views_count_unrated_rows_as_dropped(self):
        restaurants = [
            make_restaurant(cuisines='Thai, Cafe', rating=None),
            make_restaurant(cuisines='Thai'),
            make_restaurant(cuisines='Cafe'),
            make_restaurant(cuisines='Rare', rating=None),
        ]
        view = cuisine_performance(RestaurantSnapshot(restaurants), 'India', min_restaurants=2)
        self.assertEqual(view.dropped, 1)

        restaurants = (
            [make_restaurant(rating=None) for _ in range(3)]
            + [make_restaurant(rating=None, delivery=True)]
        )
        view = service_impact(RestaurantSnapshot(restaurants), 'India', min_restaurants=3)
        self.assertEqual(len(view.rows), 1)
        self.assertEqual(view.dropped, 3)

    def test_customer_preference(self):
        restaurants = [
            make_restaurant(rating='4.6', price_range=4, votes=10, cuisines='French'),
            make_restaurant(rating='4.6', price_range=4, votes=90, cuisines='Japanese'),
            make_restaurant(rating='3.8', price_range=2, votes=5, cuisines='Cafe'),
        ]
        rows = customer_preference(RestaurantSnapshot(restaurants), 'India').rows

        self.assertEqual(rows[0]['price_category'], 'LUXURY')
        self.assertEqual(rows[0]['market_segment_classification'], 'PREMIUM_EXCELLENCE')
        self.assertEqual(rows[0]['top_cuisines'], 'Japanese, French')
        self.assertEqual(rows[1]['market_segment_classification'], 'SWEET_SPOT')


class TestRestaurantViews(unittest.TestCase):

    def test_competitive_ranking(self):
        restaurants = [
            make_restaurant(rating='4.8', votes=900),
            make_restaurant(rating='4.1', votes=60),
            make_restaurant(rating='4.9', votes=10),
            make_restaurant(rating=None, votes=500),
        ]
        view = competitive_ranking(RestaurantSnapshot(restaurants), 'India', min_votes=50)

        self.assertEqual(view.dropped, 1)
        self.assertEqual(len(view.rows), 2)
        leader = view.rows[0]
        self.assertEqual(leader['rating'], 4.8)
        self.assertEqual(leader['city_quality_rank'], 1)
        self.assertEqual(leader['city_popularity_rank'], 1)
        self.assertEqual(leader['competitive_position'], 'MARKET_LEADER')

    def test_opportunity_scoring(self):
        restaurants = [
            make_restaurant(rating='3.0', votes=20, name='Tired'),
            make_restaurant(rating='4.7', votes=10, name='Gem'),
            make_restaurant(rating='4.2', votes=150, cost=800.0, delivery=True, booking=True, name='Star'),
            make_restaurant(rating=None, name='New'),
        ]
        view = opportunity_scoring(RestaurantSnapshot(restaurants), 'India')

        self.assertEqual(view.dropped, 1)
        self.assertEqual([row['restaurant_name'] for row in view.rows], ['Star', 'Gem', 'Tired'])
        self.assertEqual([row['opportunity_rank_in_city'] for row in view.rows], [1, 2, 3])
        self.assertEqual(
            [row['opportunity_category'] for row in view.rows],
            ['HIGH_VALUE_OPPORTUNITY', 'HIDDEN_GEM', 'IMPROVEMENT_CANDIDATE'],
        )
        self.assertEqual(
            [row['recommended_action'] for row in view.rows],
            ['Maintain Excellence', 'Add Online Delivery', 'Add Online Delivery'],
        )

    def test_opportunity_ties_get_distinct_numbers(self):
        restaurants = [make_restaurant(rating='4.0', votes=10) for _ in range(2)]
        rows = opportunity_scoring(RestaurantSnapshot(restaurants), 'India').rows
        self.assertEqual([row['opportunity_rank_in_city'] for row in rows], [1, 2])

    def test_success_score_of_a_top_restaurant(self):
        top = make_restaurant(rating='4.5', votes=1500, price_range=2, delivery=True, booking=True)
        row = success_scoring(RestaurantSnapshot([top]), 'India').rows[0]

        self.assertEqual(row['rating_score'], 25)
        self.assertEqual(row['engagement_score'], 25)
        self.assertEqual(row['digital_score'], 15)
        self.assertEqual(row['service_score'], 10)
        self.assertEqual(row['market_positioning_score'], 25)
        self.assertEqual(row['total_success_score'], 100)
        self.assertEqual(row['success_probability_tier'], 'HIGH_SUCCESS_PROBABILITY')
        self.assertEqual(row['city_success_rank'], 1)
        self.assertEqual(row['city_competitive_position'], 'TOP_TIER_IN_CITY')

    def test_success_score_components(self):
        self.assertEqual(rating_score(Decimal('3.0')), 18)
        self.assertEqual(engagement_score(None), 5)
        self.assertEqual(engagement_score(500), 20)
        self.assertEqual(engagement_score(49), 5)

    def test_success_ranks_within_city(self):
        restaurants = [
            make_restaurant(rating='3.0', votes=10, price_range=None, city='Agra'),
            make_restaurant(rating='4.5', votes=1500, delivery=True, booking=True, city='Pune'),
            make_restaurant(rating='4.5', votes=1500, delivery=True, booking=True, city='Pune'),
            make_restaurant(rating='3.0', votes=10, city='Pune'),
            make_restaurant(rating=None, city='Pune'),
        ]
        view = success_scoring(RestaurantSnapshot(restaurants), 'India')

        self.assertEqual(view.dropped, 1)
        self.assertEqual([row['total_success_score'] for row in view.rows], [100, 100, 48, 28])
        self.assertEqual([row['city_success_rank'] for row in view.rows], [1, 1, 3, 1])
        self.assertEqual(view.rows[-1]['success_probability_tier'], 'HIGH_RISK_OPERATION')


class TestRestaurantAggregator(unittest.TestCase):

    def setUp(self):
        self.config = Config({'focus_country': 'India'})

    def test_empty_snapshot_yields_empty_views(self):
        aggregator = RestaurantAggregator(self.config, workers=1)
        views = aggregator.compute_all(RestaurantSnapshot([]))

        self.assertEqual(len(views), 13)
        for name, view in views.items():
            self.assertEqual(view.rows, [], name)
            self.assertEqual(view.name, name)

    def test_parallel_matches_sequential(self):
        restaurants = (
            [make_restaurant(locality='Baner', rating='4.2', votes=120, delivery=True) for _ in range(6)]
            + [make_restaurant(locality='Aundh', rating='3.1', votes=60) for _ in range(5)]
            + [make_restaurant(country='United States', city='Orlando') for _ in range(3)]
        )
        snapshot = RestaurantSnapshot(restaurants)

        sequential = RestaurantAggregator(self.config, workers=1).compute_all(snapshot)
        parallel = RestaurantAggregator(self.config, workers=4).compute_all(snapshot)

        self.assertEqual(list(sequential), list(parallel))
        for name in sequential:
            self.assertEqual(sequential[name].rows, parallel[name].rows, name)

    def test_compute_unknown_view(self):
        with self.assertRaises(KeyError):
            RestaurantAggregator(self.config).compute('no_such_view', RestaurantSnapshot([]))


if __name__ == '__main__':
    unittest.main()
