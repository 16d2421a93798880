# ========================
# tests/test_classifications.py
# ========================

import unittest
import sys
import os
from decimal import Decimal

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.restaurant_insights.enrichment import rate_category, price_category, split_cuisines
from src.restaurant_insights.models import Restaurant
from src.restaurant_insights.market_views import digital_maturity, classify_locality, classify_zone
from src.restaurant_insights.segment_views import (
    cuisine_segment, service_adoption_tier, service_tier, preference_segment,
)
from src.restaurant_insights.restaurant_views import (
    competitive_position, opportunity_priority, opportunity_category, recommended_action,
    engagement_score, positioning_score, success_tier, city_competitive_position, service_offerings,
)


def restaurant(rating='4.0', votes=100, cost=500.0, price_range=2, delivery=False, booking=False):
    rating = Decimal(rating) if rating is not None else None
    return Restaurant(
        id='1', name='Spice Kitchen', country_code='1', country_name='India',
        city='Pune', locality='Baner', cuisines='Cafe', cuisine_list=split_cuisines('Cafe'),
        rating=rating, votes=votes, average_cost_for_two=cost, price_range=price_range,
        has_online_delivery=delivery, has_table_booking=booking,
        rate_category=rate_category(rating), price_category=price_category(price_range),
    )


class TestMarketClassifications(unittest.TestCase):

    def test_digital_maturity_boundaries(self):
        cases = [
            (1.0, 'DIGITAL_LEADER'),
            (0.5, 'DIGITAL_LEADER'),
            (0.4999, 'DIGITAL_ADOPTER'),
            (0.25, 'DIGITAL_ADOPTER'),
            (0.2499, 'TRADITIONAL_MARKET'),
            (0.0, 'TRADITIONAL_MARKET'),
        ]
        for ratio, expected in cases:
            with self.subTest(ratio=ratio):
                self.assertEqual(digital_maturity(ratio), expected)

    def test_classify_locality_boundaries(self):
        # (density_rank, quality_rank, quality_restaurant_pct, restaurant_count)
        cases = [
            ((10, 10, 0.0, 5), 'PREMIUM_DESTINATION'),
            ((11, 10, 60.0, 5), 'QUALITY_HUB'),
            ((10, 11, 60.0, 5), 'QUALITY_HUB'),
            ((20, 11, 60.0, 5), 'QUALITY_HUB'),
            ((20, 11, 59.9, 50), 'MAJOR_FOOD_ZONE'),
            ((21, 1, 100.0, 50), 'MAJOR_FOOD_ZONE'),
            ((21, 1, 100.0, 49), 'EMERGING_AREA'),
            ((15, 11, 59.9, 49), 'EMERGING_AREA'),
        ]
        for args, expected in cases:
            with self.subTest(args=args):
                self.assertEqual(classify_locality(*args), expected)

    def test_classify_zone_boundaries(self):
        cases = [
            ((4.0, 20), 'PREMIUM_HOTSPOT'),
            ((4.0, 19), 'QUALITY_CLUSTER'),
            ((3.5, 15), 'QUALITY_CLUSTER'),
            ((3.5, 14), 'STANDARD_AREA'),
            ((3.49, 25), 'HIGH_DENSITY_ZONE'),
            ((None, 25), 'HIGH_DENSITY_ZONE'),
            ((None, 24), 'STANDARD_AREA'),
        ]
        for args, expected in cases:
            with self.subTest(args=args):
                self.assertEqual(classify_zone(*args), expected)


class TestSegmentClassifications(unittest.TestCase):

    def test_cuisine_segment_boundaries(self):
        cases = [
            ((10, 10), 'HIGH_DEMAND_HIGH_QUALITY'),
            ((10, 11), 'HIGH_DEMAND_MODERATE_QUALITY'),
            ((11, 10), 'NICHE_HIGH_QUALITY'),
            ((11, 11), 'EMERGING_SEGMENT'),
        ]
        for args, expected in cases:
            with self.subTest(args=args):
                self.assertEqual(cuisine_segment(*args), expected)

    def test_service_adoption_tier_boundaries(self):
        cases = [
            (0.7, 'SERVICE_LEADERS'),
            (0.6999, 'SERVICE_ADOPTERS'),
            (0.4, 'SERVICE_ADOPTERS'),
            (0.3999, 'SELECTIVE_ADOPTERS'),
            (0.2, 'SELECTIVE_ADOPTERS'),
            (0.1999, 'TRADITIONAL_MODEL'),
        ]
        for ratio, expected in cases:
            with self.subTest(ratio=ratio):
                self.assertEqual(service_adoption_tier(ratio), expected)

    def test_service_tier_and_offerings(self):
        cases = [
            ((True, True), 'FULL_SERVICE', 'Both Services'),
            ((True, False), 'DELIVERY_ONLY', 'Online Delivery'),
            ((False, True), 'BOOKING_ONLY', 'Table Booking'),
            ((False, False), 'BASIC_SERVICE', 'Basic Service'),
        ]
        for (delivery, booking), tier, offering in cases:
            with self.subTest(delivery=delivery, booking=booking):
                r = restaurant(delivery=delivery, booking=booking)
                self.assertEqual(service_tier(r), tier)
                self.assertEqual(service_offerings(r), offering)

    def test_preference_segment(self):
        cases = [
            (('LUXURY', 'EXCELLENT'), 'PREMIUM_EXCELLENCE'),
            (('LUXURY', 'GREAT'), 'STANDARD_SEGMENT'),
            (('BUDGET', 'GREAT'), 'VALUE_CHAMPIONS'),
            (('BUDGET', 'EXCELLENT'), 'VALUE_CHAMPIONS'),
            (('MODERATE', 'GREAT'), 'SWEET_SPOT'),
            (('MODERATE', 'EXCELLENT'), 'STANDARD_SEGMENT'),
            (('EXPENSIVE', 'POOR'), 'REQUIRES_ATTENTION'),
            (('UNKNOWN', 'UNRATED'), 'STANDARD_SEGMENT'),
        ]
        for args, expected in cases:
            with self.subTest(args=args):
                self.assertEqual(preference_segment(*args), expected)


class TestRestaurantClassifications(unittest.TestCase):

    def test_competitive_position(self):
        # (quality_rank, popularity_rank, restaurant, city_rating_p90, city_avg_cost)
        cases = [
            ((5, 10, restaurant('4.0'), 4.5, 500.0), 'MARKET_LEADER'),
            ((6, 10, restaurant('4.5'), 4.5, 500.0), 'QUALITY_CHAMPION'),
            ((10, 11, restaurant('4.6'), 4.5, 500.0), 'QUALITY_CHAMPION'),
            ((10, 11, restaurant('4.4'), 4.5, 500.0), 'STANDARD_PERFORMER'),
            ((11, 5, restaurant('3.0'), 4.5, 500.0), 'CUSTOMER_FAVORITE'),
            ((11, 6, restaurant('4.5', cost=500.0), 4.8, 500.0), 'VALUE_LEADER'),
            ((11, 6, restaurant('4.5', cost=501.0), 4.8, 500.0), 'STANDARD_PERFORMER'),
            ((11, 6, restaurant('4.4', cost=100.0), 4.8, 500.0), 'STANDARD_PERFORMER'),
            ((5, 11, restaurant('4.6', cost=400.0), None, 500.0), 'VALUE_LEADER'),
            ((11, 6, restaurant('4.6', cost=None), 4.8, 500.0), 'STANDARD_PERFORMER'),
        ]
        for args, expected in cases:
            with self.subTest(ranks=args[:2], rating=args[2].rating, p90=args[3]):
                self.assertEqual(competitive_position(*args), expected)

    def test_opportunity_category(self):
        cases = [
            (restaurant('4.0', votes=100, cost=999.0, delivery=True, booking=True), 1, 'HIGH_VALUE_OPPORTUNITY'),
            (restaurant('4.0', votes=100, cost=1000.0, delivery=True, booking=True), 3, 'STANDARD_OPERATION'),
            (restaurant('4.0', votes=100, cost=500.0, delivery=True), 3, 'STANDARD_OPERATION'),
            (restaurant('4.0', votes=99, cost=500.0, delivery=True, booking=True), 3, 'STANDARD_OPERATION'),
            (restaurant('4.5', votes=49), 2, 'HIDDEN_GEM'),
            (restaurant('4.5', votes=50), 3, 'STANDARD_OPERATION'),
            (restaurant('4.4', votes=10), 3, 'STANDARD_OPERATION'),
            (restaurant('3.5', votes=10), 3, 'IMPROVEMENT_CANDIDATE'),
            (restaurant('3.5', votes=10, booking=True), 3, 'STANDARD_OPERATION'),
            (restaurant('3.6', votes=10), 3, 'STANDARD_OPERATION'),
            (restaurant('4.0', votes=500, cost=2000.0), 3, 'PREMIUM_SEGMENT'),
            (restaurant('3.9', votes=500, cost=2000.0), 3, 'STANDARD_OPERATION'),
            (restaurant('4.0', votes=None, cost=None), 3, 'STANDARD_OPERATION'),
        ]
        for r, priority, category in cases:
            with self.subTest(rating=r.rating, votes=r.votes, cost=r.average_cost_for_two):
                self.assertEqual(opportunity_priority(r), priority)
                self.assertEqual(opportunity_category(r), category)

    def test_recommended_action(self):
        cases = [
            (restaurant(delivery=False, booking=True), 'Add Online Delivery'),
            (restaurant(delivery=True, booking=False), 'Add Table Booking'),
            (restaurant(votes=99, delivery=True, booking=True), 'Increase Marketing'),
            (restaurant(votes=100, delivery=True, booking=True), 'Maintain Excellence'),
        ]
        for r, expected in cases:
            with self.subTest(expected=expected):
                self.assertEqual(recommended_action(r), expected)

    def test_engagement_and_positioning_scores(self):
        for votes, expected in [(1000, 25), (999, 20), (500, 20), (100, 15), (99, 10), (50, 10), (49, 5), (0, 5)]:
            with self.subTest(votes=votes):
                self.assertEqual(engagement_score(votes), expected)
        for category, expected in [('MODERATE', 25), ('BUDGET', 20), ('EXPENSIVE', 15),
                                   ('LUXURY', 10), ('UNKNOWN', 5)]:
            with self.subTest(category=category):
                self.assertEqual(positioning_score(category), expected)

    def test_success_tier_boundaries(self):
        cases = [
            (100, 'HIGH_SUCCESS_PROBABILITY'),
            (85, 'HIGH_SUCCESS_PROBABILITY'),
            (84, 'MODERATE_SUCCESS_PROBABILITY'),
            (70, 'MODERATE_SUCCESS_PROBABILITY'),
            (69, 'AVERAGE_PERFORMANCE'),
            (55, 'AVERAGE_PERFORMANCE'),
            (54, 'IMPROVEMENT_NEEDED'),
            (40, 'IMPROVEMENT_NEEDED'),
            (39, 'HIGH_RISK_OPERATION'),
        ]
        for score, expected in cases:
            with self.subTest(score=score):
                self.assertEqual(success_tier(score), expected)

    def test_city_competitive_position_boundaries(self):
        cases = [
            (1, 'TOP_TIER_IN_CITY'),
            (5, 'TOP_TIER_IN_CITY'),
            (6, 'STRONG_PERFORMER'),
            (15, 'STRONG_PERFORMER'),
            (16, 'AVERAGE_PERFORMER'),
            (30, 'AVERAGE_PERFORMER'),
            (31, 'BELOW_AVERAGE'),
        ]
        for rank, expected in cases:
            with self.subTest(rank=rank):
                self.assertEqual(city_competitive_position(rank), expected)


if __name__ == '__main__':
    unittest.main()
