# ========================
# src/utils/data_generator.py
# ========================

"""
Data Generation Utilities

Generates a Zomato-style restaurant export and its country lookup table,
with the defects found in the real export injected at a controlled rate.
"""

import csv
import random
import logging
from typing import List, Dict, Any, Optional
from pathlib import Path

logger = logging.getLogger(__name__)

RESTAURANT_HEADER = [
    'RestaurantID', 'RestaurantName', 'CountryCode', 'City', 'Locality',
    'Cuisines', 'Currency', 'Has_Table_booking', 'Has_Online_delivery',
    'Price_range', 'Votes', 'Average_Cost_for_two', 'Rating',
]

COUNTRY_CODES = [
    ('1', 'India'), ('14', 'Australia'), ('30', 'Brazil'), ('37', 'Canada'),
    ('94', 'Indonesia'), ('148', 'New Zealand'), ('162', 'Phillipines'),
    ('166', 'Qatar'), ('184', 'Singapore'), ('189', 'South Africa'),
    ('191', 'Sri Lanka'), ('208', 'Turkey'), ('214', 'UAE'),
    ('215', 'United Kingdom'), ('216', 'United States'),
]


class SampleDataGenerator:
    """
    Generator for realistic restaurant test datasets.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize data generator.

        Args:
            seed (int): Random seed for reproducible data generation
        """
        self.random = random.Random(seed)
        self._initialize_data_patterns()
        logger.info(f"SampleDataGenerator initialized with seed: {seed}")

    def _initialize_data_patterns(self) -> None:
        """Initialize markets, cuisines and name fragments."""
        # Country code -> (weight, currency, base cost for two, cities with localities)
        self.markets = {
            '1': (0.8, 'Indian Rupees(Rs.)', 600, {
                'New Delhi': ['Connaught Place', 'Hauz Khas Village', 'Rajouri Garden', 'Saket'],
                'Gurgaon': ['Sector 29', 'DLF Phase 4', 'Golf Course Road'],
                'Noida': ['Sector 18', 'Sector 62'],
                'Pune': ['Koregaon Park', 'Viman Nagar', 'Baner'],
                'Bangalore': ['Indiranagar', 'Koramangala 5th Block'],
            }),
            '216': (0.08, 'Dollar($)', 30, {
                'Orlando': ['Downtown Orlando', 'Dr. Phillips'],
                'Atlanta': ['Midtown', 'Buckhead'],
            }),
            '215': (0.04, 'Pounds(£)', 40, {
                'London': ['Soho', 'Covent Garden'],
            }),
            '214': (0.04, 'Emirati Diram(AED)', 150, {
                'Dubai': ['Jumeirah Lake Towers', 'Dubai Marina'],
                'Abu Dhabi': ['Al Zahiyah'],
            }),
            '30': (0.04, 'Brazilian Real(R$)', 80, {
                'Bras?lia': ['Asa Sul', 'Asa Norte'],
                'São Paulo': ['Pinheiros'],
            }),
        }

        self.cuisines = [
            'North Indian', 'Chinese', 'Mughlai', 'Fast Food', 'South Indian',
            'Cafe', 'Continental', 'Italian', 'Desserts', 'Bakery', 'Street Food',
            'Pizza', 'Burger', 'Biryani', 'American', 'Seafood', 'Thai', 'BBQ',
        ]

        self.name_prefixes = ['Spice', 'Royal', 'Urban', 'The Great', 'Golden', 'Green', 'Little']
        self.name_suffixes = ['Kitchen', 'Dhaba', 'Bistro', 'Cafe', 'House', 'Diner', 'Corner']

        # Fragments of cuisine strings that leak into the country code column
        self.malformed_codes = [' Bar', ' Grill', ' Chinese', ' Grill & Bar"']

    def generate_dataset(self,
                         file_path: str,
                         num_rows: int,
                         error_rate: float = 0.1) -> Dict[str, Any]:
        """
        Generate a restaurant export with controlled defect injection.

        Args:
            file_path (str): Output CSV file path
            num_rows (int): Number of rows to generate
            error_rate (float): Fraction of records with intentional defects

        Returns:
            dict: Generation statistics
        """
        logger.info(f"Generating {num_rows:,} rows with {error_rate:.1%} error rate...")

        stats = {
            'total_rows': num_rows,
            'error_rate': error_rate,
            'records_with_errors': 0,
            'error_types': {}
        }

        Path(file_path).parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(RESTAURANT_HEADER)

            previous_id = None
            for i in range(num_rows):
                record = self._generate_single_record(i)
                if self.random.random() < error_rate:
                    stats['records_with_errors'] += 1
                    self._inject_error(record, previous_id, stats)
                previous_id = record[0]
                writer.writerow(record)

                if (i + 1) % 10000 == 0:
                    logger.debug(f"Generated {i + 1:,} records")

        # The real export carries one known-bad row
        if num_rows:
            with open(file_path, 'a', newline='', encoding='utf-8') as f:
                excluded = self._generate_single_record(num_rows)
                excluded[0] = '18306543'
                csv.writer(f).writerow(excluded)
            stats['total_rows'] += 1
            self._track_error_type(stats, 'excluded_id')

        stats['error_rate_actual'] = stats['records_with_errors'] / num_rows if num_rows else 0

        logger.info(f"Dataset generated: {file_path}")
        logger.info(f"Actual error rate: {stats['error_rate_actual']:.1%}")
        logger.info(f"Error breakdown: {stats['error_types']}")

        return stats

    def write_country_lookup(self, file_path: str) -> str:
        """Write the country code lookup table."""
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(['CountryCode', 'Country'])
            writer.writerows(COUNTRY_CODES)
        logger.info(f"Country lookup written: {file_path}")
        return file_path

    def _generate_single_record(self, index: int) -> List[Any]:
        """Generate a single well-formed record."""
        codes = list(self.markets)
        weights = [self.markets[code][0] for code in codes]
        country_code = self.random.choices(codes, weights=weights)[0]
        _, currency, base_cost, cities = self.markets[country_code]

        city = self.random.choice(list(cities))
        locality = self.random.choice(cities[city])
        cuisines = ', '.join(self.random.sample(self.cuisines, self.random.randint(1, 3)))
        name = f"{self.random.choice(self.name_prefixes)} {self.random.choice(self.name_suffixes)}"

        price_range = self.random.choices([1, 2, 3, 4], weights=[0.4, 0.3, 0.2, 0.1])[0]
        cost = int(base_cost * price_range * self.random.uniform(0.7, 1.3))
        has_delivery = self.random.random() < 0.4
        has_booking = self.random.random() < 0.15

        # Roughly one in five restaurants has not been rated yet
        if self.random.random() < 0.2:
            rating, votes = '', self.random.randint(0, 3)
        else:
            rating = f"{self.random.uniform(2.0, 4.9):.1f}"
            votes = int(self.random.paretovariate(1.2) * 20)

        return [
            str(1000000 + index), name, country_code, city, locality, cuisines, currency,
            'Yes' if has_booking else 'No', 'Yes' if has_delivery else 'No',
            price_range, votes, cost, rating,
        ]

    def _inject_error(self, record: List[Any], previous_id: Optional[str], stats: Dict[str, Any]) -> None:
        """Inject one of the defects seen in the raw export."""
        error_type = self.random.choice([
            'malformed_country_code', 'unknown_country_code', 'string_votes',
            'missing_cost', 'duplicate_id', 'missing_id',
        ])

        if error_type == 'malformed_country_code':
            record[2] = self.random.choice(self.malformed_codes)
        elif error_type == 'unknown_country_code':
            record[2] = '999'
        elif error_type == 'string_votes':
            record[10] = f"{record[10]} votes"
        elif error_type == 'missing_cost':
            record[11] = ''
        elif error_type == 'duplicate_id' and previous_id:
            record[0] = previous_id
        elif error_type == 'missing_id':
            record[0] = ''
        else:
            return
        self._track_error_type(stats, error_type)

    def _track_error_type(self, stats: Dict[str, Any], error_type: str) -> None:
        """Track error types for statistics."""
        if error_type not in stats['error_types']:
            stats['error_types'][error_type] = 0
        stats['error_types'][error_type] += 1
