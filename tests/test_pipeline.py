# ========================
# tests/test_pipeline.py
# ========================

import unittest
import tempfile
import json
import sys
import os
from pathlib import Path

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.restaurant_insights.orchestrator import analyze_restaurants, RestaurantAnalysis, RestaurantPipeline
from src.utils.config import Config
from src.utils.data_generator import SampleDataGenerator
from src.utils.exceptions import ConfigurationError

LOOKUP = {'1': 'India', '216': 'United States', '30': 'Brazil'}


def raw_row(restaurant_id, name='Spice Kitchen', code='1', city='Pune', locality='Baner',
            votes='120', rating='4.1', delivery='Yes', booking='No'):
    return {
        'RestaurantID': restaurant_id, 'RestaurantName': name, 'CountryCode': code,
        'City': city, 'Locality': locality, 'Cuisines': 'North Indian, Chinese',
        'Currency': 'Indian Rupees(Rs.)', 'Has_Table_booking': booking,
        'Has_Online_delivery': delivery, 'Price_range': '2', 'Votes': votes,
        'Average_Cost_for_two': '700', 'Rating': rating,
    }


class TestAnalyzeRestaurants(unittest.TestCase):

    def setUp(self):
        self.config = Config({'focus_country': 'India', 'view_workers': 1})
        self.rows = [
            raw_row('1'),
            raw_row('2', locality='Aundh', rating='4.6', votes='40'),
            raw_row('3', city='Bras?lia', code='30', locality='Asa Sul'),
            raw_row('4', code=' Grill'),
            raw_row('18306543', name='Ghost Kitchen', rating='4.9', votes='5000'),
            raw_row('5', code='999'),
            raw_row('6', votes='lots'),
            raw_row('7', rating=''),
        ]

    def test_end_to_end(self):
        result = analyze_restaurants(self.rows, LOOKUP, self.config)

        self.assertEqual([r.id for r in result.restaurants], ['1', '2', '3', '6', '7'])
        self.assertEqual(list(result.views)[0], 'data_quality')
        self.assertEqual(len(result.views), 14)

        summary = result.summary
        self.assertEqual(summary['input_records'], 8)
        self.assertEqual(summary['restaurants_analyzed'], 5)
        self.assertEqual(summary['cleaning']['dropped_by_reason'],
                         {'denylisted_country_code': 1, 'excluded_id': 1})
        self.assertEqual(summary['enrichment']['lookup_misses'], 1)
        self.assertEqual(summary['issues_recorded'], 2)
        self.assertEqual({issue['kind'] for issue in result.issues}, {'SCHEMA_VIOLATION', 'LOOKUP_MISS'})

    def test_city_artifact_is_fixed_in_views(self):
        result = analyze_restaurants(self.rows, LOOKUP, self.config)
        cities = {row['city'] for row in result.views['geographic_hotspots'].rows}
        brazil = [r for r in result.restaurants if r.country_name == 'Brazil']
        self.assertEqual(brazil[0].city, 'Brasilia')
        self.assertNotIn('Bras?lia', cities)

    def test_excluded_id_never_appears(self):
        result = analyze_restaurants(self.rows, LOOKUP, self.config)

        self.assertNotIn('18306543', [r.id for r in result.restaurants])
        for name, view in result.views.items():
            for row in view.rows:
                self.assertNotEqual(row.get('restaurant_id'), '18306543', name)
                self.assertNotIn('Ghost Kitchen', row.values(), name)

    def test_unrated_rows_are_dropped_from_rating_views(self):
        result = analyze_restaurants(self.rows, LOOKUP, self.config)
        self.assertEqual(result.views['success_scoring'].dropped, 1)
        self.assertEqual(result.summary['views']['opportunity_scoring']['dropped'], 1)

    def test_out_of_range_values_do_not_abort_the_run(self):
        rows = [raw_row('1', rating='1e100'), raw_row('2', votes='1e400')]
        rows[1]['Average_Cost_for_two'] = '1e400'
        result = analyze_restaurants(rows, LOOKUP, self.config)

        self.assertEqual([r.id for r in result.restaurants], ['1', '2'])
        self.assertEqual(result.summary['cleaning']['violations_by_field'],
                         {'rating': 1, 'votes': 1, 'average_cost_for_two': 1})
        market = result.views['market_penetration'].rows[0]
        self.assertEqual(market['avg_cost_for_two'], 700.0)

    def test_empty_input(self):
        result = analyze_restaurants([], LOOKUP, self.config)

        self.assertEqual(result.restaurants, ())
        for name, view in result.views.items():
            self.assertEqual(view.rows, [], name)
        self.assertEqual(result.summary['input_records'], 0)

    def test_chunked_feed_matches_single_pass(self):
        analysis = RestaurantAnalysis(LOOKUP, self.config)
        analysis.add_rows(self.rows[:3])
        analysis.add_rows(self.rows[3:])
        chunked = analysis.finish()
        whole = analyze_restaurants(self.rows, LOOKUP, self.config)

        for name in whole.views:
            self.assertEqual(chunked.views[name].rows, whole.views[name].rows, name)

    def test_invalid_configuration_aborts_before_processing(self):
        config = Config({'country_code_denylist': ' Bar'})
        with self.assertRaises(ConfigurationError):
            analyze_restaurants(self.rows, LOOKUP, config)


class TestRestaurantPipeline(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        base = Path(self.temp_dir.name)
        self.input_file = str(base / 'raw' / 'zomato.csv')
        self.lookup_file = str(base / 'raw' / 'country_codes.csv')
        self.output_dir = str(base / 'processed')

        generator = SampleDataGenerator(seed=7)
        self.generation_stats = generator.generate_dataset(self.input_file, num_rows=300, error_rate=0.2)
        generator.write_country_lookup(self.lookup_file)
        self.config = Config({'focus_country': 'India', 'view_workers': 2})

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_run(self):
        pipeline = RestaurantPipeline(
            input_file=self.input_file,
            country_lookup_file=self.lookup_file,
            output_dir=self.output_dir,
            chunk_size=50,
            config=self.config,
        )
        self.assertTrue(pipeline.validate_input())
        results = pipeline.run()

        self.assertEqual(results['pipeline_status'], 'completed')
        self.assertEqual(results['processing_stats']['records_processed'], 301)
        self.assertEqual(results['data_quality_stats']['dropped_by_reason'].get('excluded_id'), 1)

        for name in ('market_penetration', 'success_scoring', 'data_quality',
                     'data_quality_issues', 'run_summary', 'data_dictionary'):
            self.assertTrue(Path(results['saved_files'][name]).exists(), name)

        with open(results['saved_files']['run_summary'], encoding='utf-8') as f:
            run_summary = json.load(f)
        self.assertEqual(run_summary['focus_country'], 'India')

        with open(results['saved_files']['success_scoring'], encoding='utf-8') as f:
            self.assertNotIn('18306543', f.read())

    def test_chunk_size_does_not_change_results(self):
        summaries = []
        for chunk_size in (7, 1000):
            pipeline = RestaurantPipeline(
                input_file=self.input_file,
                country_lookup_file=self.lookup_file,
                output_dir=os.path.join(self.output_dir, str(chunk_size)),
                chunk_size=chunk_size,
                config=self.config,
            )
            summaries.append(pipeline.run()['run_summary']['views'])
        self.assertEqual(summaries[0], summaries[1])

    def test_validate_input_missing_lookup(self):
        pipeline = RestaurantPipeline(
            input_file=self.input_file,
            country_lookup_file=os.path.join(self.temp_dir.name, 'missing.csv'),
            output_dir=self.output_dir,
        )
        self.assertFalse(pipeline.validate_input())


if __name__ == '__main__':
    unittest.main()
