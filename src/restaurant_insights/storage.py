# ========================
# src/restaurant_insights/storage.py
# ========================

"""
Data Storage Module

Writes every analytical view to CSV, plus the run summary, the data-quality
issue log and a data dictionary.
"""

import csv
import json
import logging
from typing import Any, Dict, List
from pathlib import Path

from .models import ViewResult

logger = logging.getLogger(__name__)

ISSUE_HEADERS = ['kind', 'message', 'row_id', 'field', 'value', 'timestamp']

class DataSaver:
    """
    Saves pipeline outputs to the output directory.
    """

    def __init__(self, output_dir: str = "data/processed"):
        """
        Initialize the data saver.

        Args:
            output_dir (str): Directory to save output files
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"DataSaver initialized with output directory: {self.output_dir}")

    def save_all_data(self,
                      views: Dict[str, ViewResult],
                      issues: List[Dict[str, Any]],
                      run_summary: Dict[str, Any]) -> Dict[str, str]:
        """
        Save all views and run metadata.

        Args:
            views: View name -> ViewResult
            issues: Data-quality issues recorded during the run
            run_summary: Summary of counts for the whole run

        Returns:
            dict: Mapping of output name to saved file path
        """
        saved_files = {}
        for name, view in views.items():
            saved_files[name] = self.save_view(view)

        saved_files['data_quality_issues'] = self.save_issues(issues)
        saved_files['run_summary'] = self._save_summary(run_summary)

        logger.info(f"All data saved successfully to {len(saved_files)} files")
        return saved_files

    def save_view(self, view: ViewResult) -> str:
        """Save one view as <view name>.csv, preserving row order."""
        file_path = self.output_dir / f"{view.name}.csv"
        if not view.rows:
            logger.warning(f"View '{view.name}' has no rows")
            headers = []
        else:
            headers = list(view.rows[0].keys())
        self._write_csv(file_path, headers, view.rows)
        return str(file_path)

    def save_issues(self, issues: List[Dict[str, Any]]) -> str:
        """Save the data-quality issue log."""
        file_path = self.output_dir / "data_quality_issues.csv"
        self._write_csv(file_path, ISSUE_HEADERS, issues)
        return str(file_path)

    def _save_summary(self, summary_data: Dict[str, Any]) -> str:
        """Save the run summary as JSON."""
        file_path = self.output_dir / "run_summary.json"

        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(summary_data, f, indent=2, ensure_ascii=False, default=str)

        logger.info(f"Summary saved to {file_path}")
        return str(file_path)

    def _write_csv(self, file_path: Path, headers: List[str], data_items: List[Dict]) -> None:
        """Write data to CSV file."""
        try:
            with open(file_path, 'w', newline='', encoding='utf-8') as f:
                if headers:
                    writer = csv.DictWriter(f, fieldnames=headers, extrasaction='ignore')
                    writer.writeheader()
                    writer.writerows(data_items)

            logger.info(f"Saved {len(data_items)} records to {file_path}")

        except OSError as e:
            logger.error(f"Error writing CSV file {file_path}: {e}")
            raise

    def create_data_dictionary(self) -> str:
        """Create a data dictionary explaining all output files."""
        file_path = self.output_dir / "DATA_DICTIONARY.md"

        content = """# Data Dictionary

One CSV per analytical view. Rows are in report order. Percentages are
0-100. Every `*_rank` column is a competition rank (ties share a rank and
the next rank skips); `opportunity_rank_in_city` is a row number.

Costs are in each restaurant's local currency. Cost averages are only
comparable within one country.

Unrated restaurants count towards group sizes but not towards rating
averages. The `dropped` figure per view in `run_summary.json` counts them:
rows left out of a rating average in the group views, rows excluded
outright in the per-restaurant views. A restaurant is counted once per
view even when it belongs to several cuisines.

## market_penetration.csv
Per country: `total_restaurants`, `market_share_pct`, `avg_rating`,
`avg_votes`, `avg_cost_for_two`, `online_delivery_penetration_pct`,
`table_booking_penetration_pct`, `digital_maturity`
(DIGITAL_LEADER / DIGITAL_ADOPTER / TRADITIONAL_MARKET).

## locality_performance.csv
Focus country localities with at least 5 restaurants: `density_rank`,
`quality_rank`, `quality_restaurant_pct` (share rated 4.0+),
`market_classification` (PREMIUM_DESTINATION / QUALITY_HUB /
MAJOR_FOOD_ZONE / EMERGING_AREA).

## cuisine_performance.csv
Focus country cuisines served by at least 20 restaurants:
`popularity_rank`, `quality_rank`, `city_presence`,
`digital_adoption_pct`, `premium_segment_pct`, `rating_consistency`
(standard deviation), `market_segment`.

## service_correlation.csv
Per rating x price category: delivery, booking and full-service adoption,
`service_adoption_tier` (SERVICE_LEADERS / SERVICE_ADOPTERS /
SELECTIVE_ADOPTERS / TRADITIONAL_MODEL).

## rolling_locality_contribution.csv
Per city, localities by restaurant count: `locality_rank_in_city`,
`cumulative_restaurants_in_city`, `contribution_to_city_pct`,
`rolling_avg_rating_3period`.

## competitive_ranking.csv
Focus country restaurants with 50+ votes: `city_quality_rank`,
`city_popularity_rank`, `city_rating_p90`, `competitive_position`,
`service_offerings`.

## opportunity_scoring.csv
Focus country rated restaurants: `opportunity_priority`,
`opportunity_category`, `opportunity_rank_in_city`, `recommended_action`.

## success_scoring.csv
Focus country rated restaurants: the five score components,
`total_success_score` (0-100), `success_probability_tier`,
`city_success_rank`, `city_competitive_position`.

## geographic_hotspots.csv
(country, city, locality) clusters with at least 5 restaurants, ranked
within their country, with `zone_classification`.

## service_impact.csv
Focus country service tier x rating x price groups with at least 10
restaurants: median votes, 75th percentile rating,
`engagement_revenue_index`.

## customer_preference.csv
Focus country price x rating matrix with adoption rates,
`market_segment_classification` and the three most-voted `top_cuisines`.

## data_quality.csv
Raw input checks: duplicate ids and completeness of id, name, cuisines.

## summary_statistics.csv / executive_kpis.csv
Headline counts and KPIs.

## data_quality_issues.csv
One row per schema violation or country lookup miss.

## run_summary.json
Cleaning, enrichment and per-view row/drop counts for the run.
"""

        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(content)

        logger.info(f"Data dictionary created at {file_path}")
        return str(file_path)
