# ========================
# src/restaurant_insights/orchestrator.py
# ========================

"""
Pipeline Orchestrator Module

Coordinates cleaning, enrichment and aggregation. `analyze_restaurants`
is the in-memory core; `RestaurantPipeline` drives it from files and saves
the results.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .cleaning import RestaurantCleaner
from .enrichment import RestaurantEnricher, RestaurantSnapshot
from .ingestion import CSVReader, load_country_lookup
from .models import Restaurant, ViewResult
from .quality import DataQualityAssessor
from .storage import DataSaver
from .transformation import RestaurantAggregator
from ..utils.config import Config
from ..utils.performance_monitor import monitor_performance

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Everything one run produced."""

    restaurants: Tuple[Restaurant, ...]
    views: Dict[str, ViewResult]
    issues: List[Dict[str, Any]] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)


class RestaurantAnalysis:
    """
    One batch run over in-memory rows.

    Raw rows are fed with `add_rows` (once, or chunk by chunk); `finish`
    enriches everything cleaned so far and computes every view.
    """

    def __init__(self, country_lookup: Mapping[str, str], config: Optional[Config] = None):
        """
        Raises:
            ConfigurationError: If the configuration is invalid; raised
                before any row is processed
        """
        self.config = config or Config()
        self.config.ensure_valid()
        self.cleaner = RestaurantCleaner.from_config(self.config)
        self.enricher = RestaurantEnricher(country_lookup)
        self.assessor = DataQualityAssessor()
        self.aggregator = RestaurantAggregator(self.config)
        self._cleaned = []

    def add_rows(self, raw_rows: Iterable[Dict[str, Any]]) -> int:
        """
        Assess and clean a batch of raw rows.

        Returns:
            int: Number of rows that survived cleaning
        """
        rows = list(raw_rows)
        self.assessor.observe(rows)
        cleaned = self.cleaner.clean(rows)
        self._cleaned.extend(cleaned)
        return len(cleaned)

    def finish(self, monitor=None) -> PipelineResult:
        """Enrich the cleaned rows, compute all views and summarize the run."""
        restaurants = self.enricher.enrich(self._cleaned)
        snapshot = RestaurantSnapshot(restaurants)
        if monitor is not None:
            monitor.add_checkpoint('enrichment', {'restaurants': len(snapshot)})

        views = {'data_quality': self.assessor.to_view()}
        views.update(self.aggregator.compute_all(snapshot))
        if monitor is not None:
            monitor.add_checkpoint('aggregation', {'views': len(views)})

        issues = self.cleaner.issues + self.enricher.issues
        summary = self._build_summary(snapshot, views, issues)
        return PipelineResult(
            restaurants=snapshot.restaurants,
            views=views,
            issues=issues,
            summary=summary,
        )

    def _build_summary(self, snapshot: RestaurantSnapshot,
                       views: Dict[str, ViewResult],
                       issues: List[Dict[str, Any]]) -> Dict[str, Any]:
        cleaning_stats = self.cleaner.get_statistics()
        if (cleaning_stats['records_processed']
                and cleaning_stats['success_rate'] / 100 < self.config.MIN_DATA_QUALITY_RATE):
            logger.warning(
                f"Data quality rate {cleaning_stats['success_rate']:.1f}% is below the "
                f"configured minimum of {self.config.MIN_DATA_QUALITY_RATE:.0%}"
            )
        return {
            'focus_country': self.config.FOCUS_COUNTRY,
            'input_records': self.assessor.total_records,
            'restaurants_analyzed': len(snapshot),
            'cleaning': cleaning_stats,
            'enrichment': self.enricher.get_statistics(),
            'issues_recorded': len(issues),
            'views': RestaurantAggregator.get_aggregation_summary(views),
        }


def analyze_restaurants(raw_rows: Iterable[Dict[str, Any]],
                        country_lookup: Mapping[str, str],
                        config: Optional[Config] = None) -> PipelineResult:
    """
    Run the whole pipeline over an in-memory sequence of rows.

    Args:
        raw_rows: Raw restaurant rows
        country_lookup: Country code -> country name
        config: Configuration; defaults to the environment

    Returns:
        PipelineResult: Records, views, issues and run summary
    """
    analysis = RestaurantAnalysis(country_lookup, config)
    analysis.add_rows(raw_rows)
    return analysis.finish()


class RestaurantPipeline:
    """
    Orchestrates the file-driven pipeline.
    Coordinates reading, cleaning, enrichment, aggregation and storage.
    """

    def __init__(self,
                 input_file: str,
                 country_lookup_file: str,
                 output_dir: str,
                 chunk_size: int = 1000,
                 config: Optional[Config] = None,
                 encoding: str = 'utf-8'):
        """
        Initialize the pipeline.

        Args:
            input_file (str): Path to the restaurant CSV
            country_lookup_file (str): Path to the country code CSV
            output_dir (str): Directory for output files
            chunk_size (int): Number of rows to read per chunk
            config (Config): Configuration object
            encoding (str): Encoding of both input files
        """
        self.input_file = input_file
        self.country_lookup_file = country_lookup_file
        self.output_dir = output_dir
        self.chunk_size = chunk_size
        self.config = config or Config()
        self.encoding = encoding

        self.reader = CSVReader(self.input_file, encoding=encoding)
        self.saver = DataSaver(self.output_dir)

        logger.info("RestaurantPipeline initialized:")
        logger.info(f"  Input: {self.input_file}")
        logger.info(f"  Country lookup: {self.country_lookup_file}")
        logger.info(f"  Output: {self.output_dir}")
        logger.info(f"  Chunk size: {self.chunk_size}")

    def run(self) -> dict:
        """
        Execute the complete pipeline from start to finish.

        Returns:
            dict: Summary of processing results and saved files

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        logger.info(f"Starting restaurant pipeline for '{self.input_file}'...")
        country_lookup = load_country_lookup(self.country_lookup_file, encoding=self.encoding)
        analysis = RestaurantAnalysis(country_lookup, self.config)

        with monitor_performance("RestaurantPipeline") as monitor:
            self._process_chunks(analysis, monitor)
            monitor.add_checkpoint('cleaning', analysis.cleaner.get_statistics())

            logger.info("All chunks processed. Enriching and aggregating...")
            result = analysis.finish(monitor)

            logger.info("Saving views...")
            saved_files = self.saver.save_all_data(result.views, result.issues, result.summary)
            saved_files['data_dictionary'] = self.saver.create_data_dictionary()

        results = {
            'pipeline_status': 'completed',
            'input_file': self.input_file,
            'output_directory': self.output_dir,
            'saved_files': saved_files,
            'processing_stats': self._get_processing_stats(result, monitor.summary),
            'data_quality_stats': result.summary['cleaning'],
            'run_summary': result.summary,
        }

        logger.info("Pipeline finished successfully.")
        self._log_final_summary(results)
        return results

    def _process_chunks(self, analysis: RestaurantAnalysis, monitor) -> None:
        """Feed the input to the analysis chunk by chunk."""
        chunk_num = 0

        for raw_chunk in self.reader.read_in_chunks(self.chunk_size):
            chunk_num += 1
            kept = analysis.add_rows(raw_chunk)
            logger.info(f"Chunk {chunk_num}: {kept}/{len(raw_chunk)} records passed cleaning")
            monitor.update_progress(len(raw_chunk))

    def _get_processing_stats(self, result: PipelineResult, performance: Dict[str, Any]) -> dict:
        """Get processing statistics."""
        return {
            'records_processed': result.summary['input_records'],
            'restaurants_analyzed': result.summary['restaurants_analyzed'],
            'views_computed': len(result.views),
            'chunk_size': self.chunk_size,
            'input_file_size': Path(self.input_file).stat().st_size if Path(self.input_file).exists() else 0,
            'processing_time_seconds': performance.get('total_processing_time_seconds'),
            'peak_memory_usage_mb': performance.get('peak_memory_usage_mb'),
        }

    def _log_final_summary(self, results: dict) -> None:
        """Log final pipeline summary."""
        logger.info("=" * 60)
        logger.info("PIPELINE EXECUTION SUMMARY")
        logger.info("=" * 60)

        processing_stats = results['processing_stats']
        quality_stats = results['data_quality_stats']

        logger.info(f"Input file: {results['input_file']}")
        logger.info(f"Records processed: {processing_stats['records_processed']:,}")
        logger.info(f"Restaurants analyzed: {processing_stats['restaurants_analyzed']:,}")
        logger.info(f"Data quality rate: {quality_stats['success_rate']:.1f}%")
        logger.info(f"Output files generated: {len(results['saved_files'])}")
        logger.info(f"Output directory: {results['output_directory']}")
        logger.info("=" * 60)

    def validate_input(self) -> bool:
        """
        Validate that both input files exist and are readable.

        Returns:
            bool: True if input is valid
        """
        for label, file_path in (('Input', self.input_file), ('Country lookup', self.country_lookup_file)):
            path = Path(file_path)
            if not path.exists():
                logger.error(f"{label} file does not exist: {file_path}")
                return False

            if not path.is_file():
                logger.error(f"{label} path is not a file: {file_path}")
                return False

            try:
                with open(path, 'r', encoding=self.encoding) as f:
                    f.readline()
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Cannot read {label.lower()} file: {e}")
                return False

        logger.info(f"Input validation passed: {self.input_file}")
        return True
