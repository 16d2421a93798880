# ========================
# src/restaurant_insights/transformation.py
# ========================

"""
Data Transformation Module

Runs every analytical view over the enriched snapshot. Views are pure reads
of the same immutable snapshot, so they can be computed in any order or in
parallel; results are always returned in registry order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Callable, Dict, Optional

from .enrichment import RestaurantSnapshot
from .market_views import (
    market_penetration, locality_performance, rolling_locality_contribution, geographic_hotspots,
)
from .models import ViewResult
from .quality import summary_statistics, executive_kpis
from .restaurant_views import competitive_ranking, opportunity_scoring, success_scoring
from .segment_views import cuisine_performance, service_correlation, service_impact, customer_preference
from ..utils.config import Config

logger = logging.getLogger(__name__)

ViewBuilder = Callable[[RestaurantSnapshot], ViewResult]

class RestaurantAggregator:
    """
    Computes the analytical views over a RestaurantSnapshot.
    Scope and thresholds come from the configuration.
    """

    def __init__(self, config: Optional[Config] = None, workers: Optional[int] = None):
        """
        Initialize the aggregator.

        Args:
            config (Config): Configuration object
            workers (int): Number of threads used to compute views; 1 runs
                them sequentially
        """
        self.config = config or Config()
        self.workers = workers or self.config.VIEW_WORKERS
        self.view_builders = self._build_registry()
        logger.info(
            f"RestaurantAggregator initialized with {len(self.view_builders)} views, "
            f"focus country={self.config.FOCUS_COUNTRY}, workers={self.workers}"
        )

    def _build_registry(self) -> Dict[str, ViewBuilder]:
        config = self.config
        focus = config.FOCUS_COUNTRY
        return {
            'market_penetration': market_penetration,
            'locality_performance': partial(
                locality_performance, country=focus, min_restaurants=config.MIN_LOCALITY_RESTAURANTS),
            'cuisine_performance': partial(
                cuisine_performance, country=focus,
                min_restaurants=config.MIN_CUISINE_RESTAURANTS,
                min_token_length=config.MIN_CUISINE_TOKEN_LENGTH),
            'service_correlation': service_correlation,
            'rolling_locality_contribution': partial(rolling_locality_contribution, country=focus),
            'competitive_ranking': partial(
                competitive_ranking, country=focus, min_votes=config.MIN_COMPETITIVE_VOTES),
            'opportunity_scoring': partial(opportunity_scoring, country=focus),
            'success_scoring': partial(success_scoring, country=focus),
            'geographic_hotspots': partial(
                geographic_hotspots, min_restaurants=config.MIN_LOCALITY_RESTAURANTS),
            'service_impact': partial(
                service_impact, country=focus, min_restaurants=config.MIN_SERVICE_IMPACT_RESTAURANTS),
            'customer_preference': partial(customer_preference, country=focus),
            'summary_statistics': summary_statistics,
            'executive_kpis': partial(executive_kpis, country=focus),
        }

    def compute(self, name: str, snapshot: RestaurantSnapshot) -> ViewResult:
        """
        Compute a single view by name.

        Raises:
            KeyError: If no view has that name
        """
        view = self.view_builders[name](snapshot)
        logger.debug(f"View '{name}': {len(view.rows)} rows, {view.dropped} rows dropped")
        return view

    def compute_all(self, snapshot: RestaurantSnapshot) -> Dict[str, ViewResult]:
        """
        Compute every registered view.

        Args:
            snapshot: Enriched, immutable snapshot

        Returns:
            dict: View name -> ViewResult, in registry order
        """
        names = list(self.view_builders)
        logger.info(f"Computing {len(names)} views over {len(snapshot)} restaurants...")

        if self.workers > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                views = list(executor.map(lambda name: self.compute(name, snapshot), names))
        else:
            views = [self.compute(name, snapshot) for name in names]

        results = dict(zip(names, views))
        self._log_summary_statistics(results)
        return results

    def _log_summary_statistics(self, results: Dict[str, ViewResult]) -> None:
        """Log row and drop counts of each view."""
        for name, view in results.items():
            message = f"  {name}: {len(view.rows)} rows"
            if view.dropped:
                message += f" ({view.dropped} rows dropped for missing values)"
            logger.info(message)

    @staticmethod
    def get_aggregation_summary(results: Dict[str, ViewResult]) -> Dict[str, Dict]:
        """Per-view row and drop counts."""
        return {name: view.summary() for name, view in results.items()}
