# ========================
# src/restaurant_insights/__init__.py
# ========================

"""
Restaurant Insights Package

Core components of the restaurant market analysis pipeline:
- ingestion: Chunked CSV reading and the country lookup
- cleaning: Row cleaning rules and type coercion
- enrichment: Derived fields and the in-memory snapshot
- transformation: The analytical views
- storage: Output management
- orchestrator: Pipeline coordination
"""

from .ingestion import CSVReader, load_country_lookup
from .cleaning import RestaurantCleaner
from .enrichment import RestaurantEnricher, RestaurantSnapshot
from .models import Restaurant, ViewResult
from .transformation import RestaurantAggregator
from .storage import DataSaver
from .orchestrator import RestaurantPipeline, RestaurantAnalysis, PipelineResult, analyze_restaurants

__all__ = [
    'CSVReader',
    'load_country_lookup',
    'RestaurantCleaner',
    'RestaurantEnricher',
    'RestaurantSnapshot',
    'Restaurant',
    'ViewResult',
    'RestaurantAggregator',
    'DataSaver',
    'RestaurantPipeline',
    'RestaurantAnalysis',
    'PipelineResult',
    'analyze_restaurants',
]

__version__ = "1.0.0"
