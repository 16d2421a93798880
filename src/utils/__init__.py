# ========================
# src/utils/__init__.py
# ========================

"""
Utilities Package

Common utilities and helper functions for the restaurant insights pipeline.
"""

from .config import Config
from .performance_monitor import monitor_performance, PerformanceMonitor
from .logging_setup import setup_logging
from .data_generator import SampleDataGenerator
from .exceptions import (
    PipelineError,
    ConfigurationError,
    DataQualityError,
    SchemaViolation,
    LookupMiss,
)

__all__ = [
    'Config',
    'monitor_performance',
    'PerformanceMonitor',
    'setup_logging',
    'SampleDataGenerator',
    'PipelineError',
    'ConfigurationError',
    'DataQualityError',
    'SchemaViolation',
    'LookupMiss',
]
