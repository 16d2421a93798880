# ========================
# src/utils/config.py
# ========================

"""
Configuration Management

Centralized configuration for the restaurant insights pipeline with
environment support.
"""

import os
from pathlib import Path
from typing import Dict, Any, List, Optional

from .exceptions import ConfigurationError

# Fragments of cuisine strings that leaked into the country code column
# when the source export was parsed.
DEFAULT_COUNTRY_CODE_DENYLIST = [
    ' Bar', ' Grill', ' Bakers & More"',
    ' Chowringhee Lane"', ' Grill & Bar"', ' Chinese',
]

DEFAULT_EXCLUDED_IDS = ['18306543']


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            f"Environment variable {name} must be an integer",
            {'field': name, 'value': raw},
        )


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(
            f"Environment variable {name} must be a number",
            {'field': name, 'value': raw},
        )


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None:
        return list(default)
    return [item.strip() for item in raw.split(',') if item.strip()]


class Config:
    """
    Configuration class for the pipeline.
    Supports environment variables and default values.
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            config_dict (dict): Optional configuration overrides

        Raises:
            ConfigurationError: If an environment value cannot be parsed
        """
        # Data Processing Configuration
        self.DEFAULT_CHUNK_SIZE = _env_int('PIPELINE_CHUNK_SIZE', '1000')
        self.VIEW_WORKERS = _env_int('PIPELINE_VIEW_WORKERS', '1')

        # File Paths
        self.DEFAULT_INPUT_FILE = os.getenv('PIPELINE_INPUT_FILE', 'data/raw/zomato.csv')
        self.COUNTRY_LOOKUP_FILE = os.getenv('PIPELINE_COUNTRY_LOOKUP_FILE', 'data/raw/country_codes.csv')
        self.DEFAULT_OUTPUT_DIR = os.getenv('PIPELINE_OUTPUT_DIR', 'data/processed')

        # Data Generation Settings
        self.DEFAULT_SAMPLE_ROWS = _env_int('SAMPLE_ROWS', '2000')

        # Cleaning Rules
        self.COUNTRY_CODE_DENYLIST = list(DEFAULT_COUNTRY_CODE_DENYLIST)
        self.EXCLUDED_RESTAURANT_IDS = _env_list('PIPELINE_EXCLUDED_IDS', DEFAULT_EXCLUDED_IDS)
        self.CITY_ARTIFACT_CHAR = os.getenv('CITY_ARTIFACT_CHAR', '?')
        self.CITY_ARTIFACT_REPLACEMENT = os.getenv('CITY_ARTIFACT_REPLACEMENT', 'i')

        # Analysis Scope
        self.FOCUS_COUNTRY = os.getenv('FOCUS_COUNTRY', 'India')

        # Business Logic Thresholds
        self.MIN_LOCALITY_RESTAURANTS = _env_int('MIN_LOCALITY_RESTAURANTS', '5')
        self.MIN_CUISINE_RESTAURANTS = _env_int('MIN_CUISINE_RESTAURANTS', '20')
        self.MIN_CUISINE_TOKEN_LENGTH = _env_int('MIN_CUISINE_TOKEN_LENGTH', '3')
        self.MIN_COMPETITIVE_VOTES = _env_int('MIN_COMPETITIVE_VOTES', '50')
        self.MIN_SERVICE_IMPACT_RESTAURANTS = _env_int('MIN_SERVICE_IMPACT_RESTAURANTS', '10')

        # Logging Configuration
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

        # Data Quality Settings
        self.MIN_DATA_QUALITY_RATE = _env_float('MIN_DATA_QUALITY_RATE', '0.4')  # 40%

        # Override with provided config
        if config_dict:
            self._update_from_dict(config_dict)

    def _update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """Update configuration from dictionary."""
        for key, value in config_dict.items():
            if hasattr(self, key.upper()):
                setattr(self, key.upper(), value)

    def get_data_paths(self) -> Dict[str, Path]:
        """Get all configured data paths as Path objects."""
        return {
            'input_file': Path(self.DEFAULT_INPUT_FILE),
            'country_lookup_file': Path(self.COUNTRY_LOOKUP_FILE),
            'output_dir': Path(self.DEFAULT_OUTPUT_DIR),
            'raw_data_dir': Path(self.DEFAULT_INPUT_FILE).parent,
            'logs_dir': Path('logs')
        }

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        paths = self.get_data_paths()
        for path_name, path in paths.items():
            if path_name.endswith('_dir'):
                path.mkdir(parents=True, exist_ok=True)

    def validate_config(self) -> Dict[str, bool]:
        """
        Validate configuration values.

        Returns:
            dict: Validation results for each setting
        """
        validations = {}

        # Validate numeric ranges
        validations['chunk_size'] = self._is_int(self.DEFAULT_CHUNK_SIZE) and self.DEFAULT_CHUNK_SIZE > 0
        validations['view_workers'] = self._is_int(self.VIEW_WORKERS) and self.VIEW_WORKERS > 0
        validations['sample_rows'] = self._is_int(self.DEFAULT_SAMPLE_ROWS) and self.DEFAULT_SAMPLE_ROWS >= 0
        validations['min_locality_restaurants'] = self._is_int(self.MIN_LOCALITY_RESTAURANTS) and self.MIN_LOCALITY_RESTAURANTS > 0
        validations['min_cuisine_restaurants'] = self._is_int(self.MIN_CUISINE_RESTAURANTS) and self.MIN_CUISINE_RESTAURANTS > 0
        validations['min_cuisine_token_length'] = self._is_int(self.MIN_CUISINE_TOKEN_LENGTH) and self.MIN_CUISINE_TOKEN_LENGTH >= 0
        validations['min_competitive_votes'] = self._is_int(self.MIN_COMPETITIVE_VOTES) and self.MIN_COMPETITIVE_VOTES >= 0
        validations['min_service_impact_restaurants'] = (
            self._is_int(self.MIN_SERVICE_IMPACT_RESTAURANTS) and self.MIN_SERVICE_IMPACT_RESTAURANTS > 0
        )
        validations['data_quality_rate'] = (
            isinstance(self.MIN_DATA_QUALITY_RATE, (int, float)) and 0.0 <= self.MIN_DATA_QUALITY_RATE <= 1.0
        )

        # Validate cleaning rules
        validations['country_code_denylist'] = self._is_token_list(self.COUNTRY_CODE_DENYLIST)
        validations['excluded_restaurant_ids'] = self._is_token_list(self.EXCLUDED_RESTAURANT_IDS)
        validations['city_artifact'] = (
            isinstance(self.CITY_ARTIFACT_CHAR, str) and len(self.CITY_ARTIFACT_CHAR) > 0
            and isinstance(self.CITY_ARTIFACT_REPLACEMENT, str)
        )
        validations['focus_country'] = isinstance(self.FOCUS_COUNTRY, str) and bool(self.FOCUS_COUNTRY.strip())

        # Validate log level
        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        validations['log_level'] = str(self.LOG_LEVEL).upper() in valid_log_levels

        return validations

    def ensure_valid(self) -> None:
        """
        Raise if any setting fails validation.

        Raises:
            ConfigurationError: Lists every failing setting
        """
        failures = sorted(name for name, ok in self.validate_config().items() if not ok)
        if failures:
            raise ConfigurationError(
                f"Invalid configuration: {', '.join(failures)}",
                {'field': ','.join(failures)},
            )

    @staticmethod
    def _is_int(value: Any) -> bool:
        return isinstance(value, int) and not isinstance(value, bool)

    @staticmethod
    def _is_token_list(value: Any) -> bool:
        """A denylist/exclusion set must be a list of non-blank strings."""
        if not isinstance(value, (list, tuple, set, frozenset)):
            return False
        return all(isinstance(item, str) and item.strip() for item in value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            attr: getattr(self, attr)
            for attr in dir(self)
            if not attr.startswith('_') and not callable(getattr(self, attr))
        }

    def save_to_file(self, file_path: str) -> None:
        """Save configuration to JSON file."""
        import json
        with open(file_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

    @classmethod
    def load_from_file(cls, file_path: str) -> 'Config':
        """Load configuration from JSON file."""
        import json
        with open(file_path, 'r') as f:
            config_dict = json.load(f)
        return cls(config_dict)

    def __str__(self) -> str:
        """String representation of configuration."""
        lines = ["Configuration Settings:"]
        config_dict = self.to_dict()
        for key, value in sorted(config_dict.items()):
            lines.append(f"  {key}: {value}")
        return "\n".join(lines)
