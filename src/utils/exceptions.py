# ========================
# src/utils/exceptions.py
# ========================

"""
Pipeline Exceptions

Exception hierarchy for the restaurant insights pipeline. Each exception
carries a context dict so it can be logged and stored as a data-quality
issue.

Exception Hierarchy:
    PipelineError (base)
    ├── ConfigurationError        fatal, aborts the run
    └── DataQualityError          recovered by excluding the row
        ├── SchemaViolation
        └── LookupMiss
"""

from datetime import datetime
from typing import Any, Dict, Optional


class PipelineError(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error message
        context: Additional context (row id, field, offending value...)
    """

    kind = "PIPELINE_ERROR"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        self.timestamp = datetime.now()
        super().__init__(message)

    def __str__(self) -> str:
        base_msg = f"{self.__class__.__name__}: {self.message}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"
        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a flat dictionary for logging/storage."""
        return {
            'kind': self.kind,
            'message': self.message,
            'row_id': self.context.get('row_id'),
            'field': self.context.get('field'),
            'value': self.context.get('value'),
            'timestamp': self.timestamp.isoformat(),
        }


class ConfigurationError(PipelineError):
    """Raised when denylist, exclusion or threshold settings are malformed."""

    kind = "CONFIGURATION_ERROR"


class DataQualityError(PipelineError):
    """Base class for row-level problems that exclude data rather than abort."""

    kind = "DATA_QUALITY_ERROR"


class SchemaViolation(DataQualityError):
    """
    A row is missing a required field or holds an unparsable value.

    Context should include:
        - row_id: Restaurant id of the offending row (if known)
        - field: Canonical field name
        - value: The raw value that failed
    """

    kind = "SCHEMA_VIOLATION"


class LookupMiss(DataQualityError):
    """
    A country code has no match in the country lookup.

    Context should include:
        - row_id: Restaurant id
        - field: always 'country_code'
        - value: The unmatched code
    """

    kind = "LOOKUP_MISS"
