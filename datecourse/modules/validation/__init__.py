"""
modules/validation package — data quality guards for incoming venue records.
"""
from datecourse.modules.validation.ingestion_validator import (
    ValidationResult,
    validate_venue,
    filter_valid,
)

__all__ = [
    "ValidationResult",
    "validate_venue",
    "filter_valid",
]
