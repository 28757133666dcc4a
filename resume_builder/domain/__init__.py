"""Resume document schema."""

from .cvdata import CVData, validate_cv_data

__all__ = ["CVData", "validate_cv_data"]
