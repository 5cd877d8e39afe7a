"""Configuration schema and validation for importcost."""

from .schema import ImportCostConfig

__all__ = ["ImportCostConfig"]
