"""
Core library for the CPG Performance Dashboard API.

This package contains everything below the HTTP layer:
- config: Centralized configuration
- exceptions: Custom exception hierarchy
- filters: Dashboard filter → MongoDB match translation
- fallbacks: Metric fallback cascade primitives
- database: Shared MongoDB client
- repositories: Metric queries per dashboard page
"""

from core.exceptions import (
    DashboardError,
    QueryError,
)

from core.filters import (
    DashboardFilters,
    RETAIL_FIELDS,
    SUPPLY_FIELDS,
    build_match,
)

from core.config import config, ConfigurationError

__all__ = [
    # Exceptions
    "DashboardError",
    "QueryError",
    "ConfigurationError",
    # Filters
    "DashboardFilters",
    "RETAIL_FIELDS",
    "SUPPLY_FIELDS",
    "build_match",
    # Config
    "config",
]
