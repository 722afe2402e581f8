"""
Web server configuration.
"""
from core.config import config, VERSION

# Web server settings
WEB_HOST = config.web.host
WEB_PORT = config.web.port
ENVIRONMENT = config.web.environment

# CORS
CORS_ORIGINS = config.web.cors_origins
CORS_METHODS = config.web.cors_methods
CORS_HEADERS = config.web.cors_headers

# Rate limits
RATE_LIMIT_ENABLED = config.web.rate_limit_enabled
RATE_LIMIT_METRICS = config.web.rate_limit_metrics
RATE_LIMIT_META = config.web.rate_limit_meta

__all__ = [
    "VERSION",
    "WEB_HOST",
    "WEB_PORT",
    "ENVIRONMENT",
    "CORS_ORIGINS",
    "CORS_METHODS",
    "CORS_HEADERS",
    "RATE_LIMIT_ENABLED",
    "RATE_LIMIT_METRICS",
    "RATE_LIMIT_META",
]
