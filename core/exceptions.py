"""
Custom exception hierarchy for dashboard operations.

Exception Hierarchy:
    DashboardError (base)
    └── QueryError             - Metric query failed (rendered as HTTP 500)

    ConfigurationError (core.config) - Required settings missing
"""


class DashboardError(Exception):
    """Base exception for all dashboard errors."""

    def __init__(self, message: str, details: str = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class QueryError(DashboardError):
    """
    A metric endpoint failed to produce its result.

    Wraps whatever the driver or the computation raised. The client
    receives ``str(error)`` as the ``error`` field of the 500 response.
    """

    def __init__(self, message: str, details: str = None, endpoint: str = None):
        super().__init__(message, details)
        self.endpoint = endpoint

    @classmethod
    def wrap(cls, exc: Exception, endpoint: str = None) -> "QueryError":
        """Build a QueryError carrying the original exception's message."""
        if isinstance(exc, QueryError):
            return exc
        return cls(str(exc) or type(exc).__name__, endpoint=endpoint)
