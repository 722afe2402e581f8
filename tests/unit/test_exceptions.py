"""
Tests for core.exceptions module.
"""
import pytest

from core.config import ConfigurationError
from core.exceptions import DashboardError, QueryError


class TestDashboardError:
    """Tests for base DashboardError exception."""

    def test_message_only(self):
        error = DashboardError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.details is None

    def test_message_with_details(self):
        error = DashboardError("Aggregation failed", "fact_execution_alerts")
        assert str(error) == "Aggregation failed: fact_execution_alerts"
        assert error.message == "Aggregation failed"
        assert error.details == "fact_execution_alerts"


class TestQueryError:

    def test_inheritance(self):
        assert isinstance(QueryError("boom"), DashboardError)

    def test_endpoint(self):
        error = QueryError("boom", endpoint="get_osa_kpis")
        assert error.endpoint == "get_osa_kpis"

    def test_wrap_keeps_message(self):
        error = QueryError.wrap(RuntimeError("connection refused"), endpoint="get_kpis")
        assert str(error) == "connection refused"
        assert error.endpoint == "get_kpis"

    def test_wrap_empty_message_uses_type_name(self):
        error = QueryError.wrap(TimeoutError())
        assert str(error) == "TimeoutError"

    def test_wrap_is_idempotent(self):
        original = QueryError("already wrapped", endpoint="get_suppliers")
        assert QueryError.wrap(original, endpoint="other") is original

    def test_can_be_raised(self):
        with pytest.raises(DashboardError):
            raise QueryError("x")


class TestConfigurationError:

    def test_is_not_a_dashboard_error(self):
        """Configuration problems are reported separately from query failures."""
        assert not isinstance(ConfigurationError("missing"), DashboardError)
