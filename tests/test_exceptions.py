"""Tests for the dashboard exception hierarchy."""

from sanity.core.exceptions import (
    AuthError, ConfigurationError, DashboardError, NotFound, StoreError, ValidationError
)


class TestExceptions:
    """Messages and inheritance."""

    def test_everything_is_a_dashboard_error(self):
        for error in (AuthError("x"), StoreError("x"), NotFound("1"), ValidationError(["a"]),
                      ConfigurationError("X")):
            assert isinstance(error, DashboardError)

    def test_store_error_message(self):
        error = StoreError("permission denied", "decisions", 403)
        assert str(error) == "[decisions] permission denied (HTTP 403)"
        assert error.status == 403

    def test_not_found_is_a_store_error(self):
        error = NotFound("abc", "exceptions")
        assert isinstance(error, StoreError)
        assert error.record_id == "abc"
        assert str(error) == "[exceptions] Record abc not found"

    def test_validation_error_lists_fields(self):
        error = ValidationError(["title", "promised_to"])
        assert error.fields == ("title", "promised_to")
        assert "title, promised_to" in str(error)
