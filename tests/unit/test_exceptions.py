"""
Unit tests for the dynexpr exception hierarchy.
"""

import pytest

from dynexpr.exceptions import DynamoSerializationError, DynexprError, UsageError


@pytest.mark.unit
class TestExceptionHierarchy:
    """Test the exception class hierarchy and instantiation."""

    def test_dynexpr_error_base_class(self):
        error = DynexprError("Test message")
        assert isinstance(error, Exception)
        assert error.message == "Test message"
        assert error.original_error is None

    def test_dynexpr_error_with_original_error(self):
        """Test DynexprError with original error preservation."""
        original = ValueError("Original error")
        error = DynexprError("Wrapped message", original_error=original)
        assert error.message == "Wrapped message"
        assert error.original_error is original

    def test_subclasses(self):
        assert issubclass(UsageError, DynexprError)
        assert issubclass(DynamoSerializationError, DynexprError)


@pytest.mark.unit
class TestUsageError:
    """Test UsageError messages and attributes."""

    def test_not_message(self):
        error = UsageError("NOT", 2)
        assert error.operator == "NOT"
        assert error.count == 2
        assert str(error) == "NOT requires exactly one condition, got 2"

    @pytest.mark.parametrize("operator", ["AND", "OR"])
    def test_and_or_message(self, operator):
        error = UsageError(operator, 1)
        assert str(error) == f"{operator} requires at least two conditions, got 1"

    def test_custom_message(self):
        error = UsageError("AND", 0, message="no conditions")
        assert error.message == "no conditions"
        assert error.count == 0

    def test_catchable_as_base(self):
        with pytest.raises(DynexprError):
            raise UsageError("OR", 0)
