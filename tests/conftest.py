"""
Shared pytest fixtures and configuration for dynexpr tests.

Every fixture hands out a fresh alias table so alias numbering starts at
#n0 / :v0 in each test.
"""

import pytest

from dynexpr import ExpressionAttributes, KeyConditionExpression, UpdateExpression


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests with no external dependencies")


@pytest.fixture
def attributes() -> ExpressionAttributes:
    """A fresh alias table that aliases every name."""
    return ExpressionAttributes()


@pytest.fixture
def update_expression(attributes: ExpressionAttributes) -> UpdateExpression:
    """An empty UpdateExpression bound to the attributes fixture."""
    return UpdateExpression(attributes)


@pytest.fixture
def key_expression(attributes: ExpressionAttributes) -> KeyConditionExpression:
    """An empty KeyConditionExpression bound to the attributes fixture."""
    return KeyConditionExpression(attributes)
