"""
KeyConditionExpression builder for dynexpr.

A key condition has at most two clauses: an equality on the partition key and
an optional comparison on the sort key. Only the operators DynamoDB accepts in
key conditions are offered (no <>, IN or contains).

Usage:
    from dynexpr import KeyCondition

    KeyCondition.build_input({"P": "user#1", "S": KeyCondition.begins_with("order#")})
    # {"KeyConditionExpression": "#n0 = :v0 AND begins_with(#n1, :v1)", ...}
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from ._logging import logger, redact_values
from .attributes import ExpressionAttributes

SortOperator = Literal["=", "<", "<=", ">", ">=", "BETWEEN", "begins_with"]

# DynamoDB key conditions allow a partition key clause and one sort key clause
MAX_KEY_CONDITIONS = 2


class KeyConditionResolver:
    """A deferred key clause, applied to a key name once the key map is walked."""

    __slots__ = ("op", "value", "high")

    def __init__(self, op: SortOperator, value: Any, high: Any = None) -> None:
        self.op = op
        self.value = value
        self.high = high

    def __call__(self, name: str, expression: KeyConditionExpression) -> None:
        expression.add_sort_condition(name, self.op, self.value, self.high)

    def __repr__(self) -> str:
        return f"KeyConditionResolver({self.op!r}, {self.value!r})"


KeyQueryMap = Mapping[str, Any]


class KeyConditionExpression:
    """
    Collects the clauses of one KeyConditionExpression.

    Only the first two clauses are kept; any further add_condition call is
    ignored and logged.
    """

    def __init__(self, attributes: ExpressionAttributes | None = None) -> None:
        self.conditions: list[str] = []
        self.attributes = attributes if attributes is not None else ExpressionAttributes()

    def add_path(self, path: str) -> str:
        return self.attributes.add_path(path)

    def add_value(self, value: Any) -> str:
        return self.attributes.add_value(value)

    def create_sort_condition(
        self, name: str, op: SortOperator, value: Any, high: Any = None
    ) -> str:
        path = self.add_path(name)
        alias = self.add_value(value)
        if op == "BETWEEN":
            return f"{path} BETWEEN {alias} AND {self.add_value(high)}"
        if op == "begins_with":
            return f"begins_with({path}, {alias})"
        return f"{path} {op} {alias}"

    def add_sort_condition(
        self, name: str, op: SortOperator, value: Any, high: Any = None
    ) -> None:
        self.add_condition(self.create_sort_condition(name, op, value, high))

    def add_equal_condition(self, name: str, value: Any) -> None:
        self.add_sort_condition(name, "=", value)

    def add_condition(self, condition: str) -> None:
        if len(self.conditions) < MAX_KEY_CONDITIONS:
            self.conditions.append(condition)
            return
        logger.warning(
            "Key condition already has the maximum number of clauses, ignoring extra clause; "
            "its name and value aliases stay in the table",
            extra={
                "expression_type": "key_condition",
                "ignored_condition": condition,
                "max_conditions": MAX_KEY_CONDITIONS,
            },
        )

    def get_expression(self) -> str:
        return " AND ".join(self.conditions)

    def reset(self) -> None:
        self.conditions = []
        self.attributes.reset()


class KeyCondition:
    """Builder functions for the sort key clause of a key condition."""

    @staticmethod
    def op(op: SortOperator, value: Any, high: Any = None) -> KeyConditionResolver:
        return KeyConditionResolver(op, value, high)

    @staticmethod
    def eq(value: Any) -> KeyConditionResolver:
        return KeyConditionResolver("=", value)

    @staticmethod
    def lt(value: Any) -> KeyConditionResolver:
        return KeyConditionResolver("<", value)

    @staticmethod
    def le(value: Any) -> KeyConditionResolver:
        return KeyConditionResolver("<=", value)

    @staticmethod
    def gt(value: Any) -> KeyConditionResolver:
        return KeyConditionResolver(">", value)

    @staticmethod
    def ge(value: Any) -> KeyConditionResolver:
        return KeyConditionResolver(">=", value)

    equal = eq
    less_than = lt
    less_than_equal = le
    greater_than = gt
    greater_than_equal = ge

    @staticmethod
    def between(low: Any, high: Any) -> KeyConditionResolver:
        return KeyConditionResolver("BETWEEN", low, high)

    @staticmethod
    def begins_with(prefix: str) -> KeyConditionResolver:
        return KeyConditionResolver("begins_with", prefix)

    @staticmethod
    def build_expression(key: KeyQueryMap, expression: KeyConditionExpression) -> str:
        """
        Walks the key map in insertion order and renders the key condition.

        Resolver values are applied to their key name, any other value becomes
        an equality clause.
        """
        for name, value in key.items():
            if isinstance(value, KeyConditionResolver):
                value(name, expression)
            else:
                expression.add_equal_condition(name, value)
        return expression.get_expression()

    @staticmethod
    def build_input(
        key: KeyQueryMap, expression: KeyConditionExpression | None = None
    ) -> dict[str, Any]:
        """
        Compiles a key map into Query request parameters.

        Returns:
            Dict with KeyConditionExpression, and ExpressionAttributeNames /
            ExpressionAttributeValues when non-empty
        """
        if expression is None:
            expression = KeyConditionExpression()
        params: dict[str, Any] = {
            "KeyConditionExpression": KeyCondition.build_expression(key, expression)
        }
        expression.attributes.add_params(params)
        logger.debug(
            "Compiled key condition expression",
            extra={
                "expression_type": "key_condition",
                "key_condition_expression": params["KeyConditionExpression"],
                "attribute_names": expression.attributes.get_paths(),
                "attribute_values": redact_values(expression.attributes.get_values()),
            },
        )
        return params

    @staticmethod
    def add_param(
        key: KeyQueryMap | None,
        expression: KeyConditionExpression,
        params: dict[str, Any],
    ) -> dict[str, Any]:
        """Sets params["KeyConditionExpression"] unless the key map is empty."""
        if key:
            params["KeyConditionExpression"] = KeyCondition.build_expression(key, expression)
        return params
