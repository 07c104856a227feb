"""
Condition and filter expression DSL for dynexpr.

Every piece of a condition is a Resolver: an object that, given an
ExpressionAttributes table, renders itself into expression text and registers
the names and values it references. Resolvers nest freely, so a Resolver can
stand in for a path, a value or a whole sub-expression.

Design:
- Condition exposes the builder functions (eq, between, and_, ...)
- Attr offers the same conditions through Python operators
- &, |, ~ on any condition produce AND, OR and NOT resolvers
- LogicalCondition is the strict variant that checks operand counts

Usage:
    from dynexpr import Attr, Condition, ExpressionAttributes

    attributes = ExpressionAttributes()
    cond = Condition.and_(Condition.eq("p", "v"), Condition.ge("q", 1))
    cond.render(attributes)  # "(#n0 = :v0 AND #n1 >= :v1)"

    cond = (Attr("age") >= 18) & Attr("email").not_exists()
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import Any, Literal

from ._logging import logger, redact_values
from .attributes import ExpressionAttributes
from .exceptions import UsageError

CompareOperator = Literal["=", "<>", "<", "<=", ">", ">="]

# DynamoDB attribute type tags accepted by attribute_type()
AttributeType = Literal["S", "N", "B", "BOOL", "NULL", "L", "M", "SS", "NS", "BS"]


class Resolver(ABC):
    """A deferred expression fragment."""

    @abstractmethod
    def render(self, attributes: ExpressionAttributes, type_hint: str | None = None) -> str:
        """
        Renders this fragment, registering its names and values in attributes.

        Args:
            attributes: The alias table to register names and values in
            type_hint: Optional DynamoDB type tag of the attribute being rendered

        Returns:
            The expression text for this fragment
        """


def add_path(path: str | Resolver, attributes: ExpressionAttributes) -> str:
    """Aliases a path, or renders it when it is already a Resolver."""
    if isinstance(path, Resolver):
        return path.render(attributes)
    return attributes.add_path(path)


def add_values(values: Iterable[Any], attributes: ExpressionAttributes) -> list[str]:
    """Aliases each value, rendering the ones that are Resolvers."""
    return [
        value.render(attributes) if isinstance(value, Resolver) else attributes.add_value(value)
        for value in values
    ]


class ConditionResolver(Resolver):
    """
    A Resolver that renders a boolean predicate.

    Supports composition with the &, | and ~ operators.
    """

    def __and__(self, other: ConditionResolver) -> And:
        """
        Combine conditions with AND.

        Usage:
            condition = (Attr("age") >= 18) & (Attr("active") == True)
        """
        return And(self, other)

    def __or__(self, other: ConditionResolver) -> Or:
        """
        Combine conditions with OR.

        Usage:
            condition = (Attr("role") == "admin") | (Attr("role") == "moderator")
        """
        return Or(self, other)

    def __invert__(self) -> Not:
        """
        Negate a condition with NOT.

        Usage:
            condition = ~Attr("deleted").exists()
        """
        return Not(self)


class Compare(ConditionResolver):
    """<left> <op> <right>, either side may be a Resolver."""

    def __init__(self, left: str | Resolver, op: CompareOperator, right: Any) -> None:
        self.left = left
        self.op = op
        self.right = right

    def render(self, attributes: ExpressionAttributes, type_hint: str | None = None) -> str:
        path = add_path(self.left, attributes)
        (value,) = add_values([self.right], attributes)
        return f"{path} {self.op} {value}"

    def __repr__(self) -> str:
        return f"Compare({self.left!r}, {self.op!r}, {self.right!r})"


class Between(ConditionResolver):
    def __init__(self, path: str | Resolver, low: Any, high: Any) -> None:
        self.path = path
        self.low = low
        self.high = high

    def render(self, attributes: ExpressionAttributes, type_hint: str | None = None) -> str:
        path = add_path(self.path, attributes)
        return f"{path} BETWEEN {' AND '.join(add_values([self.low, self.high], attributes))}"


class In(ConditionResolver):
    def __init__(self, path: str | Resolver, values: Sequence[Any]) -> None:
        self.path = path
        self.values = list(values)

    def render(self, attributes: ExpressionAttributes, type_hint: str | None = None) -> str:
        path = add_path(self.path, attributes)
        return f"{path} IN ({', '.join(add_values(self.values, attributes))})"


class Function(ConditionResolver):
    """
    A DynamoDB condition function call.

    Renders "<name>(<path>)" or "<name>(<path>, <value>)".
    """

    def __init__(self, name: str, path: str | Resolver, *values: Any) -> None:
        self.name = name
        self.path = path
        self.values = values

    def render(self, attributes: ExpressionAttributes, type_hint: str | None = None) -> str:
        args = [add_path(self.path, attributes), *add_values(self.values, attributes)]
        return f"{self.name}({', '.join(args)})"

    def __repr__(self) -> str:
        return f"Function({self.name!r}, {self.path!r})"


class And(ConditionResolver):
    """AND of any number of conditions, always wrapped in parentheses."""

    keyword = "AND"

    def __init__(self, *conditions: Resolver) -> None:
        self.conditions = list(conditions)

    def render(self, attributes: ExpressionAttributes, type_hint: str | None = None) -> str:
        rendered = [condition.render(attributes) for condition in self.conditions]
        return f"({f' {self.keyword} '.join(rendered)})"


class Or(And):
    """OR of any number of conditions, always wrapped in parentheses."""

    keyword = "OR"


class Not(ConditionResolver):
    def __init__(self, condition: Resolver) -> None:
        self.condition = condition

    def render(self, attributes: ExpressionAttributes, type_hint: str | None = None) -> str:
        return f"(NOT {self.condition.render(attributes)})"


class Operand(Resolver):
    """
    A Resolver usable as either side of a comparison.

    The Python comparison operators build Compare conditions.
    """

    def __eq__(self, value: Any) -> Compare:  # type: ignore[override]
        """Equals condition: Attr("field") == value"""
        return Compare(self, "=", value)

    def __ne__(self, value: Any) -> Compare:  # type: ignore[override]
        """Not equals condition: Attr("field") != value"""
        return Compare(self, "<>", value)

    def __lt__(self, value: Any) -> Compare:
        """Less than condition: Attr("field") < value"""
        return Compare(self, "<", value)

    def __le__(self, value: Any) -> Compare:
        """Less than or equal condition: Attr("field") <= value"""
        return Compare(self, "<=", value)

    def __gt__(self, value: Any) -> Compare:
        """Greater than condition: Attr("field") > value"""
        return Compare(self, ">", value)

    def __ge__(self, value: Any) -> Compare:
        """Greater than or equal condition: Attr("field") >= value"""
        return Compare(self, ">=", value)

    __hash__ = None  # type: ignore[assignment]


class Size(Operand):
    """size(<path>), usable anywhere a path or value is expected."""

    def __init__(self, path: str) -> None:
        self.path = path

    def render(self, attributes: ExpressionAttributes, type_hint: str | None = None) -> str:
        return f"size({attributes.add_path(self.path)})"

    def __repr__(self) -> str:
        return f"Size({self.path!r})"


class Attr(Operand):
    """
    Represents a DynamoDB attribute path for building conditions.

    As an operand it renders the aliased path, so it can be compared with
    another attribute.

    Usage:
        # Comparison operators
        Attr("age") >= 18
        Attr("status") == "active"
        Attr("price") < Attr("budget")

        # DynamoDB functions
        Attr("email").not_exists()
        Attr("name").begins_with("A")
        Attr("tags").size() > 3
    """

    def __init__(self, name: str) -> None:
        """
        Initialize an attribute reference.

        Args:
            name: The attribute path, dots and [n] indexes allowed
        """
        self.name = name

    def render(self, attributes: ExpressionAttributes, type_hint: str | None = None) -> str:
        return attributes.add_path(self.name)

    def exists(self) -> Function:
        """Checks if the attribute exists."""
        return Condition.exists(self.name)

    def not_exists(self) -> Function:
        """
        Checks if the attribute does NOT exist.

        Common use case: Create-if-not-exists pattern
        """
        return Condition.not_exists(self.name)

    def begins_with(self, prefix: Any) -> Function:
        return Condition.begins_with(self.name, prefix)

    def contains(self, value: Any) -> Function:
        """
        Checks if attribute contains value.

        For strings: substring match
        For sets: membership check
        """
        return Condition.contains(self.name, value)

    def attribute_type(self, type_tag: AttributeType) -> Function:
        return Condition.attribute_type(self.name, type_tag)

    def between(self, low: Any, high: Any) -> Between:
        """Checks if attribute is between low and high (inclusive)."""
        return Condition.between(self.name, low, high)

    def is_in(self, values: Sequence[Any]) -> In:
        return Condition.in_(self.name, values)

    def size(self) -> Size:
        return Size(self.name)

    def __repr__(self) -> str:
        return f"Attr({self.name!r})"


class Condition:
    """
    Builder functions for condition and filter expressions.

    A plain string on the left of a comparison is an attribute path, a plain
    value on the right is aliased as a value. Use Condition.path() to compare
    two attributes.
    """

    @staticmethod
    def compare(left: str | Resolver, op: CompareOperator, right: Any) -> Compare:
        return Compare(left, op, right)

    @staticmethod
    def path(name: str) -> Attr:
        """Refers to another attribute where a value is expected."""
        return Attr(name)

    # Supported Types:
    #  - String: length of string
    #  - Binary: number of bytes in value
    #  - *Set: number of elements in set
    #  - Map/List: number of child elements
    @staticmethod
    def size(path: str) -> Size:
        return Size(path)

    @staticmethod
    def eq(left: str | Resolver, right: Any) -> Compare:
        return Compare(left, "=", right)

    @staticmethod
    def ne(left: str | Resolver, right: Any) -> Compare:
        return Compare(left, "<>", right)

    @staticmethod
    def lt(left: str | Resolver, right: Any) -> Compare:
        return Compare(left, "<", right)

    @staticmethod
    def le(left: str | Resolver, right: Any) -> Compare:
        return Compare(left, "<=", right)

    @staticmethod
    def gt(left: str | Resolver, right: Any) -> Compare:
        return Compare(left, ">", right)

    @staticmethod
    def ge(left: str | Resolver, right: Any) -> Compare:
        return Compare(left, ">=", right)

    equal = eq
    not_equal = ne
    less_than = lt
    less_than_equal = le
    greater_than = gt
    greater_than_equal = ge

    @staticmethod
    def between(path: str | Resolver, low: Any, high: Any) -> Between:
        return Between(path, low, high)

    @staticmethod
    def in_(path: str | Resolver, values: Sequence[Any]) -> In:
        return In(path, values)

    # Supported Types: String, *Set
    @staticmethod
    def contains(path: str | Resolver, value: Any) -> Function:
        return Function("contains", path, value)

    # Supported Types: String
    @staticmethod
    def begins_with(path: str | Resolver, value: Any) -> Function:
        return Function("begins_with", path, value)

    @staticmethod
    def attribute_type(path: str | Resolver, type_tag: AttributeType) -> Function:
        return Function("attribute_type", path, type_tag)

    type = attribute_type

    @staticmethod
    def exists(path: str | Resolver) -> Function:
        return Function("attribute_exists", path)

    @staticmethod
    def not_exists(path: str | Resolver) -> Function:
        return Function("attribute_not_exists", path)

    @staticmethod
    def and_(*conditions: Resolver) -> And:
        return And(*conditions)

    @staticmethod
    def or_(*conditions: Resolver) -> Or:
        return Or(*conditions)

    @staticmethod
    def not_(*conditions: Resolver) -> Not:
        if len(conditions) != 1:
            raise UsageError("NOT", len(conditions))
        return Not(conditions[0])

    @staticmethod
    def add_and_param(
        conditions: Sequence[Resolver] | None,
        attributes: ExpressionAttributes,
        params: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Joins conditions with AND into params["ConditionExpression"].

        The field is left unset when there are no conditions.
        """
        return _add_and(conditions, attributes, params, "ConditionExpression")

    @staticmethod
    def add_and_filter_param(
        conditions: Sequence[Resolver] | None,
        attributes: ExpressionAttributes,
        params: dict[str, Any],
    ) -> dict[str, Any]:
        """Same as add_and_param, but writes params["FilterExpression"]."""
        return _add_and(conditions, attributes, params, "FilterExpression")

    @staticmethod
    def build_input(
        condition: Resolver, attributes: ExpressionAttributes | None = None
    ) -> dict[str, Any]:
        """
        Compiles a condition into DynamoDB request parameters.

        Returns:
            Dict with ConditionExpression, and optionally ExpressionAttributeNames
            and ExpressionAttributeValues (only included if non-empty)
        """
        if attributes is None:
            attributes = ExpressionAttributes()
        params: dict[str, Any] = {"ConditionExpression": condition.render(attributes)}
        attributes.add_params(params)
        logger.debug(
            "Compiled condition expression",
            extra={
                "expression_type": "condition",
                "condition_expression": params["ConditionExpression"],
                "attribute_names": attributes.get_paths(),
                "attribute_values": redact_values(attributes.get_values()),
            },
        )
        return params


def _add_and(
    conditions: Sequence[Resolver] | None,
    attributes: ExpressionAttributes,
    params: dict[str, Any],
    field: str,
) -> dict[str, Any]:
    if conditions:
        params[field] = " AND ".join(condition.render(attributes) for condition in conditions)
    return params


class LogicalCondition(ConditionResolver):
    """
    Strict logical combinator.

    Unlike Condition.and_/or_, it refuses to build an AND or OR with fewer
    than two conditions, and a NOT with anything but exactly one. Renders
    exactly like the loose combinators.

    Usage:
        logical = LogicalCondition.and_(cond1, cond2)
        logical.add(cond3)
    """

    def __init__(self, op: Literal["AND", "OR", "NOT"], conditions: Sequence[Resolver]) -> None:
        self.op = op
        self.conditions = list(conditions)
        self._check()

    @classmethod
    def and_(cls, *conditions: Resolver) -> LogicalCondition:
        return cls("AND", conditions)

    @classmethod
    def or_(cls, *conditions: Resolver) -> LogicalCondition:
        return cls("OR", conditions)

    @classmethod
    def not_(cls, *conditions: Resolver) -> LogicalCondition:
        return cls("NOT", conditions)

    def is_and(self) -> bool:
        return self.op == "AND"

    def is_or(self) -> bool:
        return self.op == "OR"

    def is_not(self) -> bool:
        return self.op == "NOT"

    def add(self, condition: Resolver) -> LogicalCondition:
        """Appends a condition to an AND or OR. NOT cannot take another condition."""
        if self.is_not():
            raise UsageError("NOT", len(self.conditions) + 1)
        self.conditions.append(condition)
        return self

    def _check(self) -> None:
        count = len(self.conditions)
        if self.is_not():
            if count != 1:
                raise UsageError("NOT", count)
        elif count < 2:
            raise UsageError(self.op, count)

    def render(self, attributes: ExpressionAttributes, type_hint: str | None = None) -> str:
        # conditions is public, so re-check before rendering
        self._check()
        if self.is_not():
            return Not(self.conditions[0]).render(attributes)
        combinator = And if self.is_and() else Or
        return combinator(*self.conditions).render(attributes)

    def __repr__(self) -> str:
        return f"LogicalCondition({self.op!r}, {self.conditions!r})"
