"""
Update expression compiler for dynexpr.

An update is described as a map of attribute name to either a plain value or
an UpdateAction. The compiler walks the map (recursing into MapOf) and sorts
every action into the SET, REMOVE, ADD and DELETE clause groups of a DynamoDB
UpdateExpression.

Rules:
- A plain value sets the attribute, None removes it
- UNDEFINED values are skipped and consume no alias
- Keys may be sub-paths ("a.b[2].c"), aliased like any other path

Usage:
    from dynexpr import Update, UpdateExpression

    UpdateExpression.build_input({
        "status": "active",
        "login_count": Update.inc(1),
        "legacy": None,
        "profile": Update.map({"tags": Update.add_to_set({"new"})}),
    })
    # UpdateExpression:
    # "SET #n0 = :v0, #n1 = #n1 + :v1 REMOVE #n2 ADD #n3.#n4 :v2"
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel
from pydantic_core import PydanticUndefined

from ._logging import logger, redact_values
from .attributes import ExpressionAttributes

# Marks a key that should produce no clause at all (pydantic's "unset" sentinel)
UNDEFINED = PydanticUndefined

UpdateMap = Mapping[str, Any]


def model_to_update_map(model: BaseModel) -> dict[str, Any]:
    """
    Converts a pydantic model into an update map.

    Only fields explicitly set on the instance are included, keyed by their
    DynamoDB name (the field alias when there is one). Models nested at any
    depth, including inside lists and dicts, become plain dicts.
    """
    update_map: dict[str, Any] = {}
    for field_name, field in type(model).model_fields.items():
        if field_name not in model.model_fields_set:
            continue
        update_map[field.alias or field_name] = _plain(getattr(model, field_name))
    return update_map


def _plain(value: Any) -> Any:
    """Recursively dumps pydantic models found in value, by alias."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True)
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


class UpdateAction(ABC):
    """Base class for everything that can appear as a value in an update map."""

    @abstractmethod
    def apply(self, path: str, expression: UpdateExpression, type_hint: str | None = None) -> None:
        """
        Adds this action's clauses to expression.

        Args:
            path: The already aliased path of the attribute being updated
            expression: The expression collecting the clauses
            type_hint: Optional DynamoDB type tag of the attribute
        """


class Operand(UpdateAction):
    """
    Something that renders on the right-hand side of an assignment.

    Used directly as a map value it sets the attribute to itself.
    """

    @abstractmethod
    def resolve(self, path: str, expression: UpdateExpression) -> str:
        """Returns the text of this operand, registering its names and values."""

    def apply(self, path: str, expression: UpdateExpression, type_hint: str | None = None) -> None:
        expression.add_set(f"{path} = {self.resolve(path, expression)}")


class Literal(Operand):
    """A value, always given a fresh value alias."""

    def __init__(self, value: Any) -> None:
        self.value = _plain(value)

    def resolve(self, path: str, expression: UpdateExpression) -> str:
        return expression.add_value(self.value)

    def __repr__(self) -> str:
        return f"Literal({self.value!r})"


class Path(Operand):
    """A reference to another attribute of the same item."""

    def __init__(self, path: str) -> None:
        self.path = path

    def resolve(self, path: str, expression: UpdateExpression) -> str:
        return expression.add_path(self.path)

    def __repr__(self) -> str:
        return f"Path({self.path!r})"


class PathWithDefault(Operand):
    """A reference to another attribute, falling back to value when it is missing."""

    def __init__(self, path: str, value: Any) -> None:
        self.path = path
        self.value = _plain(value)

    def resolve(self, path: str, expression: UpdateExpression) -> str:
        return f"if_not_exists({expression.add_path(self.path)}, {expression.add_value(self.value)})"


def value_operand(value: Any) -> Operand:
    """Wraps value as an Operand, a plain str is a value."""
    if isinstance(value, Operand):
        return value
    return Literal(value)


def path_operand(value: Any) -> Operand:
    """Wraps value as an Operand, a plain str is an attribute path."""
    if isinstance(value, Operand):
        return value
    if isinstance(value, str):
        return Path(value)
    return Literal(value)


class Set(UpdateAction):
    """SET path = <value>."""

    def __init__(self, value: Any) -> None:
        self.operand = value_operand(value)

    def apply(self, path: str, expression: UpdateExpression, type_hint: str | None = None) -> None:
        expression.add_set(f"{path} = {self.operand.resolve(path, expression)}")


class SetDefault(UpdateAction):
    """SET path = if_not_exists(path, <value>)."""

    def __init__(self, value: Any) -> None:
        self.operand = value_operand(value)

    def apply(self, path: str, expression: UpdateExpression, type_hint: str | None = None) -> None:
        value = self.operand.resolve(path, expression)
        expression.add_set(f"{path} = if_not_exists({path}, {value})")


class Remove(UpdateAction):
    """REMOVE path. Same as setting the attribute to None."""

    def apply(self, path: str, expression: UpdateExpression, type_hint: str | None = None) -> None:
        expression.add_remove(path)

    def __repr__(self) -> str:
        return "Remove()"


class Arithmetic(UpdateAction):
    """
    SET path = <left> <op> <right>.

    A missing left operand means the attribute itself. A plain str operand is
    an attribute path.
    """

    def __init__(self, left: Any, op: str, right: Any) -> None:
        if op not in ("+", "-"):
            raise ValueError(f"Unsupported arithmetic operator: {op!r}")
        self.left = path_operand(left) if left is not None else None
        self.op = op
        self.right = path_operand(right)

    def apply(self, path: str, expression: UpdateExpression, type_hint: str | None = None) -> None:
        left = self.left.resolve(path, expression) if self.left is not None else path
        right = self.right.resolve(path, expression)
        expression.add_set(f"{path} = {left} {self.op} {right}")


class Increment(Arithmetic):
    def __init__(self, value: Any) -> None:
        super().__init__(None, "+", value)


class Decrement(Arithmetic):
    def __init__(self, value: Any) -> None:
        super().__init__(None, "-", value)


class Add(Arithmetic):
    """SET path = <left> + <right>, neither side is implicitly the attribute."""

    def __init__(self, left: Any, right: Any) -> None:
        super().__init__(left, "+", right)


class Subtract(Arithmetic):
    def __init__(self, left: Any, right: Any) -> None:
        super().__init__(left, "-", right)


class ListAppend(UpdateAction):
    """
    SET path = list_append(<left>, <right>).

    A missing operand means the attribute itself. A plain str operand is an
    attribute path. Operand order is kept as given.
    """

    def __init__(self, left: Any = None, right: Any = None) -> None:
        self.left = path_operand(left) if left is not None else None
        self.right = path_operand(right) if right is not None else None

    def apply(self, path: str, expression: UpdateExpression, type_hint: str | None = None) -> None:
        left = self.left.resolve(path, expression) if self.left is not None else path
        right = self.right.resolve(path, expression) if self.right is not None else path
        expression.add_set(f"{path} = list_append({left}, {right})")


class Append(ListAppend):
    def __init__(self, value: Any) -> None:
        super().__init__(None, value)


class Prepend(ListAppend):
    def __init__(self, value: Any) -> None:
        super().__init__(value, None)


class Join(ListAppend):
    def __init__(self, left: Any, right: Any) -> None:
        super().__init__(left, right)


class DeleteIndexes(UpdateAction):
    """REMOVE path[i] for each index, in the given order."""

    def __init__(self, indexes: Sequence[int]) -> None:
        self.indexes = [int(index) for index in indexes]

    def apply(self, path: str, expression: UpdateExpression, type_hint: str | None = None) -> None:
        for index in self.indexes:
            expression.add_remove(f"{path}[{index}]")


class SetIndexes(UpdateAction):
    """SET path[i] = <value> for each entry, in the mapping's order."""

    def __init__(self, values: Mapping[int, Any]) -> None:
        self.values = {int(index): value_operand(value) for index, value in values.items()}

    def apply(self, path: str, expression: UpdateExpression, type_hint: str | None = None) -> None:
        for index, operand in self.values.items():
            expression.add_set(f"{path}[{index}] = {operand.resolve(path, expression)}")


class AddToSet(UpdateAction):
    """ADD path <value>, for string, number and binary sets."""

    def __init__(self, value: Any) -> None:
        self.operand = path_operand(value)

    def apply(self, path: str, expression: UpdateExpression, type_hint: str | None = None) -> None:
        expression.add_add(f"{path} {self.operand.resolve(path, expression)}")


class RemoveFromSet(UpdateAction):
    """DELETE path <value>, for string, number and binary sets."""

    def __init__(self, value: Any) -> None:
        self.operand = path_operand(value)

    def apply(self, path: str, expression: UpdateExpression, type_hint: str | None = None) -> None:
        expression.add_delete(f"{path} {self.operand.resolve(path, expression)}")


class MapOf(UpdateAction):
    """Updates individual entries of a map attribute, nesting freely."""

    def __init__(self, children: UpdateMap | BaseModel) -> None:
        if isinstance(children, BaseModel):
            children = model_to_update_map(children)
        self.children = children

    def apply(self, path: str, expression: UpdateExpression, type_hint: str | None = None) -> None:
        expression.resolve_map(self.children, path)


class ModelMap(UpdateAction):
    """Applies a nested update map to each keyed entry of a map attribute."""

    def __init__(self, children: Mapping[str, UpdateMap | BaseModel]) -> None:
        self.children = {
            key: model_to_update_map(child) if isinstance(child, BaseModel) else child
            for key, child in children.items()
        }

    def apply(self, path: str, expression: UpdateExpression, type_hint: str | None = None) -> None:
        for key, child in self.children.items():
            expression.resolve_map(child, f"{path}.{expression.add_path(key)}")


class Update:
    """
    Builder functions for update actions.

    Usage:
        {
            "name": Update.path("full_name"),
            "count": Update.inc(1),
            "groups": Update.append(["soccer"]),
            "tags": Update.remove_from_set({"old"}),
        }
    """

    @staticmethod
    def path(path: str) -> Path:
        """Uses another attribute's value, e.g. {"name": Update.path("full_name")}."""
        return Path(path)

    @staticmethod
    def path_with_default(path: str, value: Any) -> PathWithDefault:
        return PathWithDefault(path, value)

    @staticmethod
    def set(value: Any) -> Set:
        return Set(value)

    @staticmethod
    def default(value: Any) -> SetDefault:
        """Sets the attribute only when it does not exist yet."""
        return SetDefault(value)

    @staticmethod
    def remove() -> Remove:
        return Remove()

    del_ = remove

    @staticmethod
    def inc(value: Any) -> Increment:
        """
        Increments a number attribute, which must already exist.

        A str argument is the path of the attribute to increment by.
        """
        return Increment(value)

    @staticmethod
    def dec(value: Any) -> Decrement:
        return Decrement(value)

    @staticmethod
    def add(left: Any, right: Any) -> Add:
        """
        Sets the attribute to left + right.

        Example: Update.add("base", 3) sets the attribute to base + 3
        """
        return Add(left, right)

    @staticmethod
    def sub(left: Any, right: Any) -> Subtract:
        return Subtract(left, right)

    @staticmethod
    def append(value: Any) -> Append:
        return Append(value)

    @staticmethod
    def prepend(value: Any) -> Prepend:
        return Prepend(value)

    @staticmethod
    def join(left: Any, right: Any) -> Join:
        """
        Sets the attribute to the concatenation of two lists.

        Example: Update.join("parents", ["grandpa", "grandma"])
        """
        return Join(left, right)

    @staticmethod
    def del_indexes(indexes: Sequence[int]) -> DeleteIndexes:
        return DeleteIndexes(indexes)

    @staticmethod
    def set_indexes(values: Mapping[int, Any]) -> SetIndexes:
        return SetIndexes(values)

    @staticmethod
    def add_to_set(value: Any) -> AddToSet:
        return AddToSet(value)

    @staticmethod
    def remove_from_set(value: Any) -> RemoveFromSet:
        return RemoveFromSet(value)

    @staticmethod
    def map(children: UpdateMap | BaseModel) -> MapOf:
        return MapOf(children)

    model = map

    @staticmethod
    def model_map(children: Mapping[str, UpdateMap | BaseModel]) -> ModelMap:
        return ModelMap(children)


class UpdateExpression:
    """
    Collects the four clause groups of one UpdateExpression.

    Clauses are appended in traversal order; get_expression renders SET,
    REMOVE, ADD and DELETE in that order and omits empty groups.
    """

    def __init__(self, attributes: ExpressionAttributes | None = None) -> None:
        self.set_list: list[str] = []
        self.remove_list: list[str] = []
        self.add_list: list[str] = []
        self.delete_list: list[str] = []
        self.attributes = attributes if attributes is not None else ExpressionAttributes()

    def add_path(self, path: str) -> str:
        return self.attributes.add_path(path)

    def add_value(self, value: Any) -> str:
        return self.attributes.add_value(value)

    def get_paths(self) -> dict[str, str] | None:
        return self.attributes.get_paths()

    def get_values(self) -> dict[str, Any] | None:
        return self.attributes.get_values()

    def resolve_value(self, value: Any, path: str) -> str:
        return value_operand(value).resolve(path, self)

    def resolve_path_value(self, value: Any, path: str) -> str:
        return path_operand(value).resolve(path, self)

    def resolve_map(self, update_map: UpdateMap, name: str | None = None) -> None:
        """
        Compiles every entry of update_map, prefixing paths with name.

        Args:
            update_map: Attribute name (or sub-path) to value or UpdateAction
            name: Aliased path of the enclosing map attribute, if any
        """
        for key, value in update_map.items():
            if value is UNDEFINED:
                continue
            path = f"{name}.{self.add_path(key)}" if name else self.add_path(key)
            if isinstance(value, UpdateAction):
                value.apply(path, self)
            elif value is None:
                self.add_remove(path)
            else:
                self.add_set(f"{path} = {self.add_value(_plain(value))}")

    def add_set(self, clause: str) -> None:
        self.set_list.append(clause)

    def add_remove(self, clause: str) -> None:
        self.remove_list.append(clause)

    def add_add(self, clause: str) -> None:
        self.add_list.append(clause)

    def add_delete(self, clause: str) -> None:
        self.delete_list.append(clause)

    def get_expression(self) -> str | None:
        """Renders the collected clauses, or None when there are none."""
        groups = (
            ("SET", self.set_list),
            ("REMOVE", self.remove_list),
            ("ADD", self.add_list),
            ("DELETE", self.delete_list),
        )
        parts = [f"{keyword} {', '.join(clauses)}" for keyword, clauses in groups if clauses]
        return " ".join(parts) if parts else None

    def reset(self) -> None:
        self.set_list = []
        self.remove_list = []
        self.add_list = []
        self.delete_list = []
        self.attributes.reset()

    @staticmethod
    def build_expression(
        update_map: UpdateMap | BaseModel, expression: UpdateExpression
    ) -> str | None:
        if isinstance(update_map, BaseModel):
            update_map = model_to_update_map(update_map)
        expression.resolve_map(update_map)
        return expression.get_expression()

    @staticmethod
    def build_input(
        update_map: UpdateMap | BaseModel, expression: UpdateExpression | None = None
    ) -> dict[str, Any]:
        """
        Compiles an update map into UpdateItem request parameters.

        Returns:
            Dict with UpdateExpression (when anything compiled), and
            ExpressionAttributeNames / ExpressionAttributeValues when non-empty
        """
        if expression is None:
            expression = UpdateExpression()
        params: dict[str, Any] = {}
        UpdateExpression.add_param(update_map, expression, params)
        expression.attributes.add_params(params)
        logger.debug(
            "Compiled update expression",
            extra={
                "expression_type": "update",
                "update_expression": params.get("UpdateExpression"),
                "set_count": len(expression.set_list),
                "remove_count": len(expression.remove_list),
                "add_count": len(expression.add_list),
                "delete_count": len(expression.delete_list),
                "attribute_values": redact_values(expression.get_values()),
            },
        )
        return params

    @staticmethod
    def add_param(
        update_map: UpdateMap | BaseModel | None,
        expression: UpdateExpression,
        params: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Sets params["UpdateExpression"] from update_map.

        When the map compiles to nothing the field is removed from params.
        """
        if update_map is not None:
            update = UpdateExpression.build_expression(update_map, expression)
            if update:
                params["UpdateExpression"] = update
            else:
                params.pop("UpdateExpression", None)
        return params
