"""
Alias table for DynamoDB expression attribute names and values.

Every expression produced by dynexpr references attribute names and values only
through aliases. ExpressionAttributes hands out those aliases and remembers what
they stand for, so the caller can send them as ExpressionAttributeNames and
ExpressionAttributeValues.

Usage:
    attributes = ExpressionAttributes()
    attributes.add_path("profile.emails[0]")  # "#n0.#n1[0]"
    attributes.add_value("a@b.com")           # ":v0"
    attributes.get_paths()                    # {"#n0": "profile", "#n1": "emails"}
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

from .config import AliasOptions

VALID_ATTRIBUTE_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9]*$")


def is_valid_attribute_name(name: str) -> bool:
    """
    Checks if a name can appear in an expression without an alias.

    Suitable as the is_valid_name strategy of an ExpressionAttributes.
    It does not know about DynamoDB reserved words.
    """
    return VALID_ATTRIBUTE_NAME.match(name) is not None


class ExpressionAttributes:
    """
    Mutable table of name and value aliases for a single expression build.

    Names are deduplicated: asking twice for the same name returns the same
    alias. Values never are: each add_value call allocates a new alias.

    One instance may be shared by several builders (e.g. a condition and an
    update for the same request) so their aliases never collide. It must have
    a single writer at a time.
    """

    def __init__(self, options: AliasOptions | None = None, **overrides: Any) -> None:
        """
        Initialize an empty alias table.

        Args:
            options: Aliasing strategy; defaults to aliasing every name
            **overrides: AliasOptions fields to override for this table only
        """
        self.options = (options or AliasOptions()).copy(**overrides)
        self.names: dict[str, str] = {}
        self.next_name = 0
        self.values: dict[str, Any] = {}
        self.next_value = 0

    @property
    def is_reserved_name(self) -> Callable[[str], bool]:
        return self.options.is_reserved_name

    @property
    def is_valid_name(self) -> Callable[[str], bool]:
        return self.options.is_valid_name

    @property
    def treat_name_as_path(self) -> bool:
        return self.options.treat_name_as_path

    def _add_name(self, name: str) -> str:
        names = self.names
        if self.options.is_reserved_name(name):
            alias = f"#{name}"
            names[alias] = name
            return alias
        if self.options.is_valid_name(name):
            return name
        for alias, existing in names.items():
            if existing == name:
                return alias
        alias = f"{self.options.name_prefix}{self.next_name}"
        self.next_name += 1
        names[alias] = name
        return alias

    def add_path(self, path: str) -> str:
        """
        Aliases an attribute path.

        The path is split on the delimiter and each segment aliased on its own.
        Trailing list indexes ("[3]", "[3][1]") are kept verbatim.

        Usage:
            attributes.add_path("path.l1[1].l2")  # "#n0.#n1[1].#n2"
        """
        if not self.options.treat_name_as_path:
            return self._add_name(path)

        segments = []
        for segment in path.split(self.options.delimiter):
            bracket = segment.find("[")
            if segment.endswith("]") and bracket >= 0:
                segments.append(self._add_name(segment[:bracket]) + segment[bracket:])
            else:
                segments.append(self._add_name(segment))
        return ".".join(segments)

    def add_value(self, value: Any) -> str:
        """
        Allocates a new value alias and stores the value as-is.

        Usage:
            attributes.add_value({"a", "b"})  # ":v0"
        """
        alias = f"{self.options.value_prefix}{self.next_value}"
        self.next_value += 1
        self.values[alias] = value
        return alias

    def get_paths(self) -> dict[str, str] | None:
        """Returns the alias -> name map, or None when no name was aliased."""
        return self.names if self.names else None

    def get_values(self) -> dict[str, Any] | None:
        """Returns the alias -> value map, or None when no value was added."""
        return self.values if self.values else None

    def add_params(self, params: dict[str, Any]) -> dict[str, Any]:
        """
        Writes ExpressionAttributeNames/ExpressionAttributeValues into params.

        Each field is only set when it has entries, DynamoDB rejects empty maps.
        """
        paths = self.get_paths()
        if paths is not None:
            params["ExpressionAttributeNames"] = paths
        values = self.get_values()
        if values is not None:
            params["ExpressionAttributeValues"] = values
        return params

    def reset(self) -> None:
        """Clears both maps and restarts alias numbering at zero."""
        self.names = {}
        self.next_name = 0
        self.values = {}
        self.next_value = 0

    def __repr__(self) -> str:
        return f"ExpressionAttributes(names={self.names!r}, values={self.values!r})"
