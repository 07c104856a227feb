from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any


def _never(name: str) -> bool:
    return False


@dataclass
class AliasOptions:
    """
    Per-table aliasing strategy.

    Holds the predicates and formatting knobs used by ExpressionAttributes
    when it turns attribute names and values into aliases.
    """

    # Names flagged reserved are aliased as the literal "#<name>"
    is_reserved_name: Callable[[str], bool] = _never
    # Names flagged valid are emitted bare, without an alias
    is_valid_name: Callable[[str], bool] = _never
    treat_name_as_path: bool = True
    delimiter: str = "."
    name_prefix: str = "#n"
    value_prefix: str = ":v"

    def __post_init__(self) -> None:
        if not self.delimiter:
            raise ValueError("delimiter must be a non-empty string")
        if not self.name_prefix.startswith("#"):
            raise ValueError(f"name_prefix must start with '#', got {self.name_prefix!r}")
        if not self.value_prefix.startswith(":"):
            raise ValueError(f"value_prefix must start with ':', got {self.value_prefix!r}")

    def copy(self, **overrides: Any) -> "AliasOptions":
        """
        Returns a copy of these options with the given fields replaced.

        Args:
            **overrides: Field values to replace

        Returns:
            A new AliasOptions instance
        """
        return replace(self, **overrides)
