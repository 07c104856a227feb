class DynexprError(Exception):
    """Base exception for all dynexpr errors."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class UsageError(DynexprError):
    """
    Raised when a logical combinator is built with the wrong number of operands.

    AND/OR in the strict namespace need at least two conditions and NOT takes
    exactly one. The error is raised while the expression is being built.
    """

    def __init__(
        self,
        operator: str,
        count: int,
        message: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        if message is None:
            if operator == "NOT":
                message = f"NOT requires exactly one condition, got {count}"
            else:
                message = f"{operator} requires at least two conditions, got {count}"
        super().__init__(message, original_error)
        self.operator = operator
        self.count = count


class DynamoSerializationError(DynexprError):
    """Raised when serialization to DynamoDB format fails (e.g. unsupported type)."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message, original_error)
