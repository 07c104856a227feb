from .attributes import ExpressionAttributes, is_valid_attribute_name
from .conditions import (
    And,
    Attr,
    Between,
    Compare,
    Condition,
    ConditionResolver,
    Function,
    In,
    LogicalCondition,
    Not,
    Or,
    Resolver,
    Size,
)
from .config import AliasOptions
from .exceptions import DynamoSerializationError, DynexprError, UsageError
from .key_conditions import KeyCondition, KeyConditionExpression, KeyConditionResolver
from .params import build_params
from .serializer import DynamoSerializer
from .updates import (
    UNDEFINED,
    Add,
    AddToSet,
    Append,
    Decrement,
    DeleteIndexes,
    Increment,
    Join,
    Literal,
    MapOf,
    ModelMap,
    Path,
    PathWithDefault,
    Prepend,
    Remove,
    RemoveFromSet,
    Set,
    SetDefault,
    SetIndexes,
    Subtract,
    Update,
    UpdateAction,
    UpdateExpression,
)

__all__ = [
    # Alias table
    "ExpressionAttributes",
    "AliasOptions",
    "is_valid_attribute_name",
    # Conditions DSL
    "Condition",
    "Attr",  # Operator-based builder for conditions
    "LogicalCondition",  # Strict AND/OR/NOT
    "Resolver",
    "ConditionResolver",
    "Compare",
    "Between",
    "In",
    "Function",
    "Size",
    "And",
    "Or",
    "Not",
    # Key conditions
    "KeyCondition",
    "KeyConditionExpression",
    "KeyConditionResolver",
    # Updates
    "Update",
    "UpdateExpression",
    "UpdateAction",
    "UNDEFINED",
    "Literal",
    "Path",
    "PathWithDefault",
    "Set",
    "SetDefault",
    "Remove",
    "Increment",
    "Decrement",
    "Add",
    "Subtract",
    "Append",
    "Prepend",
    "Join",
    "DeleteIndexes",
    "SetIndexes",
    "AddToSet",
    "RemoveFromSet",
    "MapOf",
    "ModelMap",
    # Request parameters
    "build_params",
    "DynamoSerializer",
    # Exceptions
    "DynexprError",
    "UsageError",
    "DynamoSerializationError",
]
