"""
Request parameter assembly.

Builds the expression fields of a DynamoDB request from any mix of key
condition, update, condition and filter, all sharing one alias table so that
their aliases never collide.

Usage:
    from dynexpr import Attr, Update, build_params

    params = build_params(
        update={"status": "active", "count": Update.inc(1)},
        condition=Attr("version") == 3,
    )
    client_table.update_item(Key=key, **params)
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel

from ._logging import logger, redact_values
from .attributes import ExpressionAttributes
from .conditions import Condition, Resolver
from .key_conditions import KeyCondition, KeyConditionExpression, KeyQueryMap
from .serializer import DynamoSerializer
from .updates import UpdateExpression, UpdateMap


def _as_list(conditions: Resolver | Sequence[Resolver] | None) -> list[Resolver]:
    if conditions is None:
        return []
    if isinstance(conditions, Resolver):
        return [conditions]
    return list(conditions)


def build_params(
    *,
    key: KeyQueryMap | None = None,
    update: UpdateMap | BaseModel | None = None,
    condition: Resolver | Sequence[Resolver] | None = None,
    filter_condition: Resolver | Sequence[Resolver] | None = None,
    attributes: ExpressionAttributes | None = None,
    serializer: DynamoSerializer | None = None,
) -> dict[str, Any]:
    """
    Compiles expressions into DynamoDB request parameters.

    Expressions are compiled in the order key, update, condition, filter.
    Several conditions (or filters) are joined with AND.

    Args:
        key: Key map for a KeyConditionExpression (Query)
        update: Update map or pydantic model for an UpdateExpression
        condition: Condition(s) for a ConditionExpression
        filter_condition: Condition(s) for a FilterExpression
        attributes: Alias table to use, a new one by default
        serializer: When given, ExpressionAttributeValues are converted to
            the low-level DynamoDB format

    Returns:
        Dict with the expression fields that were requested, plus
        ExpressionAttributeNames and ExpressionAttributeValues when non-empty
    """
    if attributes is None:
        attributes = ExpressionAttributes()
    params: dict[str, Any] = {}

    if key is not None:
        KeyCondition.add_param(key, KeyConditionExpression(attributes), params)
    if update is not None:
        UpdateExpression.add_param(update, UpdateExpression(attributes), params)
    Condition.add_and_param(_as_list(condition), attributes, params)
    Condition.add_and_filter_param(_as_list(filter_condition), attributes, params)

    attributes.add_params(params)
    if serializer is not None and "ExpressionAttributeValues" in params:
        params["ExpressionAttributeValues"] = serializer.to_dynamo(
            params["ExpressionAttributeValues"]
        )

    logger.debug(
        "Compiled request expressions",
        extra={
            "expression_fields": sorted(k for k in params if k.endswith("Expression")),
            "attribute_names": attributes.get_paths(),
            "attribute_values": redact_values(attributes.get_values()),
            "low_level": serializer is not None,
        },
    )
    return params
