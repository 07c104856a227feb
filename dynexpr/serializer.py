from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, cast
from uuid import UUID

from boto3.dynamodb.types import TypeSerializer

from .exceptions import DynamoSerializationError


class DynamoSerializer:
    """
    Converts expression attribute values to the DynamoDB Low-Level format.

    Architectural Note:
    -------------------
    The alias table stores values verbatim, which is what the boto3 resource
    (Table) layer expects. The low-level client expects typed values
    ({"S": "..."}, {"N": "..."}). Boto3's TypeSerializer does that conversion
    but rejects floats and knows nothing about datetime, UUID or Enum, so
    values are prepared recursively before being handed to it.
    """

    def __init__(self) -> None:
        self._serializer = TypeSerializer()

    def to_dynamo(self, values: dict[str, Any]) -> dict[str, dict[str, Any]]:
        """
        Serializes a whole ExpressionAttributeValues map.
        E.g.: {":v0": 10.5} -> {":v0": {"N": "10.5"}}
        """
        result = {}
        for alias, value in values.items():
            try:
                result[alias] = self.to_dynamo_value(value)
            except DynamoSerializationError as e:
                raise DynamoSerializationError(
                    f"Failed to serialize value for '{alias}'. value={value!r} error={e.message}",
                    original_error=e.original_error,
                ) from e
        return result

    def to_dynamo_value(self, value: Any) -> dict[str, Any]:
        """
        Serializes a single value to DynamoDB format.
        E.g.: 10.5 -> {'N': '10.5'}
        """
        clean_value = self._prepare_for_dynamo(value)
        try:
            result = cast(dict[str, Any], self._serializer.serialize(clean_value))
        except TypeError as e:
            raise DynamoSerializationError(
                f"Failed to serialize value '{value}'. error={e!s}", original_error=e
            ) from e
        return result

    def _prepare_for_dynamo(self, value: Any) -> Any:
        """
        Recursively prepares Python values for Boto3 TypeSerializer.

        Converts:
        - float -> Decimal (boto3 requirement)
        - datetime/date -> ISO 8601 string
        - UUID -> string
        - Enum -> value
        - tuple -> list
        """
        if isinstance(value, bool):
            return value
        if isinstance(value, float):
            # Convert to string first to avoid float precision artifacts during Decimal creation
            return Decimal(str(value))
        if isinstance(value, datetime):
            utc_offset = value.utcoffset()
            if utc_offset is not None and utc_offset.total_seconds() == 0:
                # UTC timezone - use 'Z' suffix like Pydantic does
                return value.replace(tzinfo=None).isoformat() + "Z"
            return value.isoformat()
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, UUID):
            return str(value)
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, (bytes, bytearray)):
            return value
        if isinstance(value, (set, frozenset)):
            # Keep as set for SS/NS/BS support (needed for ADD/DELETE clauses)
            return {self._prepare_for_dynamo(v) for v in value}
        if isinstance(value, (list, tuple)):
            return [self._prepare_for_dynamo(v) for v in value]
        if isinstance(value, dict):
            return {k: self._prepare_for_dynamo(v) for k, v in value.items()}
        return value
