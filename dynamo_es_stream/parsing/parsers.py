"""
Decoding of DynamoDB stream records into plain Python values.

Uses boto3's TypeDeserializer for the attribute-value wire format and then
normalizes the results (Decimal, set, Binary) into JSON-friendly values so
documents can be sent to Elasticsearch as-is.
"""

from decimal import Decimal
from typing import Any, Optional

from boto3.dynamodb.types import Binary, TypeDeserializer

from dynamo_es_stream.models import ParsedRecord
from dynamo_es_stream.stream_types import DynamoDBItem, DynamoDBStreamRecord

_deserializer = TypeDeserializer()


def normalize_value(value: Any) -> Any:
    """Convert deserialized DynamoDB values into plain JSON-friendly types."""
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, Binary):
        return bytes(value.value)
    if isinstance(value, (set, frozenset)):
        return [normalize_value(item) for item in value]
    if isinstance(value, list):
        return [normalize_value(item) for item in value]
    if isinstance(value, dict):
        return {key: normalize_value(item) for key, item in value.items()}
    return value


def deserialize_image(image: Optional[DynamoDBItem]) -> dict[str, Any]:
    """Deserialize a DynamoDB item; a missing image becomes an empty dict."""
    if not image:
        return {}
    return {
        name: normalize_value(_deserializer.deserialize(dict(attribute)))
        for name, attribute in image.items()
    }


def parse_stream_record(record: DynamoDBStreamRecord) -> ParsedRecord:
    """Decode the Keys, NewImage and OldImage of a stream record."""
    dynamodb = record["dynamodb"]
    return ParsedRecord(
        keys=deserialize_image(dynamodb["Keys"]),
        new_image=deserialize_image(dynamodb.get("NewImage")),
        old_image=deserialize_image(dynamodb.get("OldImage")),
    )


def enrich_record(
    record: DynamoDBStreamRecord, parsed: ParsedRecord
) -> dict[str, Any]:
    """Copy a raw record with its dynamodb images replaced by decoded ones."""
    return {
        **record,
        "dynamodb": {**record["dynamodb"], **parsed.to_dict()},
    }
