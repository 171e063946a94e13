"""DynamoDB stream parsing utilities."""

from dynamo_es_stream.parsing.event_schema import StreamEvent, validate_event
from dynamo_es_stream.parsing.parsers import (
    deserialize_image,
    enrich_record,
    normalize_value,
    parse_stream_record,
)

__all__ = [
    "StreamEvent",
    "deserialize_image",
    "enrich_record",
    "normalize_value",
    "parse_stream_record",
    "validate_event",
]
