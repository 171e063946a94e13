"""
Typed shapes for the stream event, the bulk request and the Lambda runtime.

These are annotations only; the event itself is checked by
``parsing.validate_event`` and records are read as plain dicts.
"""

from typing import Any, Literal, Protocol, TypedDict

# =============================================================================
# DynamoDB Stream Record Types
# =============================================================================

# A DynamoDB item in its wire form: attribute name to typed attribute value,
# e.g. {"id": {"S": "k1"}, "v": {"N": "5"}}.
DynamoDBItem = dict[str, dict[str, Any]]


class StreamRecordDynamoDB(TypedDict, total=False):
    """Change payload of a stream record; Keys is always present."""

    Keys: DynamoDBItem
    NewImage: DynamoDBItem
    OldImage: DynamoDBItem
    SequenceNumber: str
    StreamViewType: Literal[
        "KEYS_ONLY", "NEW_IMAGE", "OLD_IMAGE", "NEW_AND_OLD_IMAGES"
    ]


class DynamoDBStreamRecord(TypedDict, total=False):
    """One change record; only eventName and dynamodb are read."""

    eventID: str
    eventName: str
    eventSourceARN: str
    dynamodb: StreamRecordDynamoDB


class DynamoDBStreamEvent(TypedDict):
    """Lambda invocation payload for a DynamoDB stream trigger."""

    Records: list[DynamoDBStreamRecord]


# =============================================================================
# Elasticsearch Bulk Types
# =============================================================================

# One line of a bulk request body: either an action line such as
# {"index": {"_index": "i", "_id": "k1"}} or the document that follows it.
BulkLine = dict[str, Any]


class BulkResponse(TypedDict):
    """Shape of the Elasticsearch bulk API response."""

    took: int
    errors: bool
    items: list[dict[str, Any]]


class SearchClient(Protocol):  # pylint: disable=too-few-public-methods
    """Anything with a ``bulk`` method, sync or async."""

    def bulk(self, **kwargs: Any) -> Any:
        """Submit a bulk request; may return a value or an awaitable."""


# =============================================================================
# Lambda Runtime
# =============================================================================


class LambdaContext(Protocol):  # pylint: disable=too-few-public-methods
    """
    The runtime context handed to the handler.

    The pipeline never reads it; it is passed through to the hooks.
    """

    aws_request_id: str


__all__ = [
    "BulkLine",
    "BulkResponse",
    "DynamoDBItem",
    "DynamoDBStreamEvent",
    "DynamoDBStreamRecord",
    "LambdaContext",
    "SearchClient",
    "StreamRecordDynamoDB",
]
