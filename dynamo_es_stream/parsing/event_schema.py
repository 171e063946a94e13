"""
Minimal shape validation for Lambda invocation events.

Only the fields the pipeline reads are required; unknown fields at any
level are ignored.
"""

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, StrictStr
from pydantic import ValidationError as PydanticValidationError

from dynamo_es_stream.errors import EventShapeError


class _StreamImages(BaseModel):
    model_config = ConfigDict(extra="ignore")

    Keys: dict[str, Any]
    NewImage: dict[str, Any] | None = None
    OldImage: dict[str, Any] | None = None


class _StreamRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    eventName: StrictStr
    dynamodb: _StreamImages


class StreamEvent(BaseModel):
    """Required subset of a DynamoDB stream invocation event."""

    model_config = ConfigDict(extra="ignore")

    Records: list[_StreamRecord]


def _format_error(error: Mapping[str, Any]) -> str:
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}" if location else error["msg"]


def validate_event(event: Any) -> None:
    """
    Check that an invocation event has the stream shape the pipeline reads.

    Raises:
        EventShapeError: Listing every missing or mistyped field
    """
    try:
        StreamEvent.model_validate(event)
    except PydanticValidationError as exc:
        clauses = [_format_error(error) for error in exc.errors()]
        raise EventShapeError.from_clauses(clauses) from exc
