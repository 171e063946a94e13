"""
Data models for stream-to-search indexing.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from dynamo_es_stream.stream_types import BulkLine, BulkResponse


class EventName(str, Enum):
    """DynamoDB stream event kinds, with an explicit fallthrough."""

    INSERT = "INSERT"
    MODIFY = "MODIFY"
    REMOVE = "REMOVE"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "EventName":
        """Map a raw record's eventName onto a member, UNKNOWN if unrecognized."""
        raw = record.get("eventName")
        if raw in (cls.INSERT.value, cls.MODIFY.value, cls.REMOVE.value):
            return cls(raw)
        return cls.UNKNOWN


@dataclass(frozen=True)
class ParsedRecord:
    """Decoded Keys/NewImage/OldImage of a single stream record."""

    keys: dict[str, Any]
    new_image: dict[str, Any] = field(default_factory=dict)
    old_image: dict[str, Any] = field(default_factory=dict)

    def images(self) -> tuple[dict[str, Any], ...]:
        """Maps in the order fields are looked up."""
        return (self.keys, self.new_image, self.old_image)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Convert to the stream record's own key names."""
        return {
            "Keys": self.keys,
            "NewImage": self.new_image,
            "OldImage": self.old_image,
        }


@dataclass(frozen=True)
class RecordMeta:
    """What one stream record turned into."""

    event: dict[str, Any]
    action: BulkLine
    document: Optional[dict[str, Any]]


@dataclass
class BatchOutput:
    """Accumulated bulk body lines plus per-record metadata, in input order."""

    actions: list[BulkLine] = field(default_factory=list)
    meta: list[RecordMeta] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.actions)


@dataclass(frozen=True)
class DispatchResult:
    """Raw bulk response together with the metadata of the dispatched batch."""

    result: Any
    meta: list[RecordMeta]


def empty_bulk_response() -> BulkResponse:
    """Response returned when a batch produced no actions."""
    return {"took": 0, "errors": False, "items": []}


__all__ = [
    "BatchOutput",
    "DispatchResult",
    "EventName",
    "ParsedRecord",
    "RecordMeta",
    "empty_bulk_response",
]
