"""Custom exceptions for dynamo_es_stream."""

from typing import Any, Mapping, Sequence


class DynamoEsStreamError(Exception):
    """Base exception for all dynamo_es_stream errors."""


class ValidationError(DynamoEsStreamError, ValueError):
    """
    Raised when a value fails validation.

    ``details`` holds every violated clause so callers can inspect them
    individually; the message is the clauses joined together.
    """

    def __init__(self, message: str, details: Sequence[Any] = ()):
        super().__init__(message)
        self.details = list(details)

    @classmethod
    def from_clauses(cls, clauses: Sequence[str]) -> "ValidationError":
        """Build an error whose message enumerates every clause."""
        return cls(". ".join(clauses), clauses)


class ConfigurationError(ValidationError):
    """Raised when handler options violate the options contract."""


class EventShapeError(ValidationError):
    """Raised when an invocation event lacks the required stream shape."""


class InvalidVersionError(ValidationError):
    """Raised when a resolved document version is not a non-negative number."""


class FieldNotFoundError(DynamoEsStreamError, LookupError):
    """Raised when a field path resolves in none of Keys/NewImage/OldImage."""

    def __init__(self, parsed_record: Mapping[str, Any], path: str):
        super().__init__(f'"{path}" field not found in record')
        self.path = path
        self.details = parsed_record

    def __str__(self) -> str:
        return str(self.args[0])


class UnknownEventNameError(DynamoEsStreamError):
    """Raised for stream records whose eventName is not INSERT/MODIFY/REMOVE."""

    def __init__(self, record: Mapping[str, Any]):
        super().__init__(
            f'"{record.get("eventName")}" is an unknown event name'
        )
        self.details = record


__all__ = [
    "ConfigurationError",
    "DynamoEsStreamError",
    "EventShapeError",
    "FieldNotFoundError",
    "InvalidVersionError",
    "UnknownEventNameError",
    "ValidationError",
]
