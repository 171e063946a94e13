"""Shared fixtures for dynamo_es_stream tests."""

import uuid
from types import SimpleNamespace
from typing import Any, Callable, Iterator, Optional
from unittest.mock import MagicMock

import pytest
from boto3.dynamodb.types import TypeSerializer

from dynamo_es_stream.config import StreamSettings, get_settings

_serializer = TypeSerializer()

BULK_RESPONSE = {"took": 3, "errors": False, "items": [{"index": {}}]}


def marshall(item: dict[str, Any]) -> dict[str, Any]:
    """Serialize a plain dict into DynamoDB attribute-value form."""
    return {key: _serializer.serialize(value) for key, value in item.items()}


def make_stream_record(
    name: str = "INSERT",
    keys: Optional[dict[str, Any]] = None,
    new: Optional[dict[str, Any]] = None,
    old: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """
    Build one stream record the way DynamoDB would deliver it.

    NewImage is absent for REMOVE and OldImage is absent for INSERT; both
    images always include the keys.
    """
    keys = keys if keys is not None else {"id": str(uuid.uuid4())}
    dynamodb: dict[str, Any] = {
        "Keys": marshall(keys),
        "StreamViewType": "NEW_AND_OLD_IMAGES",
    }
    if name != "REMOVE":
        dynamodb["NewImage"] = marshall({**(new or {}), **keys})
    if name != "INSERT":
        dynamodb["OldImage"] = marshall({**keys, **(old or {})})
    return {
        "eventID": str(uuid.uuid4()),
        "eventName": name,
        "eventSource": "aws:dynamodb",
        "awsRegion": "us-east-1",
        "dynamodb": dynamodb,
    }


@pytest.fixture
def stream_event() -> Callable[..., dict[str, Any]]:
    """Factory: stream_event(record_kwargs, ...) -> invocation event."""

    def _build(*records: dict[str, Any]) -> dict[str, Any]:
        specs = records or ({},)
        return {"Records": [make_stream_record(**spec) for spec in specs]}

    return _build


@pytest.fixture
def bulk_client() -> MagicMock:
    """Search client stub whose bulk call succeeds."""
    client = MagicMock()
    client.bulk.return_value = dict(BULK_RESPONSE)
    return client


@pytest.fixture
def lambda_context() -> SimpleNamespace:
    """Minimal Lambda context."""
    return SimpleNamespace(
        aws_request_id=str(uuid.uuid4()),
        function_name="dynamo-es-stream-test",
        get_remaining_time_in_millis=lambda: 30000,
    )


@pytest.fixture
def settings() -> StreamSettings:
    """Settings that never touch a real cluster."""
    return StreamSettings(elasticsearch_hosts=["http://localhost:9200"])


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
