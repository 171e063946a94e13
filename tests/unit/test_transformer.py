"""Unit tests for single-record transformation."""

import asyncio
from typing import Any, Optional

import pytest

from conftest import make_stream_record
from dynamo_es_stream.errors import (
    FieldNotFoundError,
    InvalidVersionError,
    UnknownEventNameError,
)
from dynamo_es_stream.options import validate_options
from dynamo_es_stream.transformer import transform_record, validate_version


def _transform(record: dict[str, Any], **options: Any) -> Optional[tuple]:
    merged = {"index": "i", "type": "t", **options}
    for key in [key for key, value in merged.items() if value is None]:
        del merged[key]
    return asyncio.run(transform_record(record, validate_options(merged)))


class TestEventKinds:
    """INSERT/MODIFY index, REMOVE deletes, anything else fails."""

    def test_insert_produces_index_action_and_document(self) -> None:
        record = make_stream_record("INSERT", keys={"id": "k1"}, new={"v": 5})

        lines, meta = _transform(record)

        assert lines == [
            {"index": {"_index": "i", "_type": "t", "_id": "k1"}},
            {"id": "k1", "v": 5},
        ]
        assert meta.action == lines[0]
        assert meta.document == {"id": "k1", "v": 5}
        assert meta.event["dynamodb"]["NewImage"] == {"id": "k1", "v": 5}

    def test_modify_produces_index_action(self) -> None:
        record = make_stream_record(
            "MODIFY", keys={"id": "k1"}, new={"v": 6}, old={"v": 5}
        )

        lines, _ = _transform(record)

        assert lines[0] == {"index": {"_index": "i", "_type": "t", "_id": "k1"}}
        assert lines[1] == {"id": "k1", "v": 6}

    def test_remove_produces_single_delete_action(self) -> None:
        record = make_stream_record("REMOVE", keys={"id": "k1"})

        lines, meta = _transform(record)

        assert lines == [{"delete": {"_index": "i", "_type": "t", "_id": "k1"}}]
        assert meta.document is None

    def test_unknown_event_name(self) -> None:
        record = make_stream_record("INSERT", keys={"id": "k1"})
        record["eventName"] = "TRUNCATE"

        with pytest.raises(UnknownEventNameError) as exc_info:
            _transform(record)

        assert str(exc_info.value) == '"TRUNCATE" is an unknown event name'
        assert exc_info.value.details is record

    def test_upsert_mode(self) -> None:
        record = make_stream_record("MODIFY", keys={"id": "k1"}, new={"v": 6})

        lines, meta = _transform(record, upsert=True)

        assert lines == [
            {"update": {"_index": "i", "_type": "t", "_id": "k1"}},
            {"doc": {"id": "k1", "v": 6}, "doc_as_upsert": True},
        ]
        assert meta.document == {"id": "k1", "v": 6}


class TestIdentity:
    """_id, _index, _type and parent resolution."""

    def test_id_from_concatenated_keys(self) -> None:
        record = make_stream_record("INSERT", keys={"a": "x", "b": "y"})

        lines, _ = _transform(record)

        assert lines[0]["index"]["_id"] == "x.y"

    def test_id_field_list_with_separator(self) -> None:
        record = make_stream_record(
            "INSERT", keys={"a": "x", "b": "y", "c": "z"}
        )

        lines, _ = _transform(record, id_field=["a", "c"], separator="~")

        assert lines[0]["index"]["_id"] == "x~z"

    def test_id_resolver_receives_document_and_old_image(self) -> None:
        calls = []

        def resolver(document, old_image):
            calls.append((document, old_image))
            return f"{document['id']}-resolved"

        record = make_stream_record("MODIFY", keys={"id": "k1"}, old={"v": 1})

        lines, _ = _transform(record, id_resolver=resolver)

        assert lines[0]["index"]["_id"] == "k1-resolved"
        assert calls == [({"id": "k1"}, {"id": "k1", "v": 1})]

    def test_async_id_resolver(self) -> None:
        async def resolver(document, _old_image):
            await asyncio.sleep(0)
            return document["id"].upper()

        record = make_stream_record("INSERT", keys={"id": "k1"})

        lines, _ = _transform(record, id_resolver=resolver)

        assert lines[0]["index"]["_id"] == "K1"

    def test_index_field_with_prefix(self) -> None:
        record = make_stream_record(
            "INSERT", keys={"id": "k1"}, new={"tenant": "acme"}
        )

        lines, _ = _transform(
            record, index=None, index_field="tenant", index_prefix="orders-"
        )

        assert lines[0]["index"]["_index"] == "orders-acme"

    def test_missing_index_field(self) -> None:
        record = make_stream_record("INSERT", keys={"id": "k1"})

        with pytest.raises(FieldNotFoundError) as exc_info:
            _transform(record, index=None, index_field="foo")

        assert str(exc_info.value) == '"foo" field not found in record'

    def test_type_from_field(self) -> None:
        record = make_stream_record(
            "INSERT", keys={"id": "k1"}, new={"kind": "order"}
        )

        lines, _ = _transform(record, type=None, type_field="kind")

        assert lines[0]["index"]["_type"] == "order"

    def test_blank_type_is_omitted(self) -> None:
        record = make_stream_record("INSERT", keys={"id": "k1"}, new={"kind": " "})

        lines, _ = _transform(record, type=None, type_field="kind")

        assert "_type" not in lines[0]["index"]

    def test_no_type_configured(self) -> None:
        record = make_stream_record("INSERT", keys={"id": "k1"})

        lines, _ = _transform(record, type=None)

        assert lines[0] == {"index": {"_index": "i", "_id": "k1"}}

    def test_parent_field(self) -> None:
        record = make_stream_record(
            "INSERT", keys={"id": "k1"}, new={"owner": "p1"}
        )

        lines, _ = _transform(record, parent_field="owner")

        assert lines[0]["index"]["parent"] == "p1"

    def test_missing_parent_field(self) -> None:
        record = make_stream_record("INSERT", keys={"id": "k1"})

        with pytest.raises(FieldNotFoundError):
            _transform(record, parent_field="owner")


class TestVersion:
    """External versioning."""

    def test_version_field(self) -> None:
        record = make_stream_record("INSERT", keys={"id": "k1"}, new={"rev": 3})

        lines, _ = _transform(record, version_field="rev")

        assert lines[0]["index"]["version"] == 3
        assert lines[0]["index"]["version_type"] == "external"

    def test_zero_version_is_kept(self) -> None:
        record = make_stream_record("INSERT", keys={"id": "k1"}, new={"rev": 0})

        lines, _ = _transform(record, version_field="rev")

        assert lines[0]["index"]["version"] == 0
        assert lines[0]["index"]["version_type"] == "external"

    def test_no_version_without_configuration(self) -> None:
        record = make_stream_record("INSERT", keys={"id": "k1"}, new={"rev": 3})

        lines, _ = _transform(record)

        assert "version" not in lines[0]["index"]
        assert "version_type" not in lines[0]["index"]

    def test_remove_increments_version(self) -> None:
        record = make_stream_record("REMOVE", keys={"id": "k1"}, old={"rev": 3})

        lines, _ = _transform(record, version_field="rev")

        assert lines == [
            {
                "delete": {
                    "_index": "i",
                    "_type": "t",
                    "_id": "k1",
                    "version": 4,
                    "version_type": "external",
                }
            }
        ]

    def test_version_resolver(self) -> None:
        record = make_stream_record("INSERT", keys={"id": "k1"}, new={"v": 3})

        lines, _ = _transform(record, version_resolver=lambda doc, _old: doc["v"])

        assert lines[0]["index"]["version"] == 3

    def test_invalid_version_field(self) -> None:
        record = make_stream_record(
            "INSERT", keys={"id": "k1"}, new={"_version": "1"}
        )

        with pytest.raises(InvalidVersionError) as exc_info:
            _transform(record, version_field="_version")

        assert str(exc_info.value) == '"_version" must be a number'

    def test_invalid_resolved_version(self) -> None:
        record = make_stream_record(
            "INSERT", keys={"id": "k1"}, new={"_version": "1"}
        )

        with pytest.raises(InvalidVersionError) as exc_info:
            _transform(
                record, version_resolver=lambda doc, _old: doc["_version"]
            )

        assert str(exc_info.value) == '"resolved version" must be a number'

    def test_missing_version_field(self) -> None:
        record = make_stream_record("INSERT", keys={"id": "k1"})

        with pytest.raises(FieldNotFoundError):
            _transform(record, version_field="notFoundField")

    @pytest.mark.parametrize("value", [-1, True, None, "3"])
    def test_validate_version_rejects(self, value: Any) -> None:
        with pytest.raises(InvalidVersionError):
            validate_version(value, "v")

    def test_validate_version_negative_message(self) -> None:
        with pytest.raises(InvalidVersionError) as exc_info:
            validate_version(-1, "v")

        assert str(exc_info.value) == '"v" must be larger than or equal to 0'


class TestDocument:
    """pick_fields and transform hook."""

    def test_pick_fields(self) -> None:
        record = make_stream_record(
            "INSERT", keys={"id": "k1"}, new={"a": 1, "b": 2, "c": 3}
        )

        lines, _ = _transform(record, pick_fields=["a", "c"])

        assert lines[1] == {"a": 1, "c": 3}

    def test_pick_fields_single(self) -> None:
        record = make_stream_record(
            "INSERT", keys={"id": "k1"}, new={"a": 1, "b": 2}
        )

        lines, _ = _transform(record, pick_fields="b")

        assert lines[1] == {"b": 2}

    def test_transform_hook_replaces_document(self) -> None:
        async def hook(document, old_image):
            return {"copy": document["v"], "was": old_image["v"]}

        record = make_stream_record(
            "MODIFY", keys={"id": "k1"}, new={"v": 2}, old={"v": 1}
        )

        lines, meta = _transform(record, transform_record_hook=hook)

        assert lines[1] == {"copy": 2, "was": 1}
        assert meta.document == {"copy": 2, "was": 1}

    @pytest.mark.parametrize("dropped", [None, False])
    def test_none_or_false_transform_result_drops_record(
        self, dropped: Any
    ) -> None:
        record = make_stream_record("INSERT", keys={"id": "k1"})

        assert _transform(record, transform_record_hook=lambda *_: dropped) is None

    def test_empty_transform_result_is_kept(self) -> None:
        record = make_stream_record("INSERT", keys={"id": "k1"})

        lines, meta = _transform(record, transform_record_hook=lambda *_: {})

        assert lines == [
            {"index": {"_index": "i", "_type": "t", "_id": "k1"}},
            {},
        ]
        assert meta.document == {}

    def test_identity_hook_keeps_remove(self) -> None:
        record = make_stream_record("REMOVE", keys={"id": "k1"}, old={"v": 1})

        lines, meta = _transform(
            record, transform_record_hook=lambda document, _old: document
        )

        assert lines == [{"delete": {"_index": "i", "_type": "t", "_id": "k1"}}]
        assert meta.document is None

    def test_empty_pick_with_identity_hook_still_indexes(self) -> None:
        record = make_stream_record("INSERT", keys={"id": "k1"}, new={"v": 1})

        lines, _ = _transform(
            record,
            pick_fields="absent",
            transform_record_hook=lambda document, _old: document,
        )

        assert lines == [
            {"index": {"_index": "i", "_type": "t", "_id": "k1"}},
            {},
        ]
