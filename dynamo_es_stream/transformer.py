"""
Turns one DynamoDB stream record into Elasticsearch bulk body lines.

Action descriptors carry ``_index``, ``_type`` (when resolved), ``_id``,
``parent`` and ``version``. External versioning is requested with the bulk
API's own snake_case key ``version_type`` rather than ``versionType``, since
the descriptor is sent to Elasticsearch unchanged.
"""

from decimal import Decimal
from typing import Any, Optional

from dynamo_es_stream.errors import InvalidVersionError, UnknownEventNameError
from dynamo_es_stream.fields import assemble_field, get_field, pick_fields
from dynamo_es_stream.hooks import call_hook
from dynamo_es_stream.models import EventName, ParsedRecord, RecordMeta
from dynamo_es_stream.options import IndexerOptions
from dynamo_es_stream.parsing import enrich_record, parse_stream_record
from dynamo_es_stream.stream_types import BulkLine, DynamoDBStreamRecord

EXTERNAL_VERSION_TYPE = "external"
RESOLVED_VERSION_LABEL = "resolved version"

TransformedRecord = tuple[list[BulkLine], RecordMeta]


def validate_version(value: Any, label: str) -> Any:
    """
    Ensure a version is a non-negative number.

    Raises:
        InvalidVersionError: Naming ``label`` in the message
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        message = f'"{label}" must be a number'
        raise InvalidVersionError(message, [message])
    if value < 0:
        message = f'"{label}" must be larger than or equal to 0'
        raise InvalidVersionError(message, [message])
    return value


async def build_descriptor(
    parsed: ParsedRecord,
    document: dict[str, Any],
    options: IndexerOptions,
) -> dict[str, Any]:
    """Assemble _index/_type/_id/parent/version for one record."""
    separator = options.separator

    if options.id_resolver:
        doc_id = await call_hook(options.id_resolver, document, parsed.old_image)
    elif options.id_field:
        doc_id = assemble_field(parsed, options.id_field, separator)
    else:
        doc_id = assemble_field(parsed, list(parsed.keys), separator)

    if options.index:
        index = options.index
    else:
        field_value = assemble_field(parsed, options.index_field, separator)
        index = f"{options.index_prefix}{field_value}"

    descriptor: dict[str, Any] = {"_index": index}

    if options.type:
        doc_type = options.type
    elif options.type_field:
        doc_type = assemble_field(parsed, options.type_field, separator)
    else:
        doc_type = None
    if doc_type is not None and str(doc_type).strip():
        descriptor["_type"] = doc_type

    descriptor["_id"] = doc_id

    if options.parent_field:
        descriptor["parent"] = get_field(parsed, options.parent_field)

    if options.version_resolver:
        version = await call_hook(
            options.version_resolver, document, parsed.old_image
        )
        descriptor["version"] = validate_version(version, RESOLVED_VERSION_LABEL)
        descriptor["version_type"] = EXTERNAL_VERSION_TYPE
    elif options.version_field:
        version = get_field(parsed, options.version_field)
        descriptor["version"] = validate_version(version, options.version_field)
        descriptor["version_type"] = EXTERNAL_VERSION_TYPE

    return descriptor


async def transform_record(
    record: DynamoDBStreamRecord, options: IndexerOptions
) -> Optional[TransformedRecord]:
    """
    Build the bulk lines and metadata for a single stream record.

    Returns None when the transform hook returns None or False; any other
    result, an empty dict included, becomes the document.

    Raises:
        FieldNotFoundError: A configured field is in none of the images
        InvalidVersionError: The resolved version is not a number >= 0
        UnknownEventNameError: eventName is not INSERT, MODIFY or REMOVE
    """
    parsed = parse_stream_record(record)

    document: Any = (
        pick_fields(parsed.new_image, options.pick_fields)
        if options.pick_fields
        else parsed.new_image
    )

    descriptor = await build_descriptor(parsed, document, options)

    if options.transform_record_hook:
        document = await call_hook(
            options.transform_record_hook, document, parsed.old_image
        )
        # An empty mapping is still a document; REMOVE records carry one.
        if document is None or document is False:
            return None

    event_name = EventName.from_record(record)
    lines: list[BulkLine]
    if event_name in (EventName.INSERT, EventName.MODIFY):
        if options.upsert:
            action = {"update": descriptor}
            lines = [action, {"doc": document, "doc_as_upsert": True}]
        else:
            action = {"index": descriptor}
            lines = [action, document]
    elif event_name is EventName.REMOVE:
        if "version" in descriptor:
            descriptor["version"] += 1
        action = {"delete": descriptor}
        lines = [action]
        document = None
    else:
        raise UnknownEventNameError(record)

    meta = RecordMeta(
        event=enrich_record(record, parsed),
        action=action,
        document=document,
    )
    return lines, meta
