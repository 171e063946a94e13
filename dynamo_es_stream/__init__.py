"""
Index DynamoDB stream records into Elasticsearch from AWS Lambda.

This package owns option validation, stream record decoding, bulk action
assembly and retrying dispatch so a Lambda module only needs to call
``create_handler`` with its configuration.
"""

__version__ = "0.1.0"

from dynamo_es_stream.errors import (
    ConfigurationError,
    DynamoEsStreamError,
    EventShapeError,
    FieldNotFoundError,
    InvalidVersionError,
    UnknownEventNameError,
    ValidationError,
)
from dynamo_es_stream.fields import assemble_field, get_field
from dynamo_es_stream.handler import StreamIndexer, create_handler
from dynamo_es_stream.models import (
    BatchOutput,
    EventName,
    ParsedRecord,
    RecordMeta,
)
from dynamo_es_stream.options import (
    IndexerOptions,
    requires_mapping_type,
    validate_options,
)

__all__ = [
    "__version__",
    "BatchOutput",
    "ConfigurationError",
    "DynamoEsStreamError",
    "EventName",
    "EventShapeError",
    "FieldNotFoundError",
    "IndexerOptions",
    "InvalidVersionError",
    "ParsedRecord",
    "RecordMeta",
    "StreamIndexer",
    "UnknownEventNameError",
    "ValidationError",
    "assemble_field",
    "create_handler",
    "get_field",
    "requires_mapping_type",
    "validate_options",
]
