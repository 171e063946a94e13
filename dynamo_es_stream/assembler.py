"""
Folds every stream record of an invocation into one bulk request body.
"""

import logging

from dynamo_es_stream.hooks import call_hook
from dynamo_es_stream.models import BatchOutput
from dynamo_es_stream.options import IndexerOptions
from dynamo_es_stream.stream_types import DynamoDBStreamEvent, LambdaContext
from dynamo_es_stream.transformer import transform_record

logger = logging.getLogger(__name__)


async def assemble_batch(
    event: DynamoDBStreamEvent,
    context: LambdaContext,
    options: IndexerOptions,
) -> BatchOutput:
    """
    Transform records one at a time, in order, into bulk lines and metadata.

    A failing record is handed to ``record_error_hook`` when one is
    configured and left out of the batch; without the hook the error
    propagates and nothing is dispatched.
    """
    batch = BatchOutput()

    for position, record in enumerate(event["Records"]):
        try:
            transformed = await transform_record(record, options)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            if not options.record_error_hook:
                raise
            logger.warning(
                "Skipping stream record after error",
                extra={
                    "position": position,
                    "event_name": record.get("eventName"),
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            await call_hook(options.record_error_hook, event, context, exc)
            continue

        if transformed is None:
            logger.debug(
                "Stream record dropped by transform hook",
                extra={"position": position},
            )
            continue

        lines, meta = transformed
        batch.actions.extend(lines)
        batch.meta.append(meta)

    return batch
