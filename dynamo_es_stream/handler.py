"""
Lambda handler that indexes DynamoDB stream records into Elasticsearch.

Typical Lambda module:

    from dynamo_es_stream import create_handler

    handler = create_handler(
        {
            "es": {"hosts": ["https://search.example.com:443"]},
            "index_field": "tenant",
            "index_prefix": "orders-",
            "version_field": "revision",
        }
    )

Each invocation runs: before_hook -> event validation -> per-record
transformation -> bulk dispatch (skipped for an empty batch) -> after_hook.
Any failure along the way goes to error_hook when one is configured.
"""

import asyncio
import logging
from typing import Any, Mapping, Optional

from elasticsearch import Elasticsearch

from dynamo_es_stream.assembler import assemble_batch
from dynamo_es_stream.config import StreamSettings, get_settings
from dynamo_es_stream.dispatcher import dispatch
from dynamo_es_stream.hooks import call_hook
from dynamo_es_stream.models import DispatchResult, empty_bulk_response
from dynamo_es_stream.options import (
    IndexerOptions,
    SearchOptions,
    validate_options,
)
from dynamo_es_stream.parsing import validate_event
from dynamo_es_stream.stream_types import (
    DynamoDBStreamEvent,
    LambdaContext,
    SearchClient,
)

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "dynamo_es_stream"


def create_client(
    search_options: SearchOptions, settings: Optional[StreamSettings] = None
) -> Elasticsearch:
    """
    Build an Elasticsearch client from the handler's search options.

    Connection details missing from the options are taken from the
    environment settings.
    """
    settings = settings or get_settings()
    kwargs = dict(search_options.client_kwargs)
    if "hosts" not in kwargs and "cloud_id" not in kwargs:
        kwargs["hosts"] = settings.elasticsearch_hosts
    kwargs.setdefault("request_timeout", settings.request_timeout)
    return Elasticsearch(**kwargs)


class StreamIndexer:
    """
    Callable Lambda handler bound to one validated configuration.

    Options are validated once, here; invocations share nothing mutable
    except the search client, whose ``bulk`` method is only called.
    """

    def __init__(
        self,
        options: Optional[Mapping[str, Any]],
        settings: Optional[StreamSettings] = None,
    ):
        self.options: IndexerOptions = validate_options(options)
        client = self.options.search.client
        if client is None:
            client = create_client(self.options.search, settings)
        self.client: SearchClient = client

    def __call__(
        self, event: DynamoDBStreamEvent, context: LambdaContext
    ) -> Any:
        """Synchronous Lambda entry point."""
        return asyncio.run(self.handle(event, context))

    async def handle(
        self, event: DynamoDBStreamEvent, context: LambdaContext
    ) -> Any:
        """
        Process one invocation.

        Returns:
            The bulk response, or the after_hook / error_hook result when
            those hooks return a value
        """
        options = self.options
        try:
            if options.before_hook:
                await call_hook(options.before_hook, event, context)

            validate_event(event)
            batch = await assemble_batch(event, context, options)

            if batch:
                dispatched = await dispatch(
                    self.client, batch, options.search, options.retry
                )
            else:
                logger.info(
                    "No bulk actions produced, skipping dispatch",
                    extra={"record_count": len(event["Records"])},
                )
                dispatched = DispatchResult(
                    result=empty_bulk_response(), meta=batch.meta
                )

            if options.after_hook:
                hook_result = await call_hook(
                    options.after_hook,
                    event,
                    context,
                    dispatched.result,
                    dispatched.meta,
                )
                if hook_result is not None:
                    return hook_result
            return dispatched.result

        except Exception as exc:  # pylint: disable=broad-exception-caught
            if not options.error_hook:
                raise
            logger.error(
                "Stream batch failed, delegating to error hook",
                extra={"error_type": type(exc).__name__, "error": str(exc)},
            )
            return await call_hook(options.error_hook, event, context, exc)


def create_handler(
    options: Optional[Mapping[str, Any]],
    settings: Optional[StreamSettings] = None,
) -> StreamIndexer:
    """
    Validate options and build a Lambda handler.

    Raises:
        ConfigurationError: When the options violate the contract
    """
    indexer = StreamIndexer(options, settings)
    settings = settings or get_settings()
    logging.getLogger(PACKAGE_LOGGER).setLevel(settings.log_level)
    return indexer
