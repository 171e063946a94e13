"""
Submits an assembled bulk body to Elasticsearch with retries.
"""

import logging
from typing import Any

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    stop_after_attempt,
    wait_exponential,
    wait_random_exponential,
)

from dynamo_es_stream.hooks import call_blocking
from dynamo_es_stream.models import BatchOutput, DispatchResult
from dynamo_es_stream.options import RetryOptions, SearchOptions
from dynamo_es_stream.stream_types import SearchClient

logger = logging.getLogger(__name__)


def build_retrying(retry_options: RetryOptions) -> AsyncRetrying:
    """
    Translate retry options into a tenacity controller.

    The n-th retry waits ``min_timeout * factor ** (n - 1)`` seconds, capped
    at ``max_timeout``; ``randomize`` draws the wait uniformly up to that
    value instead. The last exception is re-raised unchanged.
    """
    wait_kwargs: dict[str, Any] = {
        "multiplier": retry_options.min_timeout,
        "exp_base": retry_options.factor,
    }
    if retry_options.max_timeout is not None:
        wait_kwargs["max"] = retry_options.max_timeout

    if retry_options.randomize:
        wait = wait_random_exponential(**wait_kwargs)
    else:
        wait = wait_exponential(min=retry_options.min_timeout, **wait_kwargs)

    return AsyncRetrying(
        stop=stop_after_attempt(retry_options.retries + 1),
        wait=wait,
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


async def dispatch(
    client: SearchClient,
    batch: BatchOutput,
    search_options: SearchOptions,
    retry_options: RetryOptions,
) -> DispatchResult:
    """
    Send the whole batch through ``client.bulk``, retrying the full request.

    Raises:
        Exception: Whatever the client raised on the final attempt
    """
    request = {**search_options.bulk, "body": batch.actions}

    logger.info(
        "Dispatching bulk request",
        extra={
            "line_count": len(batch.actions),
            "record_count": len(batch.meta),
            "max_attempts": retry_options.retries + 1,
        },
    )

    async for attempt in build_retrying(retry_options):
        with attempt:
            result = await call_blocking(client.bulk, **request)

    return DispatchResult(result=result, meta=batch.meta)
