"""
NotesWise Backend: Provider HTTP Transport
============================================

What:  Builds the HTTP client each provider call uses and posts with retries.
Why:   Every backend (three text providers and ElevenLabs) needs the same things
       from the network layer: a fixed timeout, a User-Agent header, and a
       bounded retry on transient transport failures.
How:   `TransportOptions` is an immutable bundle built once from settings. Each
       call opens a short-lived `httpx.AsyncClient` via `options.client()`,
       so no connection pool is shared between concurrent requests.

Retry policy (tenacity):
    - Retried: httpx.TransportError other than timeouts (connect errors, ...)
    - Not retried: httpx.TimeoutException. An expired timeout is final and
      is reported as a network failure straight away.
    - Not retried: any HTTP response, including 4xx/5xx. A response means the
      backend answered; the adapter decides what it means.
    - Backoff: exponential with jitter, capped at retry_max_wait.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportOptions:
    """
    Per-provider transport settings.

    Attributes:
        timeout:          Seconds before a call is abandoned as a network failure
        user_agent:       Default User-Agent header for every request
        retry_attempts:   Total attempts for transport failures (1 = no retry)
        retry_min_wait:   Initial backoff in seconds
        retry_max_wait:   Backoff ceiling in seconds
        transport:        Optional httpx transport (tests pass httpx.MockTransport)
    """

    timeout: float = 30.0
    user_agent: str = "NotesWise-API/1.0"
    retry_attempts: int = 1
    retry_min_wait: float = 1.0
    retry_max_wait: float = 5.0
    transport: Optional[httpx.AsyncBaseTransport] = None

    @classmethod
    def from_settings(
        cls, settings: Any, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "TransportOptions":
        return cls(
            timeout=settings.provider_timeout_seconds,
            user_agent=settings.user_agent,
            retry_attempts=settings.retry_max_attempts,
            retry_min_wait=settings.retry_min_wait,
            retry_max_wait=settings.retry_max_wait,
            transport=transport,
        )

    def client(self) -> httpx.AsyncClient:
        """Open a fresh client scoped to one call. Use with `async with`."""
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent},
            transport=self.transport,
        )


async def post_with_retry(
    client: httpx.AsyncClient,
    url: str,
    options: TransportOptions,
    **kwargs: Any,
) -> httpx.Response:
    """
    POST `url`, retrying non-timeout transport failures per `options`.

    Raises:
        httpx.TransportError: The last transport failure once attempts are exhausted.
    """
    retrying = AsyncRetrying(
        retry=(
            retry_if_exception_type(httpx.TransportError)
            & retry_if_not_exception_type(httpx.TimeoutException)
        ),
        stop=stop_after_attempt(options.retry_attempts),
        wait=wait_exponential_jitter(
            initial=options.retry_min_wait,
            max=options.retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            response = await client.post(url, **kwargs)
    return response
