"""HTTP transport for decoded requests.

Provides an httpx client factory configured from :class:`Settings` and
:func:`send_request`, which streams a decoded request to the target.
"""

import asyncio
import io
import os
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from preheat.config.settings import Settings
from preheat.core.logging import get_logger
from preheat.http.request import Request


logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class HTTPClientFactory:
    """Factory for the httpx clients that send warm-up requests."""

    @staticmethod
    def create_client(
        *,
        settings: Settings | None = None,
        **kwargs: Any,
    ) -> httpx.AsyncClient:
        """Create an HTTP client configured from settings.

        Args:
            settings: Settings to take the target URL, timeouts and headers from
            **kwargs: Additional httpx.AsyncClient arguments; a ``transport``
                given here replaces the default one

        Returns:
            Configured httpx.AsyncClient instance
        """
        http_settings = settings.http if settings is not None else Settings().http

        timeout = httpx.Timeout(
            connect=http_settings.timeout_connect,
            read=http_settings.timeout_read,
            write=http_settings.timeout_read,
            pool=http_settings.timeout_connect,
        )

        if "transport" not in kwargs:
            kwargs["transport"] = httpx.AsyncHTTPTransport(
                http2=http_settings.http2,
                proxy=_get_proxy_url(),
            )

        headers = dict(http_settings.headers)
        headers.update(kwargs.pop("headers", None) or {})

        logger.debug(
            "http_client_created",
            base_url=http_settings.target_url,
            timeout_connect=http_settings.timeout_connect,
            timeout_read=http_settings.timeout_read,
            http2=http_settings.http2,
        )

        return httpx.AsyncClient(
            base_url=http_settings.target_url,
            timeout=timeout,
            headers=headers,
            **kwargs,
        )

    @staticmethod
    @asynccontextmanager
    async def managed_client(
        settings: Settings | None = None, **kwargs: Any
    ) -> AsyncGenerator[httpx.AsyncClient, None]:
        """Create an HTTP client that is closed when the block exits.

        Example:
            async with HTTPClientFactory.managed_client(settings) as client:
                response = await send_request(client, request)
        """
        client = HTTPClientFactory.create_client(settings=settings, **kwargs)
        try:
            yield client
        finally:
            await client.aclose()
            logger.debug("managed_http_client_closed")


def _get_proxy_url() -> str | None:
    """Get proxy URL from environment variables."""
    return (
        os.environ.get("HTTPS_PROXY")
        or os.environ.get("https_proxy")
        or os.environ.get("ALL_PROXY")
        or os.environ.get("HTTP_PROXY")
        or os.environ.get("http_proxy")
    )


async def aiter_body(
    body: io.IOBase, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> AsyncIterator[bytes]:
    """Read ``body`` in chunks off the event loop, closing it when done."""
    try:
        while True:
            chunk = await asyncio.to_thread(body.read, chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        body.close()


async def send_request(
    client: httpx.AsyncClient,
    request: Request,
    *,
    headers: dict[str, str] | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> httpx.Response:
    """Send a decoded request and return the response.

    The body, if any, is streamed; compressed bodies are sent with
    ``Content-Encoding: gzip``.

    Raises:
        httpx.HTTPError: If the request cannot be sent
    """
    request_headers = dict(headers or {})
    content: AsyncIterator[bytes] | None = None
    if request.body is not None:
        content = aiter_body(request.body, chunk_size)
        if request.is_compressed:
            request_headers["Content-Encoding"] = "gzip"

    try:
        response = await client.request(
            request.method.value,
            request.path,
            content=content,
            headers=request_headers,
        )
    except httpx.HTTPError as e:
        # the body may never have been read; stop a pending gzip producer
        if request.body is not None:
            request.body.close()
        logger.warning(
            "request_failed",
            method=request.method.value,
            path=request.path,
            error=str(e),
        )
        raise

    logger.info(
        "request_sent",
        method=request.method.value,
        path=request.path,
        status_code=response.status_code,
        compressed=request.is_compressed,
    )
    return response
