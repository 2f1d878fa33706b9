"""
Transport handle wrapping httpx.AsyncClient.
"""
import asyncio
import json
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import httpx

from ..config import ClientConfig
from ..errors import HTTPStatusError, InvalidURLError, TotalTimeoutError, TransportError
from ..types import RequestOptions

logger = logging.getLogger(__name__)

# Constants
LOG_PREFIX = "[Transport]"
MAX_LOGGED_BODY = 2000


def _format_body(body: Any) -> str:
    """
    Format body for logging safeguards against binary data.
    """
    if not body:
        return "<empty>"
    if isinstance(body, (bytes, bytearray)):
        try:
            body = bytes(body).decode("utf-8")
        except UnicodeDecodeError:
            return f"<binary data: {len(body)} bytes>"
    if isinstance(body, str):
        if body.lstrip().startswith(("{", "[")):
            try:
                body = json.dumps(json.loads(body), indent=2)
            except json.JSONDecodeError:
                pass
        if len(body) > MAX_LOGGED_BODY:
            return body[:MAX_LOGGED_BODY] + "... (truncated)"
        return body
    return str(body)


class Transport:
    """
    Owns the connection pool and executes assembled requests.

    One transport may be shared by several builders so they reuse
    connections. Connect and response-header limits are applied through
    httpx; the total limit is a deadline around the whole exchange,
    including reading the body.
    """

    def __init__(self, config: Optional[ClientConfig] = None, httpx_client: Optional[httpx.AsyncClient] = None):
        self._config = config or ClientConfig()
        self._client: Optional[httpx.AsyncClient] = httpx_client

        # Flag to track if we own the client (created it)
        self._own_client = self._client is None

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def is_connected(self) -> bool:
        return self._client is not None and not self._client.is_closed

    async def connect(self) -> None:
        """Initialize the client if needed."""
        if self.is_connected:
            return

        kwargs: dict = {
            "timeout": self._config.timeout.to_httpx(),
            # Empty proxy means direct, so environment proxies are ignored
            "trust_env": False,
        }
        if self._config.proxy_url:
            kwargs["proxy"] = self._config.proxy_url

        logger.debug(
            f"{LOG_PREFIX} Creating httpx.AsyncClient: timeout={self._config.timeout.model_dump()}, "
            f"proxy={self._config.proxy_url or '<direct>'}"
        )
        self._client = httpx.AsyncClient(**kwargs)
        self._own_client = True

    async def aclose(self) -> None:
        """Close the client if we own it."""
        if self._own_client and self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "Transport":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def build_request(self, options: RequestOptions) -> httpx.Request:
        assert self._client is not None
        try:
            return self._client.build_request(
                method=options.method.value,
                url=options.url,
                params=dict(options.params) or None,
                headers=dict(options.headers) or None,
                content=options.content or None,
            )
        except httpx.InvalidURL as e:
            raise InvalidURLError(options.url) from e

    @asynccontextmanager
    async def send(self, options: RequestOptions) -> AsyncIterator[httpx.Response]:
        """Send one request and yield the response with its body unread.

        The response is closed when the block exits, on every path.
        Non-2xx responses raise HTTPStatusError.
        """
        await self.connect()
        assert self._client is not None

        method = options.method.value
        request = self.build_request(options)
        url = str(request.url)
        # Logs never include query values
        log_url = url.split("?", 1)[0]
        timeout_ms = self._config.timeout.total

        logger.debug(f"{LOG_PREFIX} Request: {method} {log_url} body={_format_body(options.body)}")
        started = time.perf_counter()

        deadline = asyncio.timeout(self._config.timeout.total_seconds)
        try:
            async with deadline:
                try:
                    response = await self._client.send(request, stream=True)
                except httpx.RequestError as e:
                    logger.error(f"{LOG_PREFIX} Request failed: {method} {log_url}: {e!r}")
                    raise TransportError(method, url, e) from e

                try:
                    if not response.is_success:
                        logger.debug(f"{LOG_PREFIX} Rejecting status {response.status_code} for {method} {log_url}")
                        raise HTTPStatusError(response.status_code, response.reason_phrase, url)
                    try:
                        yield response
                    except httpx.RequestError as e:
                        # Raised while the caller was reading the body
                        logger.error(f"{LOG_PREFIX} Reading response failed: {method} {log_url}: {e!r}")
                        raise TransportError(method, url, e) from e
                finally:
                    await response.aclose()
                    elapsed_ms = (time.perf_counter() - started) * 1000
                    logger.debug(f"{LOG_PREFIX} Response: {method} {log_url} status={response.status_code} elapsed={elapsed_ms:.1f}ms")
        except TimeoutError as e:
            if not deadline.expired():
                raise
            logger.error(f"{LOG_PREFIX} Total timeout of {timeout_ms}ms exceeded: {method} {log_url}")
            raise TotalTimeoutError(method, url, timeout_ms) from e
