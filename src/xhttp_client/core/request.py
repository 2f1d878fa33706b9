"""
Fluent request builder.
"""
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Mapping, Optional, Type, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from ..config import (
    DEFAULT_CONNECT_TIMEOUT_MS,
    DEFAULT_RESPONSE_HEADER_TIMEOUT_MS,
    DEFAULT_TOTAL_TIMEOUT_MS,
    ClientConfig,
    build_config,
)
from ..errors import EncodeError, InvalidMethodError, InvalidURLError, StructDecodeError
from ..json_field import get_json_field, get_json_raw
from ..types import HttpMethod, RequestOptions
from .transport import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Constants
LOG_PREFIX = "[RequestBuilder]"
MIN_URL_LENGTH = len("http://") + 1
URL_PREFIX = "http"


def validate_url(url: str) -> str:
    """Minimal sanity check: at least 8 characters and an ``http`` prefix.

    This accepts strings such as ``httpX://host``; those fail later in the
    transport.
    """
    if len(url) < MIN_URL_LENGTH or url[:4] != URL_PREFIX:
        raise InvalidURLError(url)
    return url


def parse_method(method: str) -> HttpMethod:
    """Map a verb onto HttpMethod; matching is case-sensitive."""
    try:
        return HttpMethod(method)
    except ValueError:
        raise InvalidMethodError(method) from None


def _decode(target: Type[T], payload: bytes) -> T:
    try:
        return TypeAdapter(target).validate_json(payload)
    except PydanticValidationError as e:
        raise StructDecodeError(target, e) from e


class RequestBuilder:
    """Fluent HTTP client builder.

    Method and body persist across requests. Headers and params are
    one-shot: assembling a request moves them into its RequestOptions and
    leaves the builder with none.

    A builder is not safe for concurrent use. Builders that need to run in
    parallel can share one Transport.
    """

    def __init__(self, config: Optional[ClientConfig] = None, transport: Optional[Transport] = None):
        self._own_transport = transport is None
        self._transport = transport or Transport(config)
        self._method = ""
        self._body = ""
        self._headers: Optional[Dict[str, str]] = None
        self._params: Optional[Dict[str, str]] = None

    @classmethod
    def create(cls, config: Optional[ClientConfig] = None) -> "RequestBuilder":
        """Factory method to create a builder."""
        return cls(config)

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def current_method(self) -> str:
        return self._method

    @property
    def body(self) -> str:
        return self._body

    @property
    def pending_headers(self) -> Dict[str, str]:
        return dict(self._headers or {})

    @property
    def pending_params(self) -> Dict[str, str]:
        return dict(self._params or {})

    # Method

    def method(self, method: str) -> "RequestBuilder":
        self._method = method
        return self

    def get(self) -> "RequestBuilder":
        return self.method(HttpMethod.GET.value)

    def post(self) -> "RequestBuilder":
        return self.method(HttpMethod.POST.value)

    def head(self) -> "RequestBuilder":
        return self.method(HttpMethod.HEAD.value)

    def put(self) -> "RequestBuilder":
        return self.method(HttpMethod.PUT.value)

    def delete(self) -> "RequestBuilder":
        return self.method(HttpMethod.DELETE.value)

    def options(self) -> "RequestBuilder":
        return self.method(HttpMethod.OPTIONS.value)

    # Headers and params

    def add_header(self, key: str, value: str) -> "RequestBuilder":
        if self._headers is None:
            self._headers = {}
        self._headers[key] = value
        return self

    def add_headers(self, headers: Mapping[str, str]) -> "RequestBuilder":
        if self._headers is None:
            self._headers = {}
        self._headers.update(headers)
        return self

    def add_param(self, key: str, value: str) -> "RequestBuilder":
        if self._params is None:
            self._params = {}
        self._params[key] = value
        return self

    def add_params(self, params: Mapping[str, str]) -> "RequestBuilder":
        if self._params is None:
            self._params = {}
        self._params.update(params)
        return self

    # Body

    def set_body(self, body: str) -> "RequestBuilder":
        self._body = body
        return self

    def set_json_body(self, value: Any) -> "RequestBuilder":
        """Serialize ``value`` as the body.

        Raises EncodeError and keeps the previous body if ``value`` is not
        JSON serializable.
        """
        try:
            encoded = json.dumps(value, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise EncodeError(e) from e
        self._body = encoded
        return self

    def reset_body(self) -> "RequestBuilder":
        self._body = ""
        return self

    # Execution

    def build_options(self, url: str) -> RequestOptions:
        """Validate and assemble the next request.

        On success the pending headers and params are consumed. A rejected
        URL or method leaves the builder untouched.
        """
        validate_url(url)
        method = parse_method(self._method)

        headers, self._headers = self._headers or {}, None
        params, self._params = self._params or {}, None

        options = RequestOptions(method=method, url=url, headers=headers, params=params, body=self._body)
        logger.debug(f"{LOG_PREFIX} Assembled request: {options.describe()}")
        return options

    @asynccontextmanager
    async def fetch_body(self, url: str) -> AsyncIterator[httpx.Response]:
        """Issue the request and yield the response with its body unread.

        Usage::

            async with builder.fetch_body(url) as response:
                async for chunk in response.aiter_bytes():
                    ...

        The response is closed when the block exits.
        """
        options = self.build_options(url)
        async with self._transport.send(options) as response:
            yield response

    async def response_to_bytes(self, url: str) -> bytes:
        async with self.fetch_body(url) as response:
            return await response.aread()

    async def response_to_string(self, url: str) -> str:
        async with self.fetch_body(url) as response:
            await response.aread()
            return response.text

    async def response_get_json_field(self, url: str, *keys: str) -> bytes:
        """Return the raw bytes of the JSON value at ``keys``.

        Strings are returned without quotes, e.g. ``b"1.2.3.4"`` for
        ``{"origin": "1.2.3.4"}`` and key ``"origin"``.
        """
        data = await self.response_to_bytes(url)
        value, _ = get_json_field(data, *keys)
        return value

    async def response_to_struct(self, url: str, target: Type[T]) -> T:
        """Decode the whole JSON payload into ``target``."""
        data = await self.response_to_bytes(url)
        return _decode(target, data)

    async def response_field_to_struct(self, url: str, target: Type[T], *keys: str) -> T:
        """Decode the JSON value at ``keys`` into ``target``."""
        data = await self.response_to_bytes(url)
        return _decode(target, get_json_raw(data, *keys))

    # Lifecycle

    async def aclose(self) -> None:
        """Release the connection pool if this builder created it.

        The builder stays usable; the pool is re-created on the next request.
        """
        if self._own_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> "RequestBuilder":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


def new() -> RequestBuilder:
    """Builder with default timeouts and a direct connection."""
    return RequestBuilder()


def new_with_options(
    connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS,
    response_header_timeout_ms: int = DEFAULT_RESPONSE_HEADER_TIMEOUT_MS,
    total_timeout_ms: int = DEFAULT_TOTAL_TIMEOUT_MS,
    proxy_url: str = "",
) -> RequestBuilder:
    """Builder with explicit timeouts and optional proxy.

    Raises ConstructionError if the proxy URL or a timeout is invalid.
    """
    config = build_config(
        connect_timeout_ms=connect_timeout_ms,
        response_header_timeout_ms=response_header_timeout_ms,
        total_timeout_ms=total_timeout_ms,
        proxy_url=proxy_url,
    )
    return RequestBuilder(config)
