"""
Configuration models and validation for xhttp-client.
"""
import logging
import os
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from .errors import ConstructionError

logger = logging.getLogger(__name__)

# Constants (milliseconds)
DEFAULT_CONNECT_TIMEOUT_MS = 3000
DEFAULT_RESPONSE_HEADER_TIMEOUT_MS = 5000
DEFAULT_TOTAL_TIMEOUT_MS = 30000

PROXY_SCHEMES = ("http", "https", "socks5", "socks5h")
ENV_PREFIX = "XHTTP_"


class TimeoutConfig(BaseModel):
    """Timeout configuration, all values in milliseconds."""
    model_config = {"frozen": True}

    connect: int = Field(default=DEFAULT_CONNECT_TIMEOUT_MS, gt=0)
    response_header: int = Field(default=DEFAULT_RESPONSE_HEADER_TIMEOUT_MS, gt=0)
    total: int = Field(default=DEFAULT_TOTAL_TIMEOUT_MS, gt=0)

    def to_httpx(self) -> httpx.Timeout:
        """Map connect and response-header limits onto httpx.

        The total limit has no httpx counterpart and is enforced by the
        transport as a deadline around the whole exchange.
        """
        connect = self.connect / 1000
        return httpx.Timeout(
            connect=connect,
            read=self.response_header / 1000,
            write=None,
            pool=connect,
        )

    @property
    def total_seconds(self) -> float:
        return self.total / 1000


class ClientConfig(BaseModel):
    """Client configuration."""
    model_config = {"frozen": True}

    timeout: TimeoutConfig = Field(default_factory=TimeoutConfig)
    proxy_url: Optional[str] = None

    @field_validator("proxy_url")
    @classmethod
    def validate_proxy_url(cls, v: Optional[str]) -> Optional[str]:
        # Empty means direct connection
        if not v:
            return None
        try:
            url = httpx.URL(v)
        except httpx.InvalidURL as e:
            raise ValueError(f"malformed proxy url {v!r}: {e}") from e
        if url.scheme not in PROXY_SCHEMES:
            raise ValueError(f"proxy url {v!r} must use one of {', '.join(PROXY_SCHEMES)}")
        if not url.host:
            raise ValueError(f"proxy url {v!r} has no host")
        return v


def build_config(
    connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS,
    response_header_timeout_ms: int = DEFAULT_RESPONSE_HEADER_TIMEOUT_MS,
    total_timeout_ms: int = DEFAULT_TOTAL_TIMEOUT_MS,
    proxy_url: Optional[str] = "",
) -> ClientConfig:
    """Validate raw construction parameters into a ClientConfig.

    Raises ConstructionError, since a builder cannot be used without a
    working transport.
    """
    try:
        return ClientConfig(
            timeout=TimeoutConfig(
                connect=connect_timeout_ms,
                response_header=response_header_timeout_ms,
                total=total_timeout_ms,
            ),
            proxy_url=proxy_url,
        )
    except PydanticValidationError as e:
        raise ConstructionError(_format_validation_error(e)) from e


def load_config_from_env(prefix: str = ENV_PREFIX, environ: Optional[Dict[str, str]] = None) -> ClientConfig:
    """Build a ClientConfig from environment variables.

    Reads ``{prefix}CONNECT_TIMEOUT_MS``, ``{prefix}RESPONSE_HEADER_TIMEOUT_MS``,
    ``{prefix}TOTAL_TIMEOUT_MS`` and ``{prefix}PROXY_URL``. Unset variables
    keep their defaults.
    """
    env = os.environ if environ is None else environ
    kwargs: Dict[str, Any] = {}

    names = {
        "connect_timeout_ms": "CONNECT_TIMEOUT_MS",
        "response_header_timeout_ms": "RESPONSE_HEADER_TIMEOUT_MS",
        "total_timeout_ms": "TOTAL_TIMEOUT_MS",
    }
    for arg, suffix in names.items():
        raw = env.get(prefix + suffix)
        if raw is None or raw.strip() == "":
            continue
        try:
            kwargs[arg] = int(raw)
        except ValueError as e:
            raise ConstructionError(f"{prefix}{suffix} must be an integer, got {raw!r}") from e

    proxy = env.get(prefix + "PROXY_URL")
    if proxy:
        kwargs["proxy_url"] = proxy

    logger.debug(f"Loaded config from env with prefix {prefix}: {sorted(kwargs)}")
    return build_config(**kwargs)


def _format_validation_error(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item.get("loc", ()))
        parts.append(f"{loc}: {item.get('msg')}" if loc else str(item.get("msg")))
    return "; ".join(parts)
