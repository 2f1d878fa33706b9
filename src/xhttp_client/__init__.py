"""
xhttp-client - Fluent HTTP Client Builder
"""

__version__ = "0.1.0"

from .config import ClientConfig, TimeoutConfig, build_config, load_config_from_env
from .types import ErrorKind, HttpMethod, JsonType, RequestOptions
from .errors import (
    XHttpError,
    ConstructionError,
    ValidationError,
    InvalidURLError,
    InvalidMethodError,
    TransportError,
    TotalTimeoutError,
    HTTPStatusError,
    DecodeError,
    KeyPathNotFoundError,
    MalformedJSONError,
    StructDecodeError,
    EncodeError,
)
from .json_field import get_json_field, get_json_raw
from .core.transport import Transport
from .core.request import RequestBuilder, new, new_with_options

__all__ = [
    "ClientConfig", "TimeoutConfig", "build_config", "load_config_from_env",
    "ErrorKind", "HttpMethod", "JsonType", "RequestOptions",
    "XHttpError", "ConstructionError", "ValidationError", "InvalidURLError", "InvalidMethodError",
    "TransportError", "TotalTimeoutError", "HTTPStatusError",
    "DecodeError", "KeyPathNotFoundError", "MalformedJSONError", "StructDecodeError", "EncodeError",
    "get_json_field", "get_json_raw",
    "Transport",
    "RequestBuilder", "new", "new_with_options",
]
