"""
Core type definitions for xhttp-client.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping


class HttpMethod(str, Enum):
    """HTTP verbs a request may be issued with."""
    GET = "GET"
    POST = "POST"
    HEAD = "HEAD"
    PUT = "PUT"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"


class ErrorKind(str, Enum):
    DEFAULT = "default"
    INVALID_URL = "invalid_url"
    INVALID_METHOD = "invalid_method"

    @property
    def message(self) -> str:
        return _ERROR_MESSAGES[self]


_ERROR_MESSAGES = {
    ErrorKind.DEFAULT: "default error",
    ErrorKind.INVALID_URL: "invalid url, lost http/https?",
    ErrorKind.INVALID_METHOD: "invalid method",
}


class JsonType(str, Enum):
    """Type tag of a value located by a JSON key path."""
    STRING = "string"
    NUMBER = "number"
    OBJECT = "object"
    ARRAY = "array"
    BOOLEAN = "boolean"
    NULL = "null"


@dataclass(frozen=True)
class RequestOptions:
    """One fully assembled outbound request.

    Built by RequestBuilder at execution time; headers and params are
    private copies, so later builder mutations never reach a request
    that is already in flight.
    """
    method: HttpMethod
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, str] = field(default_factory=dict)
    body: str = ""

    @property
    def content(self) -> bytes:
        return self.body.encode("utf-8")

    def describe(self) -> Dict[str, object]:
        """Loggable summary; header and param values are left out."""
        return {
            "method": self.method.value,
            "url": self.url,
            "header_names": sorted(self.headers),
            "param_names": sorted(self.params),
            "body_size": len(self.content),
        }
