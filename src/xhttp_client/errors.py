from typing import Optional, Sequence

from .types import ErrorKind


class XHttpError(Exception):
    """Base exception for xhttp-client errors."""
    pass


class ConstructionError(XHttpError):
    """The builder cannot be created (bad proxy URL or timeouts)."""
    pass


class ValidationError(XHttpError):
    """Pre-flight rejection; raised before any network I/O."""

    kind: ErrorKind = ErrorKind.DEFAULT

    def __init__(self, detail: str = ""):
        msg = self.kind.message
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
        self.detail = detail


class InvalidURLError(ValidationError):
    kind = ErrorKind.INVALID_URL

    def __init__(self, url: str):
        super().__init__(repr(url))
        self.url = url


class InvalidMethodError(ValidationError):
    kind = ErrorKind.INVALID_METHOD

    def __init__(self, method: str):
        super().__init__(repr(method))
        self.method = method


class TransportError(XHttpError):
    def __init__(self, method: str, url: str, cause: Optional[BaseException] = None, message: str = ""):
        reason = message or (f"{type(cause).__name__}: {cause}" if cause is not None else "request failed")
        super().__init__(f"{method} {url} failed: {reason}")
        self.method = method
        self.url = url
        self.cause = cause


class TotalTimeoutError(TransportError):
    def __init__(self, method: str, url: str, timeout_ms: int):
        super().__init__(method, url, message=f"total timeout of {timeout_ms}ms exceeded")
        self.timeout_ms = timeout_ms


class HTTPStatusError(XHttpError):
    def __init__(self, status_code: int, reason: str, url: str):
        super().__init__(f"{status_code} {reason} for url {url}")
        self.status_code = status_code
        self.reason = reason
        self.url = url


class DecodeError(XHttpError):
    """Response payload could not be decoded."""
    pass


class KeyPathNotFoundError(DecodeError):
    def __init__(self, keys: Sequence[str]):
        super().__init__(f"key path not found: {list(keys)}")
        self.keys = tuple(keys)


class MalformedJSONError(DecodeError):
    def __init__(self, message: str, position: int):
        super().__init__(f"malformed JSON at offset {position}: {message}")
        self.position = position


class StructDecodeError(DecodeError):
    def __init__(self, target: object, cause: Exception):
        name = getattr(target, "__name__", repr(target))
        super().__init__(f"cannot decode payload into {name}: {cause}")
        self.target = target
        self.cause = cause


class EncodeError(XHttpError):
    """Request body could not be serialized to JSON."""

    def __init__(self, cause: Exception):
        super().__init__(f"cannot encode JSON body: {cause}")
        self.cause = cause
