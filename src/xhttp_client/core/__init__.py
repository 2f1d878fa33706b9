from .request import RequestBuilder
from .transport import Transport

__all__ = ["RequestBuilder", "Transport"]
