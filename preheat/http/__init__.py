"""Request spec decoding and body streaming."""

from .compression import CompressionState, GzipBodyStream, gzip_compress_body
from .exceptions import (
    BodyResolutionError,
    MalformedSpecError,
    RequestSpecError,
    UnsupportedMethodError,
)
from .methods import HTTPMethod
from .request import Request, to_http_request


__all__ = [
    "BodyResolutionError",
    "CompressionState",
    "GzipBodyStream",
    "HTTPMethod",
    "MalformedSpecError",
    "Request",
    "RequestSpecError",
    "UnsupportedMethodError",
    "gzip_compress_body",
    "to_http_request",
]
