"""Decoding of compact request specs into requests ready to be sent.

A request spec has the form ``<method>:<path>[:body]``. The body is either
inlined or read from a file when it starts with ``file:``::

    get:/ping
    post:/db:{"db": "true"}
    post:/db:file:/tmp/body.json
"""

import io
from collections.abc import Callable
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from preheat.core.logging import get_logger
from preheat.placeholders import (
    get_body_from_file_or_inlined,
    interpolate_placeholders,
)

from .compression import GzipBodyStream, gzip_compress_body
from .exceptions import BodyResolutionError, MalformedSpecError, UnsupportedMethodError
from .methods import HTTPMethod


logger = get_logger(__name__)

PlaceholderExpander = Callable[[str], str]
BodyResolver = Callable[[str], str]


class Request(BaseModel):
    """A decoded HTTP request with an optional streamed body."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    method: Annotated[HTTPMethod, Field(description="HTTP method")]
    path: Annotated[str, Field(description="Request path after interpolation")]
    body: Annotated[
        io.IOBase | None,
        Field(description="Readable binary body stream, None when there is no body"),
    ] = None

    @property
    def is_compressed(self) -> bool:
        return isinstance(self.body, GzipBodyStream)

    def __repr__(self) -> str:
        return (
            f"Request(method={self.method.value!r}, path={self.path!r}, "
            f"has_body={self.body is not None}, compressed={self.is_compressed})"
        )


def to_http_request(
    spec: str,
    gzip_compression: bool = False,
    *,
    expand: PlaceholderExpander = interpolate_placeholders,
    resolve_body: BodyResolver = get_body_from_file_or_inlined,
) -> Request:
    """Decode a request spec into a :class:`Request`.

    Args:
        spec: Request spec in ``<method>:<path>[:body]`` format
        gzip_compression: Stream the body through gzip compression
        expand: Placeholder expander applied to the path and the body
        resolve_body: Turns the body segment into body text

    Returns:
        The decoded request

    Raises:
        MalformedSpecError: If the spec has no path segment
        UnsupportedMethodError: If the method is not an allowed HTTP verb
        BodyResolutionError: If the body segment cannot be resolved
    """
    parts = spec.split(":", 2)
    if len(parts) < 2:
        raise MalformedSpecError(spec)

    method_name = parts[0].upper()
    if not HTTPMethod.is_allowed(method_name):
        raise UnsupportedMethodError(spec, method_name)
    method = HTTPMethod.parse(method_name)

    path = expand(parts[1])

    # <method>:<path>
    if len(parts) == 2:
        logger.debug(
            "request_decoded", method=method.value, path=path, has_body=False
        )
        return Request(method=method, path=path)

    segment = parts[2]
    try:
        raw_body = resolve_body(segment)
    except (OSError, ValueError) as e:
        raise BodyResolutionError(spec, segment) from e
    body_text = expand(raw_body)
    try:
        body_bytes = body_text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise BodyResolutionError(spec, segment) from e

    body: io.IOBase
    if gzip_compression:
        body = gzip_compress_body(body_text)
    else:
        body = io.BytesIO(body_bytes)

    logger.debug(
        "request_decoded",
        method=method.value,
        path=path,
        has_body=True,
        gzip=gzip_compression,
    )
    return Request(method=method, path=path, body=body)
