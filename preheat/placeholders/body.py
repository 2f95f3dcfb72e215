"""Resolve request bodies that are either inlined or read from a file."""

from pathlib import Path

from preheat.core.logging import get_logger


logger = get_logger(__name__)

FILE_PREFIX = "file:"


def get_body_from_file_or_inlined(segment: str) -> str:
    """Return the body text for a body segment.

    A segment starting with ``file:`` names a file whose contents become the
    body. Anything else is the body itself.

    Raises:
        OSError: If the referenced file cannot be read
        ValueError: If the file is not valid UTF-8
    """
    if not segment.startswith(FILE_PREFIX):
        return segment

    path = Path(segment[len(FILE_PREFIX) :]).expanduser()
    body = path.read_text(encoding="utf-8")
    logger.debug("body_read_from_file", path=str(path), size=len(body))
    return body
