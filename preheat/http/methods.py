"""HTTP methods accepted in request specs."""

from enum import Enum


class HTTPMethod(str, Enum):
    """HTTP verbs a request spec may use."""

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    CONNECT = "CONNECT"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def is_allowed(cls, name: str) -> bool:
        """Return True when ``name`` (any case) is one of the allowed verbs."""
        return name.upper() in cls.__members__

    @classmethod
    def parse(cls, name: str) -> "HTTPMethod":
        """Case-insensitive lookup.

        Raises:
            ValueError: If ``name`` is not an allowed verb
        """
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unsupported HTTP method: {name}") from None
