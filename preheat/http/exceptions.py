"""Exceptions raised while decoding request specs."""

EXPECTED_FORMAT = "<http-method>:<path>[:body]"


class RequestSpecError(ValueError):
    """Base exception for all request spec errors."""

    def __init__(self, message: str, spec: str) -> None:
        super().__init__(message)
        self.spec = spec


class MalformedSpecError(RequestSpecError):
    """Raised when a spec does not have at least a method and a path."""

    def __init__(self, spec: str) -> None:
        super().__init__(
            f"invalid request flag: {spec}, expected format {EXPECTED_FORMAT}",
            spec,
        )


class UnsupportedMethodError(RequestSpecError):
    """Raised when the method of a spec is not an allowed HTTP verb."""

    def __init__(self, spec: str, method: str) -> None:
        super().__init__(
            f"invalid request flag: {spec}, method {method} is not supported",
            spec,
        )
        self.method = method


class BodyResolutionError(RequestSpecError):
    """Raised when the body segment cannot be turned into body text."""

    def __init__(self, spec: str, segment: str) -> None:
        super().__init__(f"unable to parse body for request: {segment}", spec)
        self.segment = segment
