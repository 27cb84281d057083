"""Error types for the coach module.

Generation errors are raised by the generation client and the plan synthesis
pipeline and are never retried or swallowed by those layers. The mode
coordinator is the only place that turns them into user-visible messages.
"""


class GenerationError(Exception):
    """Base exception for all failures of the remote generation path."""

    pass


class TransportError(GenerationError):
    """Raised when the generation service is unreachable or fails mid-exchange."""

    pass


class ServiceRejection(GenerationError):
    """Raised when the generation service declines to answer.

    Covers content-safety filtering and quota or rate refusals.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class EmptyResponse(GenerationError):
    """Raised when the generation service returned no payload."""

    pass


class SchemaViolation(GenerationError):
    """Raised when a payload is present but does not parse into the expected structure."""

    def __init__(self, message: str, payload: str | None = None):
        self.payload = payload
        super().__init__(message)


class CoordinatorBusyError(Exception):
    """Raised when a call is requested while the same kind of call is still in flight.

    This is the programmatic form of a disabled send button or submit button.
    """

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"A {operation} call is already in flight")
