"""Error kinds raised by the projection engine and the validator lookup."""


class StakeSimError(Exception):
    """Base class for all stakesim errors."""

    code = "stakesim_error"


class InvalidInput(StakeSimError, ValueError):
    """Configuration is non-finite, mistyped or out of domain."""

    code = "invalid_input"


class OutOfRange(StakeSimError, ValueError):
    """Derived interval count exceeds the configured ceiling."""

    code = "out_of_range"


class UpstreamUnavailable(StakeSimError):
    """Validator lookup failed: timeout, non-success status or malformed payload."""

    code = "upstream_unavailable"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
