"""Error taxonomy for command building and execution."""

from __future__ import annotations


class GatewayError(Exception):
    """Base error for gateway failures."""


class ValidationError(GatewayError, ValueError):
    """Caller supplied a malformed or out-of-range value."""


class UnknownTypeError(GatewayError, LookupError):
    """Requested server type is not registered."""

    def __init__(self, server_type: str) -> None:
        super().__init__(f"Invalid server type specified: {server_type!r}")
        self.server_type = server_type


class BuildError(GatewayError):
    """A template and its placeholder values do not line up (internal defect)."""


class SpawnError(GatewayError):
    """The runtime binary could not be started."""


class ExecutionFailure(GatewayError):
    """The runtime ran to completion but reported failure."""

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class CommandTimeoutError(GatewayError, TimeoutError):
    """The runtime exceeded its wall-clock budget and was killed."""
