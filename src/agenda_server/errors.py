"""Exception taxonomy for agenda-server.

Errors raised inside a tool invocation are recoverable: the orchestrator turns
them into tool-result messages so the model can correct itself. Errors raised
by the completion service end the current turn with an apology. Registry
misuse errors are configuration errors and abort startup.
"""

from typing import Any


class AgendaError(Exception):
    """Base class for all agenda-server errors.

    Attributes:
        message: Human-readable description of the error
        details: Optional structured context for logging and API responses
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class AuthRequired(AgendaError):
    """No valid calendar credential exists and interactive auth did not complete."""


class BackendUnavailable(AgendaError):
    """The calendar backend could not be reached or did not answer in time."""


class InvalidEventData(AgendaError):
    """Event data rejected before reaching the backend."""


class DuplicateTool(AgendaError):
    """A tool with the same name is already registered."""


class UnknownTool(AgendaError):
    """No tool with the requested name is registered."""


class ArgumentValidationError(AgendaError):
    """A tool argument is missing or cannot be coerced to its declared type.

    Attributes:
        parameter: Name of the offending parameter
        reason: Why the value was rejected
    """

    def __init__(self, parameter: str, reason: str):
        self.parameter = parameter
        self.reason = reason
        super().__init__(
            f"Invalid value for parameter '{parameter}': {reason}",
            details={"parameter": parameter},
        )


class ModelUnavailable(AgendaError):
    """The completion service failed (network, quota, timeout)."""


class MalformedModelResponse(AgendaError):
    """The completion service answered with something that cannot be used."""
