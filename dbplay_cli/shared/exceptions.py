"""Project-wide custom exceptions."""

from __future__ import annotations


class PlaygroundError(Exception):
    """Base exception for the database playground."""


class ConfigurationError(PlaygroundError):
    """Raised when configuration loading or validation fails."""


class DomainFailure(PlaygroundError):
    """Raised when a query is not recognised or a key is missing.

    The message is shown to the user verbatim, so it must never carry
    tracebacks or internal details.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransportFailure(PlaygroundError):
    """Raised when the remote query service cannot be reached or answers garbage."""
