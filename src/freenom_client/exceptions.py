"""
Exception classes for the Freenom client.

All exceptions inherit from FreenomError and carry a short error code,
a human-readable message and optional details.
"""

from typing import Optional


class FreenomError(Exception):
    """Base exception for all Freenom client errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(FreenomError):
    """Raised when an operation is called with invalid arguments."""

    pass


class TransportError(FreenomError):
    """Raised when an HTTP step still fails after the retry budget is spent."""

    pass


class ParseError(FreenomError):
    """Raised when a response lacks a required landmark or yields the wrong arity."""

    pass


class SessionInvalidError(FreenomError):
    """Raised when an operation needs a logged-in session and none exists."""

    pass


class DomainNotFoundError(FreenomError):
    """Raised when a domain is not owned by the account (after a refresh)."""

    pass


class RegistrarRejectedError(FreenomError):
    """Raised when the registrar answers with an error marker or no success marker."""

    pass


class NotImplementedFeatureError(FreenomError):
    """Raised by registrar features that cannot be automated."""

    pass
