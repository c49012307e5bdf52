"""Domain error taxonomy shared by services and the REST surface."""

from typing import Optional


class DomainError(Exception):
    """Base class for expected, client-attributable failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgumentError(DomainError, ValueError):
    """Malformed or disallowed input (HTTP 400)."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(DomainError, ValueError):
    """A referenced entity does not exist (HTTP 404)."""


class UnauthorizedError(DomainError):
    """Caller is unauthenticated or not permitted (HTTP 401)."""
