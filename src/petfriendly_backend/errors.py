"""
Domain exceptions raised by the service layer.

Routers never build HTTP error responses for these by hand; the application
registers one handler per class (see ``main.py``) that maps it to a status code.
"""

from __future__ import annotations


class PetFriendlyError(Exception):
    """Base class for all domain errors."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(PetFriendlyError, LookupError):
    status_code = 404


class ValidationError(PetFriendlyError, ValueError):
    status_code = 400


class ConflictError(PetFriendlyError, RuntimeError):
    status_code = 409


class InvalidStateError(ConflictError):
    """An adoption request cannot move from its current status."""
