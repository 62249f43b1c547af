"""
Domain errors raised by the data-governance services.

Every error is a recoverable outcome reported to the caller; the API layer
maps each one to an HTTP status through ``status_code``.
"""
from typing import Optional

from fastapi import HTTPException


class GovernanceError(Exception):
    """Base class for all governance failures"""

    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_http(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.message)


class NotFoundError(GovernanceError):
    """Entity or token is absent"""
    status_code = 404
    default_message = "Not found"


class ExpiredError(GovernanceError):
    """Time-based invalidity"""
    status_code = 410
    default_message = "Invitation expired"


class AlreadyProcessedError(GovernanceError):
    """Terminal state already reached"""
    status_code = 410
    default_message = "Invitation already processed"


class ConflictError(GovernanceError):
    """Duplicate identity"""
    status_code = 409
    default_message = "User already exists"


class ForbiddenError(GovernanceError):
    """Authorization failure"""
    status_code = 403
    default_message = "Insufficient permissions"


class InvalidPolicyError(GovernanceError):
    """Bad retention configuration values"""
    status_code = 422
    default_message = "Retention values must be positive integers"
