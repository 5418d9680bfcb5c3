"""Domain error taxonomy.

Every failure that reaches the HTTP layer is one of these. Each carries a
stable machine-readable ``kind`` and the status code it maps to, so clients
can tell "who are you" failures (no_credential, invalid_credential) apart
from "you may not do this" failures (insufficient_role).
"""

from typing import Any, Dict, Optional


class GrinfoodError(Exception):
    """Base class for all domain errors."""

    kind = "error"
    status_code = 500
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message, "kind": self.kind}
        if self.details:
            body["details"] = self.details
        return body


class NoCredential(GrinfoodError):
    kind = "no_credential"
    status_code = 403
    default_message = "No token provided"


class InvalidCredential(GrinfoodError):
    kind = "invalid_credential"
    status_code = 403
    default_message = "Invalid token"


class InsufficientRole(GrinfoodError):
    kind = "insufficient_role"
    status_code = 403
    default_message = "Insufficient rights"


class ValidationError(GrinfoodError):
    kind = "validation_error"
    status_code = 400
    default_message = "Invalid request data"


class NotFound(GrinfoodError):
    kind = "not_found"
    status_code = 404
    default_message = "Resource not found"


class InvalidTransition(GrinfoodError):
    kind = "invalid_transition"
    status_code = 400
    default_message = "Invalid status"


class CollaboratorFailure(GrinfoodError):
    """An external collaborator (identity provider, store, gateway, SMS, email) failed."""

    kind = "collaborator_failure"
    status_code = 500
    default_message = "Upstream service failure"


class PurgeIncomplete(CollaboratorFailure):
    """Identity was deleted but some dependent data could not be removed."""

    kind = "purge_incomplete"
    default_message = "Account deleted but some data could not be removed"
