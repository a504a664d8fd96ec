"""
Typed workflow errors raised by the service layer.

Every error carries a stable ``kind``; the HTTP status is derived from the kind
alone so views never pick status codes by hand.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class WorkflowError(APIException):
    kind = "error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be processed."
    default_code = "error"

    def __init__(self, detail=None, *, errors=None, warnings=None):
        super().__init__(detail=detail or self.default_detail, code=self.kind)
        self.errors = errors or {}
        self.warnings = warnings or []


class ValidationFailed(WorkflowError):
    kind = "validation"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."


class PreconditionFailed(WorkflowError):
    kind = "precondition"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "The record is not in a state that allows this action."


class ConfirmationRequired(WorkflowError):
    """Soft validation: the caller must resend with an explicit confirmation."""
    kind = "confirmation_required"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Some values need confirmation before they can be saved."


class NotFound(WorkflowError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."


class Forbidden(WorkflowError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action."


class Conflict(WorkflowError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The record was changed by another request."


STATUS_BY_KIND = {
    cls.kind: cls.status_code
    for cls in (ValidationFailed, PreconditionFailed, ConfirmationRequired, NotFound, Forbidden, Conflict)
}
