from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError


class InvalidInputError(ValidationError):
    """Rejected input, keyed by the offending field name."""

    def __init__(self, field, message):
        self.field = field
        super().__init__({field: [message]})


class NotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class ConflictError(APIException):
    """
    The operation collided with the current state of the record.
    Callers may re-read the record and retry.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The record was changed by another request. Reload and retry."
    default_code = "conflict"


class AlreadyOnLoanError(ConflictError):
    default_detail = "Loan car is already on loan."
    default_code = "already_on_loan"


class InvalidStateError(ConflictError):
    default_detail = "Operation not allowed in the current state."
    default_code = "invalid_state"
