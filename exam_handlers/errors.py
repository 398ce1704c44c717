from typing import Any, Optional


class HandlerError(Exception):
    """Base for failures that map onto the error envelope"""

    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Any = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code


class ValidationFailed(HandlerError):
    status_code = 400
    error_code = "VALIDATION"


class NotFound(HandlerError):
    status_code = 404
    error_code = "NOT_FOUND"


class InvalidReference(HandlerError):
    """A referenced row (option, question) does not exist"""

    status_code = 400
    error_code = "INVALID_REFERENCE"


class UpstreamFailure(HandlerError):
    status_code = 500
    error_code = "UPSTREAM_FAILURE"


class StoreFailure(HandlerError):
    status_code = 500
    error_code = "STORE_FAILURE"
