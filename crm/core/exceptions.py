class CRMException(Exception):
    """Base exception for the CRM API"""

    error = "error"
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationException(CRMException):
    """Raised for malformed input and business rule violations"""

    error = "validation_error"
    status_code = 400


class UnauthorizedException(CRMException):
    """Raised when credentials or the bearer token are invalid"""

    error = "unauthorized"
    status_code = 401


class ForbiddenException(CRMException):
    """Raised when a valid identity lacks permission for the operation"""

    error = "forbidden"
    status_code = 403


class NotFoundException(CRMException):
    """
    Raised when a resource is absent or belongs to another tenant.

    Both cases produce the same message so that callers cannot probe
    for rows owned by other tenants.
    """

    error = "not_found"
    status_code = 404


class ConflictException(CRMException):
    """Raised on uniqueness violations (subdomain, e-mail)"""

    error = "conflict"
    status_code = 409
