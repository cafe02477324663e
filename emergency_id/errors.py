"""
Error taxonomy for the API.

Every failure carries a machine-checkable ``code``, an HTTP status and a
human-readable message; ``create_app`` renders them with ``error_payload``.
"""
from __future__ import annotations


def error_payload(code: str, http: int, message: str, details=None):
    """Return a consistent JSON error payload with HTTP status."""
    payload = {"success": False, "code": code, "message": message}
    if details is not None:
        payload["details"] = details
    return payload, http


class EmergencyIdError(Exception):
    code = "error"
    http_status = 400
    message = "Request failed"

    def __init__(self, message: str | None = None, details=None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details

    def to_response(self):
        return error_payload(self.code, self.http_status, self.message, self.details)


class ValidationError(EmergencyIdError):
    code = "validation_error"
    message = "Invalid payload"


class WeakPassword(ValidationError):
    code = "weak_password"
    message = "Password does not meet the length requirements"


class DuplicateEmail(EmergencyIdError):
    code = "duplicate_email"
    message = "Email already exists"


class InvalidDoctorCode(EmergencyIdError):
    code = "invalid_doctor_code"
    http_status = 403
    message = "Invalid doctor code"


class InvalidCredentials(EmergencyIdError):
    code = "invalid_credentials"
    http_status = 401
    message = "Invalid email or password"


class AuthenticationRequired(EmergencyIdError):
    code = "authentication_required"
    http_status = 401
    message = "Authentication required"


class TokenExpired(EmergencyIdError):
    code = "token_expired"
    http_status = 401
    message = "Token has expired"


class TokenInvalid(EmergencyIdError):
    code = "token_invalid"
    http_status = 401
    message = "Invalid token"


class AuthorizationDenied(EmergencyIdError):
    code = "authorization_denied"
    http_status = 403
    message = "You do not have access to this resource"


class NotFound(EmergencyIdError):
    code = "not_found"
    http_status = 404
    message = "Not found"


class StoreUnavailable(EmergencyIdError):
    code = "store_unavailable"
    http_status = 503
    message = "Database unavailable, please retry later"
