"""
API error types.

Services raise these; the handlers registered in create_app() turn them into
the standard error envelope:

    {"success": false, "error": {"code": "...", "message": "..."}}
"""


class ApiError(Exception):
    status_code = 500
    code = 'INTERNAL_SERVER_ERROR'

    def __init__(self, message, code=None, details=None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = details

    def to_dict(self):
        error = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return error


class BadRequest(ApiError):
    status_code = 400
    code = 'BAD_REQUEST'


class Unauthorized(ApiError):
    status_code = 401
    code = 'UNAUTHORIZED'


class PaymentRequired(ApiError):
    status_code = 402
    code = 'INSUFFICIENT_CREDITS'


class Forbidden(ApiError):
    status_code = 403
    code = 'FORBIDDEN'


class NotFound(ApiError):
    status_code = 404
    code = 'NOT_FOUND'


class Conflict(ApiError):
    status_code = 409
    code = 'CONFLICT'


class ServiceNotConfigured(ApiError):
    status_code = 500
    code = 'SERVICE_NOT_CONFIGURED'


class ServiceUnavailable(ApiError):
    status_code = 503
    code = 'SERVICE_UNAVAILABLE'
