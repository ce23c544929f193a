"""
Domain errors raised by services and repositories

Each error carries the HTTP status it maps to; main.py registers a
handler that turns them into {"detail": message} responses.
"""


class StorefrontError(Exception):
    """Base class for business-rule failures"""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StorefrontError):
    status_code = 400


class NotFoundError(StorefrontError):
    status_code = 404


class PermissionDeniedError(StorefrontError):
    status_code = 403


class ConflictError(StorefrontError):
    status_code = 409
