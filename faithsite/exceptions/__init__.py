"""Custom exceptions for the Faith Interactive application."""


class AppError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv


class UnauthenticatedError(AppError):
    """No session, or the session no longer resolves to an active user."""
    def __init__(self, message="Authentication required"):
        super().__init__(message, 401)


class ForbiddenError(AppError):
    """Raised when a user lacks permission for an action."""
    def __init__(self, message="You do not have permission to perform this action"):
        super().__init__(message, 403)


class NotFoundError(AppError):
    """Exception raised when a resource is not found.

    Also raised for rows that exist in another church; callers must not be
    able to tell the two cases apart.
    """
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class ValidationFailedError(AppError):
    """Malformed input. ``errors`` maps field name to a list of messages."""
    def __init__(self, errors, message="Validation failed"):
        self.errors = dict(errors or {})
        super().__init__(message, 400, {'errors': self.errors})


class RateLimitedError(AppError):
    """Raised when a caller exceeds a rate limit; carries the limiter result."""
    def __init__(self, result, message="Too many requests. Please try again later."):
        super().__init__(message, 429)
        self.result = result


class AccountLockedError(AppError):
    """Too many recent failed logins for this account or address."""
    def __init__(self, message="Too many failed login attempts. Please try again later."):
        super().__init__(message, 429)


class TenantScopeError(TypeError):
    """Programming error: a tenant-scoped session was asked to touch data it cannot scope."""
