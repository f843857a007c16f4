"""
Error taxonomy for the API.

Each error knows its HTTP status and the message shown to the caller.
Handlers in main.py render them as {"success": false, "message": ...}.
"""


class AppError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class AuthenticationError(AppError):
    """No bearer token on a protected route."""
    status_code = 401
    message = "Authentication required"


class ForbiddenError(AppError):
    """Token present but its signature or expiry check failed."""
    status_code = 403
    message = "Invalid or expired token"


class InvalidCredentialsError(AppError):
    status_code = 401
    message = "Invalid email or password"


class NotFoundError(AppError):
    # Also used for rows owned by someone else so existence never leaks
    status_code = 404
    message = "Expense not found"


class ConflictError(AppError):
    status_code = 409
    message = "Email is already registered"
