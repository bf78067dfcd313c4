"""Domain errors.

Every failure a request can hit is one of these. Services raise them,
the exception handlers in main.py turn them into the error envelope.
None of them is retried and none of them is fatal to the process.
"""

from typing import Optional


class TaskboardError(Exception):
    """Base class, carries the HTTP status the error maps to."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: Optional[str] = None, headers: Optional[dict[str, str]] = None):
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)


class DuplicateEmailError(TaskboardError):
    status_code = 409
    default_message = "Email already registered"


class UserNotFoundError(TaskboardError):
    status_code = 404
    default_message = "User not found"


class InvalidCredentialsError(TaskboardError):
    status_code = 401
    default_message = "Invalid email or password"


class InvalidTokenError(TaskboardError):
    """Bad signature, malformed token and expiry all look the same to callers."""

    status_code = 401
    default_message = "Invalid or expired token"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class TaskNotFoundError(TaskboardError):
    status_code = 404
    default_message = "Task not found"


class UnauthorizedError(TaskboardError):
    """Acting user is authenticated but does not own the resource."""

    status_code = 403
    default_message = "You do not have permission to modify this task"
