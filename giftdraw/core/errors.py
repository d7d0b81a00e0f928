"""
Application error taxonomy.

Services raise these; the handler registered in main.py turns them into
JSON responses of the form {"detail": message} with the class status code.
"""


class AppError(Exception):
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthorizationError(AppError):
    """Caller is not allowed to perform the action (not owner / not member)."""
    status_code = 403


class PreconditionError(AppError):
    """Input or group state does not allow the action (blank input, too few members)."""
    status_code = 422


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Action clashes with current state (already member, already drawn, draw running)."""
    status_code = 409


class StoreError(AppError):
    """The backing row store failed. Never retried automatically."""
    status_code = 502
