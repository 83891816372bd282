"""
Error taxonomy. Every error carries a machine-readable ``code`` and the HTTP
status it maps to; handlers in ``main.py`` turn them into ``{"error": code}``.
"""


class AppError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, code: str | None = None):
        if code is not None:
            self.code = code
        super().__init__(self.code)


class ValidationError(AppError):
    status_code = 400
    code = "invalid_request"


class ConflictError(AppError):
    status_code = 409
    code = "conflict"


class UnauthorizedError(AppError):
    status_code = 401
    code = "unauthorized"


class NotFoundError(AppError):
    """Resource absent or owned by someone else; callers cannot tell which."""

    status_code = 404
    code = "not_found"


class InternalError(AppError):
    status_code = 500
    code = "internal_error"


# ── Named errors ────────────────────────────────────────

class UsernameRequired(ValidationError):
    code = "username_required"


class UsernameLength(ValidationError):
    code = "username_length"


class PasswordLength(ValidationError):
    code = "password_length"


class UsernameTaken(ConflictError):
    code = "username_taken"


class InvalidCredentials(UnauthorizedError):
    code = "invalid_credentials"


class TitleRequired(ValidationError):
    code = "title_required"


class TitleLength(ValidationError):
    code = "title_length"


class DateRange(ValidationError):
    code = "date_range"
