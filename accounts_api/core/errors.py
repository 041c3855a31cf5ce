"""Application errors, each carrying the HTTP status it is reported with."""


class AppError(Exception):
    """Base for errors converted to the error envelope by the central handler."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class BadRequestError(AppError):
    """Missing or malformed input."""

    status_code = 400


class UnauthorizedError(AppError):
    """Missing, invalid or expired credentials or tokens."""

    status_code = 401


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Username or email already belongs to another account."""

    status_code = 409


class InternalError(AppError):
    status_code = 500


class ServiceUnavailableError(AppError):
    """A required external service is not configured or not reachable."""

    status_code = 503
