class ConfigError(RuntimeError):
    """Raised at startup when a required setting is missing."""


class ApiError(Exception):
    """Base for errors reported to the HTTP caller as {"error": message}."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(ApiError):
    status_code = 400
    message = "Invalid request"


class Unauthorized(ApiError):
    status_code = 401
    message = "Unauthorized"


class InvalidToken(Unauthorized):
    message = "Invalid token"


class Forbidden(ApiError):
    status_code = 403
    message = "Forbidden"


class NotFound(ApiError):
    status_code = 404
    message = "Not found"


class Conflict(ApiError):
    status_code = 409
    message = "Conflict"


class InternalError(ApiError):
    status_code = 500


class TokenIssueError(InternalError):
    message = "Error while generating token"
