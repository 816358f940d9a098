# server/core/errors.py

"""Error taxonomy of the service.

Stores, the authorization policy and the token verifier raise these; the
application turns them into ``{"error": message}`` responses carrying
``status_code``.
"""


class TaskApiError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingFields(TaskApiError):
    status_code = 422
    default_message = "Missing required fields."


class UsernameTaken(TaskApiError):
    status_code = 409
    default_message = "Username already taken."


class Unauthenticated(TaskApiError):
    status_code = 401
    default_message = "Unauthenticated"


class InvalidCredentials(Unauthenticated):
    default_message = "Invalid credentials"


class MissingToken(Unauthenticated):
    default_message = "Missing Authorization header"


class InvalidOrExpiredToken(Unauthenticated):
    default_message = "Invalid or expired token"


class Forbidden(TaskApiError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(TaskApiError):
    status_code = 404
    default_message = "Task not found"


class StorageError(TaskApiError):
    default_message = "Storage failure"
