from typing import Optional


class TodoError(Exception):
    """Base class for failures reported by the task service."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class InvalidTodoError(TodoError):
    """Raised when a request carries empty text or nothing to update."""

    status_code = 400
    code = "validation_error"


class TodoNotFoundError(TodoError):
    status_code = 404
    code = "not_found"


class ServiceUnavailableError(TodoError):
    """Raised before any query when the store is known to be unreachable."""

    status_code = 503
    code = "service_unavailable"


class InternalError(TodoError):
    status_code = 500
    code = "internal_error"


class StoreError(Exception):
    """Opaque store fault; callers cannot tell connectivity from constraint errors."""

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
