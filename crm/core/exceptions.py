"""Domain and infrastructure exceptions mapped to HTTP responses by the handlers."""


class ApiError(Exception):
    """Expected, client-facing failure with a fixed HTTP status."""

    status_code: int = 400
    error: str = "Bad Request"
    default_message: str = "Bad request"

    def __init__(self, message: str | list[str] | None = None) -> None:
        self.message = message if message is not None else self.default_message
        super().__init__(self.message)


class InputValidationError(ApiError, ValueError):
    """Malformed or missing input fields."""

    status_code = 400
    error = "Bad Request"
    default_message = "Validation failed"


class UnauthorizedError(ApiError):
    """Missing, invalid or expired credentials."""

    status_code = 401
    error = "Unauthorized"
    default_message = "Unauthorized"


class InvalidCredentialsError(UnauthorizedError):
    """Login failed. Same message whether the user or the password was wrong."""

    default_message = "Invalid credentials"


class ForbiddenError(ApiError):
    """Authenticated, but the role is not allowed for the operation."""

    status_code = 403
    error = "Forbidden"
    default_message = "Forbidden resource"


class NotFoundError(ApiError):
    status_code = 404
    error = "Not Found"
    default_message = "Resource not found"

    def __init__(self, entity: str, entity_id: int) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with ID {entity_id} not found")


class ConflictError(ApiError):
    status_code = 409
    error = "Conflict"
    default_message = "Resource conflict"


class InfrastructureError(Exception):
    """
    Unexpected failure of a dependency (database, pool, migration script).

    Fatal during startup; a generic 500 at request time. Details are logged,
    never returned to the client.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(InfrastructureError):
    """A required setting (e.g. JWT_SECRET) is missing when it is needed."""


class ConstraintViolationError(InfrastructureError):
    """A write was rejected by a database constraint (e.g. a unique key)."""
