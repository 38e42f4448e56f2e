"""Service-level errors mapped to HTTP responses by the API layer."""


class ServiceError(Exception):
    """Base error carrying an HTTP status code and optional response fields."""

    status_code = 500

    def __init__(self, message: str, /, **extra: object) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_payload(self) -> dict[str, object]:
        return {"error": self.message, **self.extra}


class InvalidRequestError(ServiceError):
    status_code = 400


class InsufficientCreditsError(ServiceError):
    status_code = 402


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409
