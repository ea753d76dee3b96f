from typing import Any


class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    error_code: str = 'error'

    def __init__(
        self, message: str, status_code: int = 500, *, context: dict[str, Any] | None = None
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.context: dict[str, Any] = context or {}
        super().__init__(message)


class DomainError(CustomBaseError):
    error_code = 'domain_error'

    def __init__(
        self, message: str, status_code: int = 400, *, context: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, status_code, context=context)


class NotFoundError(CustomBaseError):
    error_code = 'not_found'

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, 404, context=context)


class ConflictError(CustomBaseError):
    error_code = 'conflict'

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, 409, context=context)


class UpstreamError(CustomBaseError):
    """An external collaborator (payment provider, ...) refused or failed the request"""

    error_code = 'upstream_error'

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, 502, context=context)


class ServiceUnavailableError(CustomBaseError):
    error_code = 'service_unavailable'

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, 503, context=context)
