"""Client-side error taxonomy. Every message is meant to be shown to the visitor."""


class ClientError(Exception):
    """Base class for failures reported by :class:`ReservationsClient`."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationFailed(ClientError):
    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message, 400)
        self.details = details or []


class NotFound(ClientError):
    pass


class RateLimited(ClientError):
    pass


class TransientServerError(ClientError):
    """5xx responses; the only failures the retry policy retries."""


class RequestTimeout(ClientError):
    pass


class ApiError(ClientError):
    pass


class FormLocked(Exception):
    """The form is submitting; edits are refused until the request settles."""


class InvalidTransition(Exception):
    pass
