from __future__ import annotations

import json

from .models import ErrorResponse


class DcProvError(Exception):
    """Base class for every failure dcprov reports to the user."""


class TransportFailure(DcProvError):
    """Raised when the HTTP exchange itself fails or a body cannot be decoded."""


class InvalidUrl(DcProvError):
    """Raised when the endpoint URL cannot be parsed."""


class InvalidAccount(DcProvError):
    """Raised when no stored credential exists for an endpoint."""


class CredentialStorageFailed(DcProvError):
    """Raised when the secret store rejects a write."""


class CredentialDeletionFailed(DcProvError):
    """Raised when the secret store rejects a delete."""


class InputError(DcProvError):
    """Raised when local input (prompt or file) cannot be read."""


class OtherError(DcProvError):
    """Raised for failures that fit no other category."""


class ApiError(DcProvError):
    """Non-success response from the provisioning API.

    Attributes:
        status: HTTP status code
        error: decoded error body (None only for the token pre-check)
    """

    label = "API error"
    default_status = 0

    def __init__(self, error: ErrorResponse | None, *, status: int | None = None):
        self.error = error
        self.status = self.default_status if status is None else int(status)
        msg = f"{self.label} (status={self.status})"
        if error is not None:
            msg += f": {error.message}"
        super().__init__(msg)


class BadRequest(ApiError):
    label = "bad request"
    default_status = 400


class Unauthorized(ApiError):
    label = "unauthorized"
    default_status = 401


class PaymentRequired(ApiError):
    label = "payment required"
    default_status = 402


class Forbidden(ApiError):
    label = "forbidden"
    default_status = 403


class NotFound(ApiError):
    label = "not found"
    default_status = 404


class NotAcceptable(ApiError):
    label = "not acceptable"
    default_status = 406


class Conflict(ApiError):
    label = "conflict"
    default_status = 409


class Undocumented(ApiError):
    label = "undocumented error"


_STATUS_ERRORS: dict[int, type[ApiError]] = {
    400: BadRequest,
    401: Unauthorized,
    402: PaymentRequired,
    403: Forbidden,
    404: NotFound,
    406: NotAcceptable,
    409: Conflict,
}


def decode_error_body(raw: bytes, *, status: int) -> ErrorResponse:
    text = raw.decode("utf-8", errors="replace")
    try:
        return ErrorResponse.from_dict(json.loads(text))
    except ValueError as e:
        # json.JSONDecodeError is a ValueError subclass
        raise TransportFailure(f"undecodable error body (status={status}): {e}; body={text}") from e


def error_for_status(status: int, raw: bytes) -> ApiError:
    """Map a non-success status and its body to the matching ApiError.

    Raises TransportFailure when the body is not a standard error response.
    """
    error = decode_error_body(raw, status=status)
    cls = _STATUS_ERRORS.get(int(status), Undocumented)
    return cls(error, status=status)
