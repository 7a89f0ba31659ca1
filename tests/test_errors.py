import json

import pytest

from provisioning_cli import errors
from provisioning_cli.models import ErrorResponse


def _body(**obj) -> bytes:
    return json.dumps(obj).encode("utf-8")


@pytest.mark.parametrize(
    ("status", "cls"),
    [
        (400, errors.BadRequest),
        (401, errors.Unauthorized),
        (402, errors.PaymentRequired),
        (403, errors.Forbidden),
        (404, errors.NotFound),
        (406, errors.NotAcceptable),
        (409, errors.Conflict),
    ],
)
def test_error_for_status_maps_documented_statuses(status: int, cls: type[errors.ApiError]):
    err = errors.error_for_status(status, _body(code=status, message="nope"))
    assert type(err) is cls
    assert err.status == status
    assert err.error == ErrorResponse(code=status, message="nope")


@pytest.mark.parametrize("status", [405, 418, 500, 503])
def test_error_for_status_falls_back_to_undocumented(status: int):
    err = errors.error_for_status(status, _body(code=status, message="boom", debugInfo="trace", errorCode=-1))
    assert type(err) is errors.Undocumented
    assert err.status == status
    assert err.error is not None
    assert err.error.debug_info == "trace"
    assert err.error.error_code == -1
    assert "status=" + str(status) in str(err)


def test_error_for_status_rejects_undecodable_body():
    with pytest.raises(errors.TransportFailure) as excinfo:
        errors.error_for_status(500, b"<html>gateway</html>")
    assert "status=500" in str(excinfo.value)


def test_error_for_status_rejects_body_without_message():
    with pytest.raises(errors.TransportFailure):
        errors.error_for_status(404, _body(code=404))


def test_unauthorized_without_body_has_default_status():
    err = errors.Unauthorized(None)
    assert err.error is None
    assert err.status == 401
    assert str(err) == "unauthorized (status=401)"


def test_api_errors_share_the_base_class():
    err = errors.Conflict(ErrorResponse(code=409, message="exists"))
    assert isinstance(err, errors.ApiError)
    assert isinstance(err, errors.DcProvError)
    assert str(err) == "conflict (status=409): exists"
