"""Unit tests for domain error to HTTP status mapping."""

import pytest

from app.api.http.errors import to_http_exception
from app.api.http.resumes import parse_version_index
from app.core.exceptions import ConflictError, NotFoundError, ValidationError


@pytest.mark.parametrize(
    "error, status_code",
    [
        (ValidationError("bad input"), 400),
        (NotFoundError("missing"), 404),
        (ConflictError("stale"), 409),
        (PermissionError("Access denied"), 403),
        (RuntimeError("boom"), 500),
    ],
)
def test_to_http_exception_status(error, status_code) -> None:
    assert to_http_exception(error).status_code == status_code


def test_to_http_exception_keeps_domain_message() -> None:
    assert to_http_exception(NotFoundError("Version not found")).detail == "Version not found"


def test_internal_error_message_is_hidden() -> None:
    assert to_http_exception(RuntimeError("db password leaked")).detail == "Internal server error"


@pytest.mark.parametrize("raw, expected", [("0", 0), ("9", 9), ("-1", -1), ("12", 12)])
def test_parse_version_index(raw, expected) -> None:
    assert parse_version_index(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "1.5", "", " 1", "1e2", "true", "0\n", "\u0661", "--1"])
def test_parse_version_index_rejects_non_integers(raw) -> None:
    with pytest.raises(ValidationError):
        parse_version_index(raw)
