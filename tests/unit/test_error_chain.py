"""Unit tests for matching structured errors through exception chains."""

from __future__ import annotations

from apierrors.core.errors import is_error
from apierrors.core.errors import new
from apierrors.schemas.error import ErrorDetail


def test_matches_the_error_itself() -> None:
    err = new(404, "pipeline missing")

    assert is_error(err, new(404, "other message"))
    assert is_error(err, err)


def test_matches_explicit_cause() -> None:
    cause = new(409, "conflict", ErrorDetail(reason="already_processed"))
    try:
        try:
            raise cause
        except Exception as exc:
            raise RuntimeError("processing failed") from exc
    except RuntimeError as wrapped:
        err = wrapped

    assert is_error(err, new(409, "", ErrorDetail(reason="already_processed", message="differs")))
    assert not is_error(err, new(409, "", ErrorDetail(reason="other")))


def test_matches_implicit_context_unless_suppressed() -> None:
    try:
        try:
            raise new(503, "unavailable")
        except Exception:
            raise KeyError("lookup")
    except KeyError as exc:
        implicit = exc

    try:
        try:
            raise new(503, "unavailable")
        except Exception:
            raise KeyError("lookup") from None
    except KeyError as exc:
        suppressed = exc

    assert is_error(implicit, new(503, ""))
    assert not is_error(suppressed, new(503, ""))


def test_matches_members_of_exception_groups() -> None:
    group = ExceptionGroup("batch failed", [ValueError("bad"), new(429, "slow down")])

    assert is_error(group, new(429, ""))
    assert not is_error(group, new(500, ""))


def test_plain_exceptions_only_match_by_identity() -> None:
    err = ValueError("bad")

    assert is_error(err, err)
    assert not is_error(err, ValueError("bad"))
    assert not is_error(None, err)
