"""Structured API error value, its equivalence rules and chain matching."""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
import dataclasses
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError

from apierrors.schemas.error import ErrorDetail
from apierrors.schemas.error import ErrorObject

DEFAULT_DETAIL_TYPES: tuple[type[BaseModel], ...] = (ErrorDetail,)


class StructuredError(Exception):
    """Error response from an API: status code, message and detail records.

    ``code`` is always populated. ``message`` is empty unless the producer set
    one. ``details`` keeps every record in insertion order; only
    :class:`ErrorDetail` entries take part in :meth:`equivalent_to`, the rest
    are carried along for display and encoding.
    """

    def __init__(
        self,
        code: int,
        message: str = "",
        details: Iterable[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details: list[Any] = list(details) if details is not None else []

    def with_details(self, *details: Any) -> None:
        """Append detail records after the existing ones."""
        self.details.extend(details)

    def equivalent_to(self, target: object) -> bool:
        """Report whether ``target`` is the same kind of error.

        Codes and detail counts must agree. Beyond that, each ErrorDetail in
        ``target`` whose reason appears among this error's ErrorDetail records
        counts as one match, and the errors are equivalent when the match
        count equals the number of ErrorDetail records held here. Messages are
        never compared. The count is not deduplicated, so repeated reasons on
        either side can tip the result.
        """
        if not isinstance(target, StructuredError):
            return False
        if self.code != target.code or len(self.details) != len(target.details):
            return False
        if not self.details:
            return True

        reasons = [detail.reason for detail in self.details if isinstance(detail, ErrorDetail)]
        known = set(reasons)
        matched = sum(
            1 for detail in target.details if isinstance(detail, ErrorDetail) and detail.reason in known
        )
        return matched == len(reasons)

    def error(self) -> str:
        """Render the diagnostic string used by ``str()``; not meant to be parsed."""
        return f"error: code = {self.code} desc = {self.message} details = {self.details!r}"

    def __str__(self) -> str:
        return self.error()

    def __repr__(self) -> str:
        return f"StructuredError(code={self.code!r}, message={self.message!r}, details={self.details!r})"

    def to_dict(self) -> dict[str, Any]:
        """Encode as a keyed mapping with ``code``, ``message`` and ``details``."""
        return {
            "code": self.code,
            "message": self.message,
            "details": [_encode_detail(detail) for detail in self.details],
        }

    @classmethod
    def from_dict(
        cls,
        payload: Mapping[str, Any],
        detail_types: Sequence[type[BaseModel]] = DEFAULT_DETAIL_TYPES,
    ) -> StructuredError:
        """Decode a keyed payload, typing detail entries against ``detail_types``.

        Mapping entries are validated against each detail type in order and
        the first that fits wins; anything else is kept as raw data. Raises
        ``pydantic.ValidationError`` when ``code`` is missing or not an integer.
        """
        decoded = ErrorObject.model_validate(payload)
        return cls(
            decoded.code,
            decoded.message,
            [_decode_detail(item, detail_types) for item in decoded.details],
        )


def new(code: int, message: str, *details: Any) -> StructuredError:
    """Build an error from ``code``, a literal ``message`` and initial details."""
    return StructuredError(code, message, details)


def newf(code: int, template: str, *args: Any) -> StructuredError:
    """Build an error whose message is ``template % args``, with no details."""
    return new(code, format_message(template, *args))


def format_message(template: str, *args: Any) -> str:
    """Apply printf-style formatting without ever raising.

    A template that does not agree with its arguments comes back verbatim,
    followed by a ``%!(BADFORMAT ...)`` marker listing the arguments. This
    covers out-of-range values and arguments whose ``__str__`` or ``__repr__``
    fail.
    """
    try:
        return template % args
    except Exception:
        rendered = ", ".join(_safe_repr(arg) for arg in args)
        return f"{template}%!(BADFORMAT {rendered})"


def _safe_repr(value: Any) -> str:
    try:
        return repr(value)
    except Exception:
        return f"<unprintable {type(value).__name__}>"


def is_error(err: BaseException | None, target: BaseException) -> bool:
    """Report whether any error in ``err``'s chain matches ``target``.

    Links are visited depth-first: the error itself, the members of an
    exception group, then ``__cause__`` or, unless suppressed,
    ``__context__``. A link matches when it is ``target`` or when its
    ``equivalent_to`` hook accepts ``target``.
    """
    pending: list[BaseException] = [err] if err is not None else []
    seen: set[int] = set()
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))

        if current is target:
            return True
        hook = getattr(current, "equivalent_to", None)
        if callable(hook) and hook(target):
            return True

        linked = current.__cause__
        if linked is None and not current.__suppress_context__:
            linked = current.__context__
        if linked is not None:
            pending.append(linked)
        if isinstance(current, BaseExceptionGroup):
            pending.extend(reversed(current.exceptions))
    return False


def _encode_detail(detail: Any) -> Any:
    if isinstance(detail, BaseModel):
        return detail.model_dump()
    if dataclasses.is_dataclass(detail) and not isinstance(detail, type):
        return dataclasses.asdict(detail)
    return detail


def _decode_detail(item: Any, detail_types: Sequence[type[BaseModel]]) -> Any:
    if not isinstance(item, Mapping):
        return item
    for detail_type in detail_types:
        try:
            return detail_type.model_validate(item)
        except ValidationError:
            continue
    return item
