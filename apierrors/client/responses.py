"""Decode HTTP error responses from API servers into structured errors."""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
import logging
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError
import requests

from apierrors.core.errors import DEFAULT_DETAIL_TYPES
from apierrors.core.errors import StructuredError

logger = logging.getLogger(__name__)


def error_from_response(
    response: requests.Response,
    detail_types: Sequence[type[BaseModel]] = DEFAULT_DETAIL_TYPES,
) -> StructuredError:
    """Build a structured error from a server response.

    The code is always the HTTP status. Message and details are only filled in
    when the JSON body carries them, either bare or wrapped in ``{"error": ...}``.
    """
    envelope = _error_envelope(response)
    if envelope is None:
        logger.debug("Response body is not an error payload status=%s", response.status_code)
        return StructuredError(response.status_code)

    try:
        return StructuredError.from_dict({**envelope, "code": response.status_code}, detail_types)
    except ValidationError:
        logger.debug("Malformed error payload status=%s", response.status_code, exc_info=True)
        message = envelope.get("message")
        return StructuredError(response.status_code, message if isinstance(message, str) else "")


def raise_for_error(
    response: requests.Response,
    detail_types: Sequence[type[BaseModel]] = DEFAULT_DETAIL_TYPES,
) -> requests.Response:
    """Raise the decoded structured error for 4xx/5xx responses, else return the response."""
    if response.status_code >= 400:
        raise error_from_response(response, detail_types)
    return response


def _error_envelope(response: requests.Response) -> Mapping[str, Any] | None:
    try:
        body = response.json()
    except ValueError:
        return None

    if not isinstance(body, Mapping):
        return None
    wrapped = body.get("error")
    if isinstance(wrapped, Mapping):
        body = wrapped
    if "message" not in body and "details" not in body:
        return None
    return body
