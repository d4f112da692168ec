"""Wire shapes for structured API error payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator


class ErrorDetail(BaseModel):
    """Typed error reason and human-readable description from the API frontend."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    reason: str
    message: str = ""


class ErrorObject(BaseModel):
    """Keyed encoding of a structured error: code, message and detail records."""

    code: int
    message: str = ""
    details: list[Any] = Field(default_factory=list)

    @field_validator("message", mode="before")
    @classmethod
    def _null_message_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("details", mode="before")
    @classmethod
    def _null_details_are_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class ErrorResponse(BaseModel):
    """Top-level API error response envelope."""

    error: ErrorObject
