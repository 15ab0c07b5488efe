"""Pydantic schemas exchanged over HTTP and the request body decoder."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Literal, Optional

from pydantic import (
    BaseModel,
    Field,
    StrictBool,
    StrictStr,
    ValidationError,
    field_validator,
    model_validator,
)


class PayloadError(ValueError):
    """Raised when the request body cannot be decoded into an :class:`EmailRequest`."""


class _WirePayload(BaseModel):
    """Base for request bodies: keys match field names case-insensitively."""

    @model_validator(mode="before")
    @classmethod
    def _fold_key_case(cls, data: Any) -> Any:
        # Case variants of a field name fill that field; a later key overwrites an earlier one
        if not isinstance(data, dict):
            return data
        by_lower = {name.lower(): name for name in cls.model_fields}
        folded: Dict[str, Any] = {}
        for key, value in data.items():
            name = key if key in cls.model_fields else by_lower.get(key.lower(), key)
            folded[name] = value
        return folded


class Attachment(_WirePayload):
    """Attachment description. Accepted for compatibility, never delivered."""
    filename: StrictStr = ""
    content: StrictStr = ""  # base64

    @field_validator("filename", "content", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class EmailRequest(_WirePayload):
    """Email description carried by ``POST /send``.

    JSON ``null`` stands for the empty value of a field: no recipients, empty
    subject or body, plain text.
    """
    to: List[StrictStr] = Field(default_factory=list)
    cc: Optional[List[StrictStr]] = None
    bcc: Optional[List[StrictStr]] = None
    subject: StrictStr = ""
    body: StrictStr = ""
    is_html: StrictBool = False
    attachments: Optional[List[Attachment]] = None
    headers: Optional[Dict[str, StrictStr]] = None
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("to", mode="before")
    @classmethod
    def _null_as_no_recipients(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("subject", "body", mode="before")
    @classmethod
    def _null_as_empty_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("is_html", mode="before")
    @classmethod
    def _null_as_plain_text(cls, value: Any) -> Any:
        return False if value is None else value

    @property
    def recipient_count(self) -> int:
        """Total number of addresses across To, Cc and Bcc."""
        return len(self.to) + len(self.cc or []) + len(self.bcc or [])


class SendMetadata(BaseModel):
    duration_ms: int
    recipients: int


class SendResponse(BaseModel):
    """Body returned when the relay accepted the message."""
    status: Literal["success"] = "success"
    message: str
    metadata: SendMetadata


class ErrorResponse(BaseModel):
    """Body returned when delivery failed."""
    status: Literal["error"] = "error"
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str


def decode_email_request(raw: bytes | str) -> EmailRequest:
    """Parse a JSON request body into an :class:`EmailRequest`.

    Repeated keys inside a JSON object keep their last value and a ``null``
    body decodes to an empty request. Recipient presence is not checked here;
    the mailer rejects an empty ``to`` list.

    Raises:
        PayloadError: if the body is not JSON or does not match the schema.
    """
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise PayloadError(f"malformed JSON: {exc}") from exc
    if data is None:
        data = {}
    try:
        return EmailRequest.model_validate(data)
    except ValidationError as exc:
        raise PayloadError(f"invalid email request: {exc.error_count()} validation error(s)") from exc
