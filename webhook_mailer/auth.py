"""Webhook token authentication."""

from __future__ import annotations

import secrets
from typing import Optional

from fastapi.security import APIKeyHeader

AUTH_HEADER_NAME = "Authorization"
BEARER_PREFIX = "Bearer "

# Read the raw header; missing values are reported as 401 by the handler
authorization_header = APIKeyHeader(name=AUTH_HEADER_NAME, auto_error=False)


def extract_token(header_value: Optional[str]) -> Optional[str]:
    """Return the token carried by an ``Authorization`` header value.

    Both ``Bearer <token>`` and a bare ``<token>`` are accepted.
    """
    if not header_value:
        return None
    if header_value.startswith(BEARER_PREFIX):
        return header_value[len(BEARER_PREFIX):]
    return header_value


def token_matches(header_value: Optional[str], expected: str) -> bool:
    """Check an ``Authorization`` header value against the configured secret."""
    token = extract_token(header_value)
    if token is None:
        return False
    return secrets.compare_digest(token.encode("utf-8"), expected.encode("utf-8"))
