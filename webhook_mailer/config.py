"""Process-wide settings loaded from the environment.

Settings are read once at startup, optionally pre-populated from a ``.env``
file, validated, and then handed to :func:`webhook_mailer.api.create_app` as an
immutable object.

Environment variables:
  ENV_FILE - Path of the optional dotenv file (default: .env)
  PORT - HTTP listen port (default: 8080)
  HOST - HTTP bind address (default: 0.0.0.0)
  WEBHOOK_TOKEN - Secret expected in the Authorization header (required)
  SMTP_HOST - Outbound relay host (required)
  SMTP_PORT - Outbound relay port (default: 587)
  SMTP_USER - Relay username (required)
  SMTP_PASS - Relay password (required)
  EMAIL_FROM - Sender address of every message (required)
  LOG_LEVEL - Logging level (default: INFO)
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from dotenv import dotenv_values, load_dotenv
from pydantic import BaseModel, ConfigDict

from .logger import get_logger

logger = get_logger("WebhookMailer.config")

DEFAULT_PORT = 8080
DEFAULT_HOST = "0.0.0.0"
DEFAULT_SMTP_PORT = 587
DEFAULT_ENV_FILE = ".env"


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing or invalid at startup."""


class Settings(BaseModel):
    """Validated, read-only service configuration."""

    model_config = ConfigDict(frozen=True)

    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    webhook_token: str
    smtp_host: str
    smtp_port: int = DEFAULT_SMTP_PORT
    smtp_user: str
    smtp_password: str
    email_from: str
    log_level: str = "INFO"


def _read_environment(environ: Optional[Mapping[str, str]], env_file: Optional[str]) -> Mapping[str, str]:
    if environ is None:
        # Existing process variables win over the file
        load_dotenv(env_file or os.getenv("ENV_FILE", DEFAULT_ENV_FILE), override=False)
        return os.environ
    if env_file is None:
        return environ
    merged = {key: value for key, value in dotenv_values(env_file).items() if value is not None}
    merged.update(environ)
    return merged


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    env_file: Optional[str] = None,
) -> Settings:
    """Build :class:`Settings` from the environment.

    Args:
        environ: Mapping to read instead of ``os.environ``. When omitted the
            dotenv file is loaded into the process environment first.
        env_file: Dotenv file path. A missing file is not an error.

    Raises:
        ConfigurationError: if the token, SMTP credentials or sender are unset,
            or if PORT is not a valid port number.
    """
    env = _read_environment(environ, env_file)

    def get(key: str, default: str = "") -> str:
        value = env.get(key, "")
        if value == "":
            return default
        return value

    def get_int(key: str, default: int) -> int:
        value = get(key)
        if value == "":
            return default
        try:
            return int(value.strip())
        except ValueError:
            logger.warning("Cannot parse %s=%r as an integer, using default %d", key, value, default)
            return default

    token = get("WEBHOOK_TOKEN")
    smtp_host = get("SMTP_HOST")
    smtp_user = get("SMTP_USER")
    smtp_password = get("SMTP_PASS")
    email_from = get("EMAIL_FROM")

    if not token:
        raise ConfigurationError("WEBHOOK_TOKEN must be set")
    if not smtp_host or not smtp_user or not smtp_password:
        raise ConfigurationError("SMTP_HOST, SMTP_USER and SMTP_PASS must be set")
    if not email_from:
        raise ConfigurationError("EMAIL_FROM must be set")

    listen_port = get("PORT")
    if listen_port == "":
        port = DEFAULT_PORT
    else:
        try:
            port = int(listen_port.strip())
        except ValueError:
            raise ConfigurationError(f"PORT must be an integer, got {listen_port!r}") from None
    if not 0 <= port <= 65535:
        raise ConfigurationError(f"PORT must be between 0 and 65535, got {port}")

    return Settings(
        port=port,
        host=get("HOST", DEFAULT_HOST),
        webhook_token=token,
        smtp_host=smtp_host,
        smtp_port=get_int("SMTP_PORT", DEFAULT_SMTP_PORT),
        smtp_user=smtp_user,
        smtp_password=smtp_password,
        email_from=email_from,
        log_level=get("LOG_LEVEL", "INFO"),
    )
