"""Process entry point: configure logging, validate settings, serve over uvicorn.

Usage:
    python main.py
    webhook-mailer

A missing required setting aborts startup with exit status 1 before the
listener is bound.
"""

from __future__ import annotations

import os
import sys

import uvicorn

from .api import create_app
from .config import ConfigurationError, load_settings
from .logger import configure_logging, get_logger

logger = get_logger("WebhookMailer")


def run() -> None:
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        logger.critical("Configuration error: %s", exc)
        sys.exit(1)
    configure_logging(settings.log_level)

    app = create_app(settings)
    logger.info("Webhook mailer listening on %s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
