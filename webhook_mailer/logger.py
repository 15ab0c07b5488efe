"""Logging helpers for the webhook mailer.

Handlers, level and format are installed once by the process entry point
through :func:`configure_logging`; modules only fetch named loggers.

Example:
    Typical usage in a module::

        from webhook_mailer.logger import get_logger

        logger = get_logger("WebhookMailer.mailer")
        logger.info("Message accepted")
"""

import logging

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str = "WebhookMailer") -> logging.Logger:
    """Retrieve a logger instance.

    No handler or formatter is attached here; that is done once by
    :func:`configure_logging` to avoid duplicate handlers.

    Args:
        name: The logger name. Defaults to "WebhookMailer".

    Returns:
        A ``logging.Logger`` instance bound to the given name.
    """
    return logging.getLogger(name)


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler used by the service.

    Args:
        level: Level name such as ``"DEBUG"`` (case-insensitive). Unknown
            names fall back to ``INFO``.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        force=True,  # Force reconfiguration to avoid duplicate handlers
    )
