"""Webhook-triggered email relay.

The service accepts an authenticated ``POST /send`` request describing an
email, forwards it to the configured SMTP relay and answers with a JSON
acknowledgment.

Example:
    Building the application by hand::

        from webhook_mailer.api import create_app
        from webhook_mailer.config import load_settings

        app = create_app(load_settings())
"""

__version__ = "1.0.0"
