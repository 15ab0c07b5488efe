"""Translate email requests into MIME messages and hand them to the SMTP relay."""

from __future__ import annotations

from email.errors import HeaderParseError
from email.message import EmailMessage
from typing import Iterable, Optional

import aiosmtplib

from .config import Settings
from .logger import get_logger
from .models import EmailRequest

IMPLICIT_TLS_PORT = 465


class DispatchError(RuntimeError):
    """Raised when a message could not be handed to the relay."""


class MissingRecipientsError(DispatchError):
    """Raised when the request carries no ``to`` address."""

    def __init__(self, message: str = "recipients list is empty"):
        super().__init__(message)


def _format_addresses(values: Optional[Iterable[str]]) -> str | None:
    if not values:
        return None
    return ", ".join(values)


class Mailer:
    """Build and deliver one message per call using the configured relay.

    Every call to :meth:`send` opens its own connection, authenticates,
    transmits and quits. Nothing is pooled or retried.
    """

    def __init__(self, settings: Settings, logger=None):
        self.settings = settings
        self.logger = logger or get_logger("WebhookMailer.mailer")

    def build_message(self, request: EmailRequest) -> EmailMessage:
        """Translate ``request`` into an :class:`EmailMessage`.

        Custom headers are applied last and replace any header with the same
        name, in mapping order.
        """
        to_value = _format_addresses(request.to)
        if not to_value:
            raise MissingRecipientsError()

        msg = EmailMessage()
        try:
            msg["From"] = self.settings.email_from
            msg["To"] = to_value
            if cc_value := _format_addresses(request.cc):
                msg["Cc"] = cc_value
            if bcc_value := _format_addresses(request.bcc):
                msg["Bcc"] = bcc_value
            msg["Subject"] = request.subject
            msg.set_content(request.body, subtype="html" if request.is_html else "plain")
            for header, value in (request.headers or {}).items():
                if header in msg:
                    msg.replace_header(header, value)
                else:
                    msg[header] = value
        except (ValueError, IndexError, HeaderParseError) as exc:
            # CR/LF inside a value, or an address the header parser cannot read
            raise DispatchError(f"invalid message: {exc}") from exc
        return msg

    def _connection(self) -> aiosmtplib.SMTP:
        use_tls = int(self.settings.smtp_port) == IMPLICIT_TLS_PORT
        # Port 465 speaks TLS from the first byte; elsewhere STARTTLS is used when offered
        return aiosmtplib.SMTP(
            hostname=self.settings.smtp_host,
            port=self.settings.smtp_port,
            use_tls=use_tls,
            start_tls=False if use_tls else None,
        )

    async def _close(self, smtp: aiosmtplib.SMTP) -> None:
        try:
            await smtp.quit()
        except (aiosmtplib.SMTPException, OSError) as exc:
            self.logger.debug("QUIT failed (%s), closing transport", exc)
            smtp.close()

    async def send(self, request: EmailRequest) -> None:
        """Dial the relay, authenticate, send ``request`` and hang up.

        Raises:
            MissingRecipientsError: if ``request.to`` is empty. The relay is
                not contacted.
            DispatchError: on an unusable header or address, or on connection,
                authentication or relay rejection.
        """
        msg = self.build_message(request)
        if request.attachments:
            self.logger.debug("Ignoring %d attachment(s): attachment delivery is not supported", len(request.attachments))

        smtp = self._connection()
        try:
            await smtp.connect()
            try:
                await smtp.login(self.settings.smtp_user, self.settings.smtp_password)
                await smtp.send_message(msg, sender=self.settings.email_from)
            finally:
                await self._close(smtp)
        except (aiosmtplib.SMTPException, OSError, ValueError) as exc:
            # ValueError: no usable recipient address left in the headers
            raise DispatchError(str(exc) or exc.__class__.__name__) from exc
