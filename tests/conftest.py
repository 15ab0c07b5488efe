"""Shared fixtures for the webhook mailer tests."""

import pytest

from webhook_mailer.config import Settings

API_TOKEN = "secret-token"


def make_settings(**overrides) -> Settings:
    values = dict(
        webhook_token=API_TOKEN,
        smtp_host="smtp.local",
        smtp_user="user",
        smtp_password="pass",
        email_from="noreply@example.com",
    )
    values.update(overrides)
    return Settings(**values)


class DummySMTP:
    connect_error = None
    login_error = None
    send_error = None

    def __init__(self, hostname, port, use_tls=False, start_tls=None):
        self.hostname = hostname
        self.port = port
        self.use_tls = use_tls
        self.start_tls = start_tls
        self.login_credentials = None
        self.connected = False
        self.closed = False
        self.sent = []

    async def connect(self):
        if self.connect_error:
            raise self.connect_error
        self.connected = True

    async def login(self, user, password):
        if self.login_error:
            raise self.login_error
        self.login_credentials = (user, password)

    async def send_message(self, msg, sender=None):
        if self.send_error:
            raise self.send_error
        self.sent.append((msg, sender))

    async def quit(self):
        self.closed = True

    def close(self):
        self.closed = True


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def patch_aiosmtplib(monkeypatch):
    created = []

    def factory(**kwargs):
        smtp = DummySMTP(**kwargs)
        created.append(smtp)
        return smtp

    monkeypatch.setattr("webhook_mailer.mailer.aiosmtplib.SMTP", factory)
    return created


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def smtp_class():
    return DummySMTP
