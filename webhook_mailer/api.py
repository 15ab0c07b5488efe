"""
FastAPI application factory for the webhook mailer.

The module exposes :func:`create_app`, which wires the token check, the body
decoder and the :class:`~webhook_mailer.mailer.Mailer` behind ``POST /send``
and adds an unauthenticated ``/health`` liveness endpoint. Authentication uses the secret
configured in :class:`~webhook_mailer.config.Settings`, carried in the
``Authorization`` header either bare or as ``Bearer <token>``.
"""

import time
from typing import AsyncContextManager, Callable, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .auth import authorization_header, token_matches
from .config import Settings
from .logger import get_logger
from .mailer import DispatchError, Mailer
from .models import ErrorResponse, HealthResponse, PayloadError, SendMetadata, SendResponse, decode_email_request
from .prometheus import MailMetrics

logger = get_logger("WebhookMailer.api")


class HealthEndpoint:
    """ASGI endpoint answering every HTTP method, TRACE and extension methods
    included, with a static liveness payload.

    Registered as a raw ASGI app, so the router applies no method filter.
    """

    async def __call__(self, scope, receive, send) -> None:
        payload = HealthResponse(status="ok", version=__version__)
        await JSONResponse(payload.model_dump())(scope, receive, send)


def _client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _authorize(request: Request, authorization: Optional[str]) -> None:
    """Raise ``401`` unless the header carries the configured token."""
    settings: Settings = request.app.state.settings
    if token_matches(authorization, settings.webhook_token):
        return
    logger.warning("Unauthorized request to %s from %s", request.url.path, _client_address(request))
    request.app.state.metrics.inc_rejected("unauthorized")
    raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Unauthorized")


async def _plain_text_http_error(request: Request, exc: StarletteHTTPException) -> Response:
    """Render framework and handler HTTP errors as plain text."""
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=getattr(exc, "headers", None))


def create_app(
    settings: Settings,
    mailer: Optional[Mailer] = None,
    metrics: Optional[MailMetrics] = None,
    lifespan: Callable[[FastAPI], AsyncContextManager] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    settings:
        Validated configuration. It is stored on ``app.state`` and never
        modified afterwards.
    mailer:
        Object exposing ``async send(EmailRequest)``. Defaults to a
        :class:`Mailer` bound to ``settings``.
    metrics:
        Optional :class:`MailMetrics` instance; a private registry is created
        when omitted.
    lifespan:
        Optional lifespan context manager for startup/shutdown events.

    Returns
    -------
    FastAPI
        A configured application ready to be served by Uvicorn or any ASGI
        server.
    """
    api = FastAPI(title="Webhook Mailer", version=__version__, lifespan=lifespan)
    api.state.settings = settings
    api.state.mailer = mailer or Mailer(settings)
    api.state.metrics = metrics or MailMetrics()
    api.add_exception_handler(StarletteHTTPException, _plain_text_http_error)

    @api.post(
        "/send",
        response_model=SendResponse,
        responses={500: {"model": ErrorResponse}},
    )
    async def send(request: Request, authorization: Optional[str] = Depends(authorization_header)):
        """Relay the email described by the JSON body to the SMTP server."""
        started = time.perf_counter()
        _authorize(request, authorization)

        try:
            payload = decode_email_request(await request.body())
        except PayloadError as exc:
            logger.warning("Rejected request body from %s: %s", _client_address(request), exc)
            api.state.metrics.inc_rejected("bad_request")
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Invalid request body")

        try:
            await api.state.mailer.send(payload)
        except DispatchError as exc:
            logger.error("Failed to send email (subject=%r, to=%s): %s", payload.subject, payload.to, exc)
            api.state.metrics.inc_error()
            error = ErrorResponse(message=f"failed to send email: {exc}")
            return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=error.model_dump())

        duration_ms = int((time.perf_counter() - started) * 1000)
        api.state.metrics.inc_sent()
        logger.info(
            "Email sent: subject=%r to=%s recipients=%d duration=%dms",
            payload.subject,
            payload.to,
            payload.recipient_count,
            duration_ms,
        )
        return SendResponse(
            message="email sent",
            metadata=SendMetadata(duration_ms=duration_ms, recipients=payload.recipient_count),
        )

    api.add_route("/health", HealthEndpoint())

    @api.get("/metrics")
    async def metrics_endpoint(request: Request, authorization: Optional[str] = Depends(authorization_header)):
        """Expose Prometheus metrics collected by the handlers."""
        _authorize(request, authorization)
        return Response(content=api.state.metrics.generate_latest(), media_type="text/plain; version=0.0.4")

    return api
