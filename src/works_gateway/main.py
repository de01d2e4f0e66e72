from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from works_gateway.attachments.api.routes import router as attachments_router
from works_gateway.attachments.application.attachment_service import AttachmentService
from works_gateway.config import Settings, get_settings
from works_gateway.identity.application.credential_provider import CredentialProvider
from works_gateway.identity.infrastructure.assertion_service import AssertionService
from works_gateway.messaging.api.routes import router as messages_router
from works_gateway.messaging.application.services.message_service import MessageService
from works_gateway.messaging.infrastructure.works_api import WorksApiClient
from works_gateway.shared.exceptions import register_exception_handlers
from works_gateway.shared.http.middleware import BasicAuthMiddleware, LoggingMiddleware, RequestIdMiddleware
from works_gateway.shared.logging import get_logger, setup_logging

logger = get_logger("app")


def create_app(
    settings: Optional[Settings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the gateway application.

    `transport` replaces the network layer of the outbound httpx client
    (tests pass an httpx.MockTransport).
    """
    settings = settings or get_settings()
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Fails startup with ConfigurationError when a secret is missing or malformed
        settings.require_basic_auth()
        assertions = AssertionService.from_settings(settings)

        http_client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS, transport=transport)
        api = WorksApiClient(http_client=http_client, base_url=settings.api_base, bot_id=settings.BOT_ID)
        credentials = CredentialProvider(
            assertion_service=assertions,
            http_client=http_client,
            auth_url=settings.AUTH_URL,
            client_id=settings.CLIENT_ID,
            client_secret=settings.CLIENT_SECRET,
            cache_seconds=settings.TOKEN_CACHE_SECONDS,
        )
        app.state.message_service = MessageService(api=api, credentials=credentials, bot_id=settings.BOT_ID)
        app.state.attachment_service = AttachmentService(
            api=api, credentials=credentials, upload_dir=settings.UPLOAD_DIR
        )
        logger.info("gateway_started", bot_id=settings.BOT_ID, environment=settings.ENVIRONMENT)
        try:
            yield
        finally:
            await http_client.aclose()
            logger.info("gateway_stopped")

    app = FastAPI(
        title="LINE WORKS Bot Gateway API",
        version=settings.PROJECT_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Starlette runs the last added middleware first
    app.add_middleware(
        BasicAuthMiddleware,
        username=settings.BASIC_ID,
        password=settings.BASIC_PASS,
        excluded_paths=["/health"],
    )
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(messages_router)
    app.include_router(attachments_router)

    # Centralized error handling → {code, message, details?, correlation_id?}
    register_exception_handlers(app)

    @app.get("/", tags=["Root"], response_class=PlainTextResponse)
    async def root():
        return "Hello World."

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
