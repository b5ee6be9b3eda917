from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from core.config import Settings, settings
from data.tenants_store import TenantsStore
from logger import logger
from routers.line import register_callbacks, router as debug_router
from services.answer_client import ExternalAnswerClient
from services.channels import build_channels, close_channels
from services.line_client import LineReplyClient


def create_app(
    app_settings: Settings = settings,
    store: Optional[TenantsStore] = None,
    answers: Optional[ExternalAnswerClient] = None,
    client_factory=LineReplyClient,
) -> FastAPI:
    """
    Build the app with one callback route per tenant.
    Raises ConfigError when the tenants blob is missing or invalid.
    """
    if app_settings.DEBUG_LOGGING:
        logger.debug("Debug logging is enabled")

    # Tenants are resolved once; routes are fixed for the process lifetime
    if store is None:
        store = TenantsStore.from_settings(app_settings)
    logger.info(f"Loaded {len(store)} callback configurations")

    answers = answers or ExternalAnswerClient(
        timeout=app_settings.EXTERNAL_API_TIMEOUT, logger=logger
    )
    channels = build_channels(store, answers, logger, client_factory=client_factory)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Cleanup
        close_channels(channels)
        answers.close()

    app = FastAPI(lifespan=lifespan)
    app.state.tenants_store = store
    app.state.channels = channels
    app.state.answers = answers

    register_callbacks(app, channels, logger)
    if app_settings.APP_ENV != "production":
        app.include_router(debug_router)

    @app.get("/")
    async def health_check():
        return {"status": "healthy"}

    return app


if __name__ == "__main__":
    logger.info("Program started")
    logger.debug(f"Server is starting, listening on port {settings.PORT}")
    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=settings.PORT)
