"""FastAPI application factory."""

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI

from recording_upload.dependencies import build_upload_handler
from recording_upload.handlers import RecordingUploadHandler
from recording_upload.routes import health_router, upload_router

logger = logging.getLogger(__name__)


def create_app(
    handler_factory: Callable[[], RecordingUploadHandler] = build_upload_handler,
) -> FastAPI:
    """
    Creates the upload API.

    Args:
        handler_factory: Builds the upload handler on startup; tests pass
            one that returns a handler wired to in-memory fakes.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.upload_handler = handler_factory()
        logger.info("Upload service started")
        yield

    app = FastAPI(title="Recording Upload Service", lifespan=lifespan)
    app.include_router(health_router)
    app.include_router(upload_router)
    return app
