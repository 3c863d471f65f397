# Run from project root: uvicorn app.main:app --port 3000

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.handlers import error_response
from app.api.routes import router
from app.core.config import Settings, get_settings
from app.core.errors import BackendError, ConfigurationError

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    if settings is None:
        try:
            settings = get_settings()
        except ConfigurationError as e:
            # Requests still resolve get_settings and fail with a 500 JSON body
            logger.warning("Invalid configuration, starting with defaults: %s", e.message)
            settings = Settings()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))

    app = FastAPI(title="Document Search Chat Backend")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.allowed_origin],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BackendError)
    async def backend_error_handler(request: Request, exc: BackendError):
        logger.error("Unhandled %s on %s: %s", type(exc).__name__, request.url.path, exc.message, exc_info=exc)
        return error_response(exc)

    app.include_router(router)
    return app


app = create_app()
