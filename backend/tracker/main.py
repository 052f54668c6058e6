"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tracker.config import get_settings
from tracker.domain.exceptions import PersistenceError
from tracker.infrastructure.database import Base, engine
from tracker.infrastructure.logging.log_config import setup_logging
from tracker.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — configure logging and create tables."""
    setup_logging()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Parcel store ready (%s)", engine.url.render_as_string(hide_password=True))

    yield

    await engine.dispose()


async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    """Storage failures surface as 503 so clients can tell them apart from bad input."""
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "detail": "Parcel storage is unavailable",
            "operation": exc.operation,
        },
    )


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PersistenceError, persistence_error_handler)
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tracker.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
