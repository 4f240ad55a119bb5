"""Main FastAPI application for the weather advisory service."""

import logging
import traceback
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agriqual.api.endpoints import SERVICE_NAME, SERVICE_VERSION, router as weather_router
from agriqual.config import HOST, PORT, DEBUG
from agriqual.logging_config import configure_logging
from agriqual.middleware.rate_limit import RateLimitMiddleware
from agriqual.weather.errors import InvalidInput, UpstreamError
from agriqual.weather.models import ErrorResponse

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    try:
        logger.info(f"Starting {SERVICE_NAME}")
        yield
    except Exception as e:
        logger.error(f"Startup error: {e}")
        logger.error(traceback.format_exc())
        raise
    finally:
        logger.info(f"Shutting down {SERVICE_NAME}")


async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
    """Map invalid client input to a 400 response."""
    logger.info(f"Rejected {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=exc.message).model_dump(exclude_none=True)
    )


async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    """Map an upstream failure to a 500 response without echoing upstream detail."""
    logger.error(f"Upstream failure on {request.url.path}: status={exc.status}, message={exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=UpstreamError.client_message, detail=exc.safe_message).model_dump()
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=SERVICE_NAME,
        description="Current weather, today's forecast and rule-based farming advice for a coordinate",
        version=SERVICE_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RateLimitMiddleware)

    app.add_exception_handler(InvalidInput, invalid_input_handler)
    app.add_exception_handler(UpstreamError, upstream_error_handler)

    app.include_router(weather_router)

    @app.get("/api", tags=["root"])
    async def api_info() -> dict:
        """API information endpoint.

        Returns:
            Basic service information
        """
        return {
            "message": SERVICE_NAME,
            "docs": "/docs",
            "redoc": "/redoc",
            "weather": "/api/weather",
            "health": "/api/weather/health"
        }

    return app


app = create_app()


def main() -> None:
    """Main entry point for the application."""
    logger.info(f"Starting server on {HOST}:{PORT}")
    uvicorn.run(
        app,
        host=HOST,
        port=PORT,
        log_level="info" if not DEBUG else "debug"
    )


if __name__ == "__main__":
    main()
