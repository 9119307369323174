"""
FastAPI application entry point

XLSMART HR Portal backend
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.routing import APIRoute
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from loguru import logger

from hrportal import __version__
from hrportal.core.config import settings
from hrportal.core.database import init_db, close_db
from hrportal.core.response import success_response, DictResponse
from hrportal.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    general_exception_handler,
)
from hrportal.services.ai import get_llm_client
from hrportal.api import api_router


def custom_generate_unique_id(route: APIRoute) -> str:
    """Use the handler name as the OpenAPI operationId"""
    return route.name


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create tables on startup, dispose the engine on shutdown
    """
    logger.info(f"Starting {settings.app_name}")
    logger.info(f"Environment: {settings.app_env}")
    logger.info(f"Debug: {settings.debug}")
    if not get_llm_client().is_configured():
        logger.warning("LLM_API_KEY is not set, AI endpoints will use fallback results")

    await init_db()
    logger.info("Database initialised")

    yield

    await close_db()
    logger.info("Application stopped")


def create_app() -> FastAPI:
    """
    Build the FastAPI application
    """
    app = FastAPI(
        title=settings.app_name,
        description="XLSMART HR Portal API",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        generate_unique_id_function=custom_generate_unique_id,
    )

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health", tags=["System"], response_model=DictResponse)
    async def health_check():
        """Liveness check"""
        return success_response(data={"status": "healthy"})

    @app.get("/", tags=["System"], response_model=DictResponse)
    async def root():
        return success_response(data={
            "name": settings.app_name,
            "version": __version__,
            "docs": "/docs" if settings.debug else None,
        })

    # Added last so it runs first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "hrportal.main:app",
        host="127.0.0.1",
        port=8000,
        reload=settings.debug,
    )
