"""FastAPI application entry point."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.routes import extractions, health, mappings
from core.error_handlers import (
    handle_app_error,
    handle_http_error,
    handle_unknown_error,
    handle_validation_error,
)
from core.lifespan import lifespan
from core.middleware import trace_id_middleware
from core.settings import app_settings
from legalocr.core.exceptions import BaseError
from legalocr.core.logging_config import configure_structured_logging

# Configure logging
configure_structured_logging(level=app_settings.LOG_LEVEL, json_format=app_settings.LOG_JSON)
logger = logging.getLogger(__name__)


def create_app(lifespan_handler=lifespan) -> FastAPI:
    app = FastAPI(
        title="DZ Legal OCR API",
        version="1.0.0",
        description="OCR and legal structuring of Algerian official texts",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan_handler,
    )

    # 1. Register Middleware
    app.middleware("http")(trace_id_middleware)

    # 2. Register Exception Handlers
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(BaseError, handle_app_error)
    app.add_exception_handler(Exception, handle_unknown_error)

    # Routes
    app.include_router(health.router)
    app.include_router(extractions.router)
    app.include_router(mappings.router)
    return app


app = create_app()
