"""FastAPI dependency injection functions.

Routes read the shared collaborators built by the lifespan handler from
``app.state``; a missing collaborator means startup failed and maps to 503.
"""

from fastapi import HTTPException, Request, status

from legalocr.clients.tesseract_engine import EngineHandle
from legalocr.config.schemas import SchemaRegistry
from services.processor import DocumentProcessor


async def get_processor(request: Request) -> DocumentProcessor:
    """Get document processor from app state.

    Raises:
        HTTPException: 503 if the processor is unavailable
    """
    processor = getattr(request.app.state, "processor", None)

    if processor is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Document processor unavailable",
        )

    return processor


async def get_engine(request: Request) -> EngineHandle:
    """Get the shared OCR engine handle from app state.

    Raises:
        HTTPException: 503 if no engine handle was created
    """
    engine = getattr(request.app.state, "engine", None)

    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="OCR engine unavailable",
        )

    return engine


async def get_schema_registry(request: Request) -> SchemaRegistry:
    schemas = getattr(request.app.state, "schemas", None)

    if schemas is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Schema registry unavailable",
        )

    return schemas
