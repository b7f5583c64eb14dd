import asyncio

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.schemas import HealthResponse
from core.dependencies import get_engine
from legalocr.clients.tesseract_engine import EngineHandle
from legalocr.core.exceptions import EngineUnavailableError

router = APIRouter()

SERVICE_NAME = "dz-legal-ocr"
SERVICE_VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(engine: EngineHandle = Depends(get_engine)):
    loop = asyncio.get_running_loop()
    try:
        await loop.run_in_executor(None, engine.ensure_ready)
    except EngineUnavailableError:
        pass  # reported through engine.status() below

    engine_status = engine.status()
    healthy = engine_status["ready"]

    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "engine": engine_status,
        },
    )
