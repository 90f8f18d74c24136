import datetime as dt

from fastapi import APIRouter

from wamedia.api import schemas
from wamedia.config import settings

router = APIRouter(tags=["Health Check"])

ENDPOINTS = {
    "/decrypt": "POST - Descriptografar e converter mídia para base64",
    "/verify": "POST - Verificar acessibilidade da URL",
    "/health": "GET - Status da API",
}


@router.get("/health", response_model=schemas.HealthResponse)
async def health():
    return {
        "status": "OK",
        "timestamp": dt.datetime.now(dt.timezone.utc).isoformat(),
        "version": settings.APP_VERSION,
        "endpoints": ENDPOINTS,
    }
