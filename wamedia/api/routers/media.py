from typing import Optional

from fastapi import APIRouter, Depends

from wamedia.api import dependencies, schemas
from wamedia.services import media_service
from wamedia.services.media_downloader import MediaDownloader

router = APIRouter(tags=["Media"])


@router.post("/decrypt", response_model=schemas.DecryptResponse, response_model_by_alias=True)
async def decrypt_media(
    payload: Optional[schemas.DecryptRequest] = None,
    downloader: MediaDownloader = Depends(dependencies.get_media_downloader),
):
    """
    Baixa, descriptografa e devolve a mídia do WhatsApp em base64.
    Aceita audioMessage, imageMessage, videoMessage ou documentMessage.
    """
    return await media_service.decrypt_media_message(payload, downloader)


@router.post("/verify", response_model=schemas.VerifyResponse)
async def verify_media_url(
    payload: Optional[schemas.VerifyRequest] = None,
    downloader: MediaDownloader = Depends(dependencies.get_media_downloader),
):
    """Verifica apenas se a URL está acessível, sem descriptografar."""
    return await media_service.verify_media_url(payload.url if payload else None, downloader)
