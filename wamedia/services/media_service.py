import asyncio
from base64 import b64encode
from typing import Any, Dict, List, Optional

import structlog

from wamedia.api import schemas
from wamedia.config import settings
from wamedia.crypto.errors import (
    DecryptionFailure,
    InvalidKeyLength,
    InvalidPayloadFormat,
    MacMismatch,
)
from wamedia.crypto.integrity import verify_ciphertext_digest, verify_plaintext_digest
from wamedia.crypto.keys import MEDIA_KEYS_INFO, info_for_media_type, validate_media_key_format
from wamedia.crypto.media import decrypt_media, validate_payload_format
from wamedia.crypto.sniffer import sniff_media_type
from wamedia.services.media_downloader import MediaDownloadError, MediaDownloader

logger = structlog.get_logger(__name__)


class MediaRequestError(Exception):
    """Falha esperada de uma requisição; vira resposta JSON `{error, details}`."""

    def __init__(
        self,
        status_code: int,
        error: str,
        details: Optional[List[str]] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details
        self.extra = extra or {}

    def to_content(self) -> Dict[str, Any]:
        content: Dict[str, Any] = {"error": self.error}
        if self.details:
            content["details"] = self.details
        content.update(self.extra)
        return content


def validate_media_message(message: schemas.MediaMessage) -> List[str]:
    """Checagem dos campos obrigatórios, antes de qualquer download."""
    errors = []
    if not message.url:
        errors.append("URL é obrigatória")
    if not message.media_key:
        errors.append("mediaKey é obrigatória")
    elif not validate_media_key_format(message.media_key):
        errors.append("mediaKey tem formato inválido")
    return errors


def _hkdf_info(media_type: str) -> bytes:
    if settings.USE_MEDIA_TYPE_INFO:
        return info_for_media_type(media_type)
    return MEDIA_KEYS_INFO


async def decrypt_media_message(
    request: Optional[schemas.DecryptRequest],
    downloader: MediaDownloader,
) -> schemas.DecryptResponse:
    """
    Fluxo completo do /decrypt:
    validação -> download -> formato -> hash cifrado -> decrypt -> hash claro -> MIME.
    """
    picked = request.pick_media() if request is not None else None
    if picked is None:
        raise MediaRequestError(
            400,
            "Nenhuma mídia válida encontrada na requisição",
            extra={"supportedTypes": list(schemas.SUPPORTED_MESSAGE_TYPES)},
        )
    message, media_type = picked

    errors = validate_media_message(message)
    if errors:
        raise MediaRequestError(400, "Dados de mídia inválidos", details=errors)

    log = logger.bind(media_type=media_type)

    try:
        encrypted = await downloader.download(message.url)
    except MediaDownloadError as e:
        log.error("media_service.download.failed", error=str(e), status=e.status_code)
        raise MediaRequestError(502, "Erro ao baixar arquivo", details=[str(e)]) from e

    if not validate_payload_format(encrypted):
        log.warning("media_service.payload.invalid_format", size=len(encrypted))
        raise MediaRequestError(400, "Formato dos dados criptografados inválido")

    if message.file_enc_sha256 and not verify_ciphertext_digest(encrypted, message.file_enc_sha256):
        log.warning("media_service.enc_sha256.mismatch")
        raise MediaRequestError(400, "Hash do arquivo criptografado não confere")

    try:
        # CPU-bound; fora do event loop
        decrypted = await asyncio.to_thread(
            decrypt_media, message.media_key, encrypted, _hkdf_info(media_type)
        )
    except (InvalidKeyLength, InvalidPayloadFormat) as e:
        raise MediaRequestError(400, "Dados de mídia inválidos", details=[str(e)]) from e
    except MacMismatch as e:
        log.warning("media_service.decrypt.mac_mismatch")
        raise MediaRequestError(422, "Falha na verificação de integridade (MAC inválido)") from e
    except DecryptionFailure as e:
        log.error("media_service.decrypt.failure", error=str(e))
        raise MediaRequestError(422, "Erro na descriptografia", details=[str(e)]) from e

    if message.file_sha256 and not verify_plaintext_digest(decrypted, message.file_sha256):
        log.warning("media_service.sha256.mismatch")
        raise MediaRequestError(400, "Hash do arquivo descriptografado não confere")

    detected = sniff_media_type(decrypted)
    log.info("media_service.decrypt.ok", size=len(decrypted), detected=detected)

    return schemas.DecryptResponse(
        data=schemas.DecryptedData(
            base64=b64encode(decrypted).decode("ascii"),
            mimetype=message.mimetype or detected,
            detected_mime_type=detected,
            size=len(decrypted),
            original_size=message.original_size(),
            media_type=media_type,
        ),
        validation=schemas.ValidationReport(
            encrypted_hash_verified=True if message.file_enc_sha256 else "not_provided",
            decrypted_hash_verified=True if message.file_sha256 else "not_provided",
        ),
    )


async def verify_media_url(url: Optional[str], downloader: MediaDownloader) -> schemas.VerifyResponse:
    """HEAD na URL para saber se a mídia ainda está disponível no CDN."""
    if not url:
        raise MediaRequestError(400, "URL é obrigatória")
    try:
        response = await downloader.head(url)
    except MediaDownloadError as e:
        logger.warning("media_service.verify.failed", error=str(e))
        raise MediaRequestError(500, "Erro ao verificar URL", extra={"message": str(e)}) from e

    return schemas.VerifyResponse(
        accessible=response.is_success,
        status=response.status_code,
        headers={
            "content-type": response.headers.get("content-type"),
            "content-length": response.headers.get("content-length"),
        },
    )
