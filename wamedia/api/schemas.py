import re
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

SUPPORTED_MESSAGE_TYPES = {
    "audioMessage": "audio",
    "imageMessage": "image",
    "videoMessage": "video",
    "documentMessage": "document",
}

# Prefixo inteiro, como parseInt: "12.5" -> 12, "abc" -> nada
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


# --- Request Schemas ---
class MediaMessage(BaseModel):
    """Trecho `xxxMessage` de uma mensagem do WhatsApp (Baileys / Evolution)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: Optional[str] = None
    media_key: Optional[str] = Field(default=None, alias="mediaKey")
    mimetype: Optional[str] = None
    file_sha256: Optional[str] = Field(default=None, alias="fileSha256")
    file_enc_sha256: Optional[str] = Field(default=None, alias="fileEncSha256")
    file_length: Any = Field(default=None, alias="fileLength")

    def original_size(self) -> Optional[int]:
        """
        `fileLength` pode vir como número ou string. Lê o prefixo inteiro;
        vazio, inválido ou zero vira None.
        """
        if self.file_length is None or isinstance(self.file_length, bool):
            return None
        match = _LEADING_INT.match(str(self.file_length))
        if not match:
            return None
        return int(match.group(1)) or None


class DecryptRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    audio_message: Optional[MediaMessage] = Field(default=None, alias="audioMessage")
    image_message: Optional[MediaMessage] = Field(default=None, alias="imageMessage")
    video_message: Optional[MediaMessage] = Field(default=None, alias="videoMessage")
    document_message: Optional[MediaMessage] = Field(default=None, alias="documentMessage")

    def pick_media(self) -> Optional[tuple]:
        """Primeiro tipo presente, na ordem áudio > imagem > vídeo > documento."""
        candidates = (
            (self.audio_message, "audio"),
            (self.image_message, "image"),
            (self.video_message, "video"),
            (self.document_message, "document"),
        )
        for message, media_type in candidates:
            if message is not None:
                return message, media_type
        return None


class VerifyRequest(BaseModel):
    url: Optional[str] = None


# --- Response Schemas ---
class DecryptedData(BaseModel):
    base64: str
    mimetype: str
    detected_mime_type: str = Field(serialization_alias="detectedMimeType")
    size: int
    original_size: Optional[int] = Field(default=None, serialization_alias="originalSize")
    media_type: str = Field(serialization_alias="mediaType")


class ValidationReport(BaseModel):
    encrypted_hash_verified: Union[bool, Literal["not_provided"]] = Field(
        serialization_alias="encryptedHashVerified"
    )
    decrypted_hash_verified: Union[bool, Literal["not_provided"]] = Field(
        serialization_alias="decryptedHashVerified"
    )


class DecryptResponse(BaseModel):
    success: bool = True
    data: DecryptedData
    validation: ValidationReport


class VerifyResponse(BaseModel):
    success: bool = True
    accessible: bool
    status: int
    headers: Dict[str, Optional[str]]


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    endpoints: Dict[str, str]

