# wamedia/crypto/keys.py
from __future__ import annotations

import binascii
from base64 import b64decode
from dataclasses import dataclass
from typing import Optional

from Crypto.Hash import SHA256
from Crypto.Protocol.KDF import HKDF

from wamedia.crypto.errors import InvalidKeyLength

MEDIA_KEY_LENGTH = 32
EXPANDED_KEY_LENGTH = 112

MEDIA_KEYS_INFO = b"WhatsApp Media Keys"

# Info strings usadas pelos clientes oficiais, por tipo de mídia
MEDIA_INFO_BY_TYPE = {
    "audio": b"WhatsApp Audio Keys",
    "image": b"WhatsApp Image Keys",
    "video": b"WhatsApp Video Keys",
    "document": b"WhatsApp Document Keys",
}


@dataclass(frozen=True)
class ExpandedKeySet:
    iv: bytes          # 16 bytes – IV do AES-CBC
    cipher_key: bytes  # 32 bytes – chave AES-256
    mac_key: bytes     # 32 bytes – chave HMAC-SHA256
    ref_key: bytes     # 32 bytes – derivados mas não usados

    @classmethod
    def from_bytes(cls, material: bytes) -> "ExpandedKeySet":
        if len(material) != EXPANDED_KEY_LENGTH:
            raise ValueError(
                f"material expandido deve ter {EXPANDED_KEY_LENGTH} bytes, recebeu {len(material)}"
            )
        return cls(
            iv=material[:16],
            cipher_key=material[16:48],
            mac_key=material[48:80],
            ref_key=material[80:112],
        )


def info_for_media_type(media_type: Optional[str]) -> bytes:
    """Info string do HKDF para o tipo; tipos desconhecidos caem no genérico."""
    if not media_type:
        return MEDIA_KEYS_INFO
    return MEDIA_INFO_BY_TYPE.get(media_type.lower(), MEDIA_KEYS_INFO)


def decode_media_key(media_key_b64: str) -> bytes:
    """
    Converte a mediaKey base64 em bytes crus.
    Levanta InvalidKeyLength se o texto não decodificar ou não tiver 32 bytes.
    """
    if not isinstance(media_key_b64, str):
        raise InvalidKeyLength("mediaKey deve ser texto base64")

    value = "".join(media_key_b64.split())
    value += "=" * (-len(value) % 4)
    try:
        media_key = b64decode(value)
    except (binascii.Error, ValueError) as exc:
        raise InvalidKeyLength(f"mediaKey não é base64 válido: {exc}") from exc

    if len(media_key) != MEDIA_KEY_LENGTH:
        raise InvalidKeyLength(
            f"mediaKey deve ter {MEDIA_KEY_LENGTH} bytes, recebeu {len(media_key)}"
        )
    return media_key


def validate_media_key_format(media_key_b64: str) -> bool:
    try:
        decode_media_key(media_key_b64)
    except InvalidKeyLength:
        return False
    return True


def expand_media_key(media_key: bytes, info: bytes = MEDIA_KEYS_INFO) -> ExpandedKeySet:
    """
    HKDF-SHA256 (salt vazio) da mediaKey para 112 bytes.
    O tamanho é checado aqui, antes do HKDF.
    """
    if len(media_key) != MEDIA_KEY_LENGTH:
        raise InvalidKeyLength(
            f"mediaKey deve ter {MEDIA_KEY_LENGTH} bytes, recebeu {len(media_key)}"
        )
    material = HKDF(bytes(media_key), EXPANDED_KEY_LENGTH, b"", SHA256, context=info)
    return ExpandedKeySet.from_bytes(material)


def derive_keys(media_key_b64: str, info: bytes = MEDIA_KEYS_INFO) -> ExpandedKeySet:
    return expand_media_key(decode_media_key(media_key_b64), info)
