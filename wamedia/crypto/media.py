# wamedia/crypto/media.py
from typing import Tuple, Union

from wamedia.crypto.cipher import decrypt_cbc
from wamedia.crypto.errors import InvalidPayloadFormat
from wamedia.crypto.keys import MEDIA_KEYS_INFO, derive_keys
from wamedia.crypto.mac import MAC_LENGTH, verify_mac

BLOCK_SIZE = 16

BytesLike = Union[bytes, bytearray, memoryview]


def validate_payload_format(payload: BytesLike) -> bool:
    """True se o blob tem MAC de 10 bytes e ciphertext alinhado em blocos de 16."""
    size = len(payload)
    if size < MAC_LENGTH:
        return False
    return (size - MAC_LENGTH) % BLOCK_SIZE == 0


def split_payload(payload: BytesLike) -> Tuple[bytes, bytes]:
    data = bytes(payload)
    if not validate_payload_format(data):
        raise InvalidPayloadFormat(
            f"blob de {len(data)} bytes não segue o layout ciphertext[16n] || mac[10]"
        )
    return data[:-MAC_LENGTH], data[-MAC_LENGTH:]


def decrypt_media(
    media_key_b64: str,
    payload: BytesLike,
    info: bytes = MEDIA_KEYS_INFO,
) -> bytes:
    """
    Descriptografa um anexo do WhatsApp (.enc).

    Ordem: HKDF -> formato do blob -> HMAC truncado -> AES-256-CBC.
    Cada etapa levanta sua própria exceção de `wamedia.crypto.errors`;
    o ciphertext nunca é decifrado sem o MAC conferir.
    """
    keys = derive_keys(media_key_b64, info)
    ciphertext, received_mac = split_payload(payload)
    verify_mac(keys.iv, ciphertext, keys.mac_key, received_mac)
    return decrypt_cbc(ciphertext, keys.cipher_key, keys.iv)
