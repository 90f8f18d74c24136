# wamedia/crypto/integrity.py
from base64 import b64encode
from typing import Optional

from Crypto.Hash import SHA256


def sha256_b64(data: bytes) -> str:
    return b64encode(SHA256.new(bytes(data)).digest()).decode("ascii")


def _matches(data: bytes, expected_b64: Optional[str]) -> bool:
    if not isinstance(expected_b64, str) or not expected_b64:
        return False
    return sha256_b64(data) == expected_b64


def verify_plaintext_digest(plaintext: bytes, expected_b64: Optional[str]) -> bool:
    """Confere o `fileSha256` da mensagem contra a mídia já descriptografada."""
    return _matches(plaintext, expected_b64)


def verify_ciphertext_digest(ciphertext: bytes, expected_b64: Optional[str]) -> bool:
    """Confere o `fileEncSha256` contra o blob baixado (ciphertext + MAC)."""
    return _matches(ciphertext, expected_b64)
