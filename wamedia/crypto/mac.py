# wamedia/crypto/mac.py
import hmac

from Crypto.Hash import HMAC, SHA256

from wamedia.crypto.errors import MacMismatch

MAC_LENGTH = 10


def compute_mac(iv: bytes, ciphertext: bytes, mac_key: bytes) -> bytes:
    """HMAC-SHA256(iv || ciphertext) truncado nos 10 primeiros bytes."""
    h = HMAC.new(mac_key, digestmod=SHA256)
    h.update(iv)
    h.update(ciphertext)
    return h.digest()[:MAC_LENGTH]


def verify_mac(iv: bytes, ciphertext: bytes, mac_key: bytes, received_mac: bytes) -> bool:
    computed = compute_mac(iv, ciphertext, mac_key)
    # comparação em tempo constante
    if not hmac.compare_digest(computed, bytes(received_mac)):
        raise MacMismatch("HMAC mismatch – chave ou arquivo incorretos")
    return True
