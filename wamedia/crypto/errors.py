# wamedia/crypto/errors.py


class MediaCryptoError(ValueError):
    """Base de todas as falhas do núcleo de descriptografia."""


class InvalidKeyLength(MediaCryptoError):
    """mediaKey não decodifica para exatamente 32 bytes."""


class InvalidPayloadFormat(MediaCryptoError):
    """Blob menor que o MAC ou com ciphertext fora do alinhamento de 16 bytes."""


class MacMismatch(MediaCryptoError):
    """HMAC truncado não confere – arquivo adulterado ou chave incorreta."""


class DecryptionFailure(MediaCryptoError):
    """AES-CBC ou remoção do padding PKCS#7 falhou."""
