# wamedia/crypto/cipher.py
from Crypto.Cipher import AES
from Crypto.Util.Padding import unpad

from wamedia.crypto.errors import DecryptionFailure


def decrypt_cbc(ciphertext: bytes, cipher_key: bytes, iv: bytes) -> bytes:
    """
    AES-256-CBC + remoção do PKCS#7.
    Só deve ser chamada depois que o MAC foi validado.
    """
    if len(cipher_key) != 32:
        raise DecryptionFailure(f"chave AES-256 deve ter 32 bytes, recebeu {len(cipher_key)}")
    if len(iv) != AES.block_size:
        raise DecryptionFailure(f"IV deve ter {AES.block_size} bytes, recebeu {len(iv)}")
    if not ciphertext:
        raise DecryptionFailure("ciphertext vazio não carrega padding PKCS#7")
    if len(ciphertext) % AES.block_size != 0:
        raise DecryptionFailure(
            f"ciphertext de {len(ciphertext)} bytes não é múltiplo de {AES.block_size}"
        )

    plain = AES.new(bytes(cipher_key), AES.MODE_CBC, bytes(iv)).decrypt(bytes(ciphertext))
    try:
        return unpad(plain, AES.block_size, style="pkcs7")
    except ValueError as exc:
        raise DecryptionFailure(f"padding PKCS#7 inválido: {exc}") from exc
