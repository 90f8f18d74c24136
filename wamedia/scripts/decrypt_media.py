# Ficheiro: decrypt_media.py
"""
Descriptografa um anexo .enc do WhatsApp pela linha de comando.

    wamedia-decrypt --url "https://mmg.whatsapp.net/..." --media-key "E2k8...=" -o audio.ogg
    wamedia-decrypt --input audio.enc --media-key "E2k8...=" --media-type audio -o audio.ogg
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import requests

from wamedia.crypto.errors import MediaCryptoError
from wamedia.crypto.integrity import verify_ciphertext_digest, verify_plaintext_digest
from wamedia.crypto.keys import MEDIA_INFO_BY_TYPE, MEDIA_KEYS_INFO, info_for_media_type
from wamedia.crypto.media import decrypt_media
from wamedia.crypto.sniffer import sniff_media_type

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Descriptografa mídia do WhatsApp (.enc).")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--url", help="URL da mídia criptografada (campo `url` da mensagem).")
    source.add_argument("--input", type=Path, help="Arquivo .enc já baixado.")
    parser.add_argument("--media-key", required=True, help="mediaKey em base64.")
    parser.add_argument("-o", "--output", type=Path, required=True, help="Destino da mídia descriptografada.")
    parser.add_argument(
        "--media-type",
        choices=sorted(MEDIA_INFO_BY_TYPE),
        help="Usa a info string do HKDF específica do tipo (ex.: 'WhatsApp Audio Keys').",
    )
    parser.add_argument("--file-sha256", help="fileSha256 esperado (base64).")
    parser.add_argument("--file-enc-sha256", help="fileEncSha256 esperado (base64).")
    parser.add_argument("--timeout", type=float, default=30.0)
    return parser


def _load_encrypted(args: argparse.Namespace) -> bytes:
    if args.input:
        return args.input.read_bytes()
    logger.info(f"Baixando mídia de: {args.url}")
    response = requests.get(args.url, timeout=args.timeout)
    response.raise_for_status()
    return response.content


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    args = _build_parser().parse_args(argv)

    try:
        encrypted = _load_encrypted(args)
    except (OSError, requests.exceptions.RequestException) as e:
        logger.error(f"Erro ao obter a mídia criptografada: {e}")
        return 1

    logger.info(f"Tamanho do blob criptografado: {len(encrypted)} bytes")

    if args.file_enc_sha256 and not verify_ciphertext_digest(encrypted, args.file_enc_sha256):
        logger.error("Hash do arquivo criptografado não confere.")
        return 1

    info = info_for_media_type(args.media_type) if args.media_type else MEDIA_KEYS_INFO
    try:
        plain = decrypt_media(args.media_key, encrypted, info)
    except MediaCryptoError as e:
        logger.error(f"FALHA ({type(e).__name__}): {e}")
        return 1

    if args.file_sha256 and not verify_plaintext_digest(plain, args.file_sha256):
        logger.error("Hash do arquivo descriptografado não confere.")
        return 1

    args.output.write_bytes(plain)
    logger.info(f"SUCESSO! {len(plain)} bytes ({sniff_media_type(plain)}) gravados em {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
