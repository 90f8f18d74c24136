# wamedia/crypto/sniffer.py
from dataclasses import dataclass
from typing import Tuple

FALLBACK_MIME_TYPE = "application/octet-stream"
SNIFF_WINDOW = 12


@dataclass(frozen=True)
class MediaTypeSignature:
    patterns: Tuple[bytes, ...]
    mime_type: str
    offset: int = 0

    def matches(self, head: bytes) -> bool:
        for pattern in self.patterns:
            end = self.offset + len(pattern)
            if len(head) >= end and head[self.offset:end] == pattern:
                return True
        return False


# A ordem importa: a primeira assinatura que casar vence
SIGNATURES: Tuple[MediaTypeSignature, ...] = (
    MediaTypeSignature((b"\xff\xd8\xff\xe0", b"\xff\xd8\xff\xe1"), "image/jpeg"),
    MediaTypeSignature((b"\x89PNG\r\n\x1a\n",), "image/png"),
    MediaTypeSignature((b"OggS",), "audio/ogg"),
    MediaTypeSignature((b"fLaC",), "audio/flac"),
    MediaTypeSignature((b"\x00\x00\x00\x18", b"\x00\x00\x00\x20"), "video/mp4"),
    MediaTypeSignature((b"ID3", b"\xff\xfb"), "audio/mpeg"),
)


def sniff_media_type(data: bytes) -> str:
    """Detecta o tipo MIME pelos magic bytes, ignorando o mimetype declarado."""
    head = bytes(data[:SNIFF_WINDOW])
    for signature in SIGNATURES:
        if signature.matches(head):
            return signature.mime_type
    return FALLBACK_MIME_TYPE
