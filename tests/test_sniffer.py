import unittest

from media_fixtures import JPEG_HEADER, OGG_HEADER, PNG_HEADER

from wamedia.crypto.sniffer import FALLBACK_MIME_TYPE, SIGNATURES, sniff_media_type


def _pad(header, length=64):
    """Completa *header* com bytes 0x01 até *length*."""
    return header + b"\x01" * (length - len(header))


class TestSniffMediaType(unittest.TestCase):

    def test_known_signatures(self):
        cases = [
            (JPEG_HEADER, "image/jpeg"),
            (b"\xff\xd8\xff\xe1\x00\x00Exif", "image/jpeg"),
            (PNG_HEADER, "image/png"),
            (OGG_HEADER, "audio/ogg"),
            (b"fLaC\x00\x00\x00\x22", "audio/flac"),
            (b"\x00\x00\x00\x18ftypmp42", "video/mp4"),
            (b"\x00\x00\x00\x20ftypisom", "video/mp4"),
            (b"ID3\x04\x00", "audio/mpeg"),
            (b"\xff\xfb\x90\x64", "audio/mpeg"),
        ]
        for data, expected in cases:
            with self.subTest(expected=expected, data=data[:4]):
                self.assertEqual(sniff_media_type(_pad(data)), expected)

    def test_fallback(self):
        self.assertEqual(sniff_media_type(_pad(b"\x13\x37random")), FALLBACK_MIME_TYPE)
        self.assertEqual(sniff_media_type(b""), FALLBACK_MIME_TYPE)

    def test_other_jpeg_markers_fall_through(self):
        self.assertEqual(sniff_media_type(_pad(b"\xff\xd8\xff\xdb")), FALLBACK_MIME_TYPE)

    def test_short_data_never_matches_longer_pattern(self):
        self.assertEqual(sniff_media_type(b"\x89PNG"), FALLBACK_MIME_TYPE)
        self.assertEqual(sniff_media_type(b"\xff\xd8\xff"), FALLBACK_MIME_TYPE)
        self.assertEqual(sniff_media_type(b"ID3"), "audio/mpeg")

    def test_only_first_12_bytes_are_inspected(self):
        self.assertEqual(sniff_media_type(b"\x01" * 12 + b"OggS"), FALLBACK_MIME_TYPE)

    def test_priority_order(self):
        labels = [s.mime_type for s in SIGNATURES]
        self.assertEqual(
            labels,
            ["image/jpeg", "image/png", "audio/ogg", "audio/flac", "video/mp4", "audio/mpeg"],
        )

    def test_accepts_bytearray(self):
        self.assertEqual(sniff_media_type(bytearray(PNG_HEADER)), "image/png")


if __name__ == "__main__":
    unittest.main()
