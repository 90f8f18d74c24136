import unittest

import httpx

from wamedia.services.media_downloader import MediaDownloadError, MediaDownloader

URL = "https://mmg.whatsapp.net/v/t62.7117-24/file.enc"


class TestMediaDownloader(unittest.IsolatedAsyncioTestCase):

    def _downloader(self, handler, **kwargs):
        downloader = MediaDownloader(transport=httpx.MockTransport(handler), **kwargs)
        self.addAsyncCleanup(downloader.close)
        return downloader

    async def test_download_ok(self):
        downloader = self._downloader(lambda request: httpx.Response(200, content=b"blob"))
        self.assertEqual(await downloader.download(URL), b"blob")

    async def test_client_error_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(404)

        downloader = self._downloader(handler, max_retries=3)
        with self.assertRaises(MediaDownloadError) as ctx:
            await downloader.download(URL)
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(len(calls), 1)

    async def test_server_error_is_retried(self):
        responses = [httpx.Response(503), httpx.Response(200, content=b"ok")]
        downloader = self._downloader(lambda request: responses.pop(0), max_retries=2)
        self.assertEqual(await downloader.download(URL), b"ok")

    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("conexão recusada", request=request)

        downloader = self._downloader(handler, max_retries=1)
        with self.assertRaises(MediaDownloadError):
            await downloader.download(URL)

    async def test_size_limit(self):
        downloader = self._downloader(lambda request: httpx.Response(200, content=b"x" * 11), max_bytes=10)
        with self.assertRaises(MediaDownloadError):
            await downloader.download(URL)

    async def test_unsupported_protocol_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.UnsupportedProtocol("protocolo não suportado", request=request)

        downloader = self._downloader(handler, max_retries=3)
        with self.assertRaises(MediaDownloadError):
            await downloader.download(URL)
        self.assertEqual(len(calls), 1)

    async def test_declared_length_over_limit(self):
        downloader = self._downloader(
            lambda request: httpx.Response(200, headers={"content-length": "999999"}, content=b"x"),
            max_bytes=10,
        )
        with self.assertRaises(MediaDownloadError):
            await downloader.download(URL)

    async def test_chunked_body_aborts_at_limit(self):
        sent = []

        async def chunks():
            for _ in range(100):
                sent.append(4)
                yield b"abcd"

        downloader = self._downloader(lambda request: httpx.Response(200, content=chunks()), max_bytes=10)
        with self.assertRaises(MediaDownloadError):
            await downloader.download(URL)
        self.assertLess(len(sent), 100)

    async def test_chunked_body_within_limit(self):
        async def chunks():
            yield b"abc"
            yield b"def"

        downloader = self._downloader(lambda request: httpx.Response(200, content=chunks()), max_bytes=10)
        self.assertEqual(await downloader.download(URL), b"abcdef")

    async def test_head(self):
        def handler(request):
            self.assertEqual(request.method, "HEAD")
            return httpx.Response(200, headers={"content-type": "application/octet-stream"})

        downloader = self._downloader(handler)
        response = await downloader.head(URL)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["content-type"], "application/octet-stream")

    async def test_context_manager(self):
        async with MediaDownloader(transport=httpx.MockTransport(lambda r: httpx.Response(200))) as d:
            self.assertFalse(d.client.is_closed)
        self.assertTrue(d.client.is_closed)


if __name__ == "__main__":
    unittest.main()
