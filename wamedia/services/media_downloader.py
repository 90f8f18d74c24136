from typing import Optional

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from wamedia.config import settings

logger = structlog.get_logger(__name__)

RETRYABLE_EXCEPTIONS = (
    httpx.RequestError,
    httpx.HTTPStatusError,
)

PERMANENT_REQUEST_ERRORS = (
    httpx.UnsupportedProtocol,
    httpx.InvalidURL,
)


class MediaDownloadError(Exception):
    """Falha ao baixar o blob criptografado do CDN."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _is_retryable_status(e: BaseException) -> bool:
    """Verifica se o status HTTP da exceção justifica uma nova tentativa."""
    if isinstance(e, httpx.HTTPStatusError):
        status_code = e.response.status_code
        # 5xx para erros de servidor, 429 para limite de taxa
        return status_code >= 500 or status_code == 429
    # URL malformada não melhora com retry
    return not isinstance(e, PERMANENT_REQUEST_ERRORS)


class MediaDownloader:
    """
    Cliente HTTP assíncrono para baixar mídia criptografada (mmg.whatsapp.net).

    - Retry com backoff exponencial para erros de rede, 5xx e 429.
    - Download em streaming, abortado assim que passa do limite de tamanho.
    - Suporte a gerenciamento de contexto (`async with`).
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_retries: int = 3,
        max_bytes: int = 100 * 1024 * 1024,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.max_retries = max_retries
        self.max_bytes = max_bytes
        self.client = httpx.AsyncClient(
            timeout=timeout, follow_redirects=True, transport=transport
        )

    def _too_large(self, size: int) -> MediaDownloadError:
        return MediaDownloadError(f"Arquivo excede o limite de {self.max_bytes} bytes ({size})")

    async def _read_limited(self, response: httpx.Response) -> bytes:
        declared = response.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > self.max_bytes:
            raise self._too_large(int(declared))

        content = bytearray()
        async for chunk in response.aiter_bytes():
            content.extend(chunk)
            if len(content) > self.max_bytes:
                raise self._too_large(len(content))
        return bytes(content)

    async def _fetch(self, url: str) -> bytes:
        @retry(
            retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS) & retry_if_exception(_is_retryable_status),
            wait=wait_exponential(multiplier=1, min=1, max=8),
            stop=stop_after_attempt(self.max_retries),
            reraise=True,
            before_sleep=lambda retry_state: logger.warning(
                "media_downloader.retry",
                attempt=retry_state.attempt_number,
                sleep=retry_state.next_action.sleep,
            ),
        )
        async def _send() -> bytes:
            async with self.client.stream("GET", url) as response:
                response.raise_for_status()
                return await self._read_limited(response)

        return await _send()

    async def download(self, url: str) -> bytes:
        """Baixa o blob inteiro em memória, respeitando `max_bytes`."""
        try:
            content = await self._fetch(url)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error("media_downloader.download.http_error", status=status)
            raise MediaDownloadError(f"HTTP error! status: {status}", status_code=status) from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            logger.error("media_downloader.download.request_error", error=str(e))
            raise MediaDownloadError(f"Erro ao baixar arquivo: {e}") from e

        logger.debug("media_downloader.download.ok", size=len(content))
        return content

    async def head(self, url: str) -> httpx.Response:
        """HEAD simples, sem retry e sem exigir 2xx."""
        try:
            return await self.client.head(url)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise MediaDownloadError(str(e)) from e

    async def close(self):
        """Fecha a sessão do cliente httpx."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


media_downloader = MediaDownloader(
    timeout=settings.DOWNLOAD_TIMEOUT_SECONDS,
    max_retries=settings.DOWNLOAD_MAX_RETRIES,
    max_bytes=settings.MAX_MEDIA_BYTES,
)
