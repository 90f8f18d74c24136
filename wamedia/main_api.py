import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wamedia.api.middleware import BodySizeLimitMiddleware
from wamedia.api.routers import media, system
from wamedia.services.media_downloader import media_downloader
from wamedia.services.media_service import MediaRequestError
from wamedia.services.rate_limiter import SlidingWindowRateLimiter
from .config import settings

logging.basicConfig(level=settings.LOG_LEVEL)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await media_downloader.close()


app = FastAPI(
    title="WhatsApp Media Decrypt API",
    description="Descriptografa mídias do WhatsApp (áudio, imagem, vídeo, documento) e devolve em base64.",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.state.rate_limiter = SlidingWindowRateLimiter(
    max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
)


def _client_key(request: Request) -> str:
    # Atrás de proxy (Vercel, nginx) o IP real vem no X-Forwarded-For
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@app.middleware("http")
async def guard_requests(request: Request, call_next):
    limiter: SlidingWindowRateLimiter = request.app.state.rate_limiter
    key = _client_key(request)
    if not limiter.allow(key):
        logger.warning("main_api.rate_limited", client=key, path=request.url.path)
        return JSONResponse(
            status_code=429,
            content={"error": "Muitas requisições. Tente novamente em 15 minutos."},
            headers={"Retry-After": str(limiter.retry_after(key))},
        )
    return await call_next(request)


app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.MAX_REQUEST_BYTES)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(media.router)
app.include_router(system.router)


@app.exception_handler(MediaRequestError)
async def media_request_error_handler(request: Request, exc: MediaRequestError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        field = ".".join(loc)
        details.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    error = MediaRequestError(400, "Dados de mídia inválidos", details=details)
    return JSONResponse(status_code=error.status_code, content=error.to_content())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse(
            status_code=404,
            content={
                "error": "Endpoint não encontrado",
                "message": "Consulte /health para ver os endpoints disponíveis",
            },
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("main_api.unhandled_error", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Erro interno do servidor",
            "message": "Erro interno" if settings.is_production else str(exc),
        },
    )
