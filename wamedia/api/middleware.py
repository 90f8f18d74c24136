from fastapi import HTTPException
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

REQUEST_TOO_LARGE = "Corpo da requisição muito grande"


class BodySizeLimitMiddleware:
    """
    Limita o corpo da requisição pelo que realmente chega, não só pelo
    Content-Length declarado (requisições chunked não trazem o cabeçalho).
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared and declared.isdigit() and int(declared) > self.max_bytes:
            response = JSONResponse(status_code=413, content={"error": REQUEST_TOO_LARGE})
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    # FastAPI repassa HTTPException levantada durante a leitura do corpo
                    raise HTTPException(status_code=413, detail=REQUEST_TOO_LARGE)
            return message

        await self.app(scope, limited_receive, send)
