import logging
import time
import uuid
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send
from starlette.requests import Request

log = logging.getLogger(__name__)

class RequestTimingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.3f}"

        log.info(
            "Request %s: %s %s -> %s in %.3fs",
            request_id, request.method, request.url.path, response.status_code, process_time,
        )
        return response

class RequestSizeLimitMiddleware:
    """
        Rejects request bodies larger than ``max_bytes`` with 413.

        A declared Content-Length is checked up front. Bodies without one
        (chunked uploads) are read and counted before the app sees them, then
        replayed; reading stops as soon as the running total passes the limit.
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                await JSONResponse(status_code=400, content={"error": "Invalid Content-Length header"})(scope, receive, send)
                return
            if declared > self.max_bytes:
                await self.reject(scope, receive, send, declared)
                return
            await self.app(scope, receive, send)
            return

        chunks = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            body = message.get("body", b"")
            received += len(body)
            if received > self.max_bytes:
                await self.reject(scope, receive, send, received)
                return
            chunks.append(body)
            more_body = message.get("more_body", False)

        buffered = b"".join(chunks)
        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": buffered, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)

    async def reject(self, scope: Scope, receive: Receive, send: Send, size: int):
        log.warning("Rejected %s %s: body of at least %d bytes exceeds %d", scope.get("method"), scope.get("path"), size, self.max_bytes)
        await JSONResponse(status_code=413, content={"error": "Request entity too large"})(scope, receive, send)
