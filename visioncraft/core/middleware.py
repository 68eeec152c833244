import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# Room for multipart boundaries and the small client fields sent with the image
MULTIPART_OVERHEAD_BYTES = 64 * 1024


class UploadSizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Guards the upload route on its Content-Length header, before the body is
    read. Oversized declarations get 413; bodies without a usable length
    (chunked transfer) get 411.
    """

    def __init__(self, app, max_bytes: int, path_suffix: str = "/upload-image"):
        super().__init__(app)
        self.max_body_bytes = max_bytes + MULTIPART_OVERHEAD_BYTES
        self.path_suffix = path_suffix

    async def dispatch(self, request: Request, call_next):
        if request.method == "POST" and request.url.path.rstrip("/").endswith(self.path_suffix):
            declared = request.headers.get("content-length", "").strip()
            if not declared.isdigit():
                logger.warning("Upload rejected: no Content-Length header")
                return JSONResponse(
                    status_code=411,
                    content={"success": False, "message": "Content-Length required"},
                )
            if int(declared) > self.max_body_bytes:
                logger.warning(f"Upload rejected before reading body: Content-Length={declared}")
                return JSONResponse(
                    status_code=413,
                    content={"success": False, "message": "File too large"},
                )
        return await call_next(request)
