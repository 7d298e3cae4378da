from typing import Iterable

from fastapi import status
from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send


class PayloadSizeLimiter:
    """
    Refuse script-carrying requests whose declared Content-Length exceeds
    max_bytes. Only paths under the given prefixes are checked.
    """

    def __init__(self, app: ASGIApp, max_bytes: int, path_prefixes: Iterable[str]):
        self.app = app
        self.max_bytes = max_bytes
        self.path_prefixes = tuple(path_prefixes)

    def _declared_size(self, scope: Scope) -> int:
        content_length = Headers(scope=scope).get("content-length", "")
        return int(content_length) if content_length.isdigit() else 0

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] == "http" and scope["path"].startswith(self.path_prefixes):
            size = self._declared_size(scope)
            if size > self.max_bytes:
                response = JSONResponse(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    content={
                        "detail": f"Script is too large. Maximum size is {self.max_bytes} bytes.",
                        "max_size_bytes": self.max_bytes,
                    },
                )
                await response(scope, receive, send)
                return

        await self.app(scope, receive, send)
