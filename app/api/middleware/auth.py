"""
Bearer-token authentication for the HTTP API.

The verified JWT payload is stored on ``request.state.user``; route
dependencies read the caller's id from its ``sub`` claim. The realtime
WebSocket is not covered here because it authenticates with a ``token``
query parameter inside its own route.
"""

import logging
from collections.abc import Callable
from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.api.exception_handlers import error_body
from app.services.token_service import TokenService

logger = logging.getLogger(__name__)


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Rejects API calls without a valid bearer token with a 401 error body."""

    OPEN_PATHS: tuple[str, ...] = ("/health", "/docs", "/redoc", "/openapi.json")

    def __init__(self, app: ASGIApp, token_service: TokenService | None = None, api_prefix: str = "/api/v1") -> None:
        super().__init__(app)
        self._token_service = token_service or TokenService()
        self._open_paths = self.OPEN_PATHS + (f"{api_prefix}/docs", f"{api_prefix}/redoc")

    def _is_open(self, path: str) -> bool:
        return any(path == open_path or path.startswith(f"{open_path}/") for open_path in self._open_paths)

    @staticmethod
    def _bearer_token(request: Request) -> str | None:
        scheme, _, token = request.headers.get("Authorization", "").partition(" ")
        if scheme.lower() != "bearer" or not token.strip() or " " in token.strip():
            return None
        return token.strip()

    @staticmethod
    def _reject(message: str) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=error_body(status.HTTP_401_UNAUTHORIZED, "UNAUTHORIZED", message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> JSONResponse:
        # CORS preflight carries no credentials
        if request.method == "OPTIONS" or self._is_open(request.url.path):
            return await call_next(request)

        token = self._bearer_token(request)
        if token is None:
            logger.warning(f"No bearer token on {request.method} {request.url.path}")
            return self._reject("Authentication required")

        if not self._token_service.verify_token(token):
            logger.warning(f"Rejected token on {request.method} {request.url.path}")
            return self._reject("Invalid or expired token")

        request.state.user = self._token_service.decode_token(token)
        return await call_next(request)
