# backend/iaprof/core/middleware.py

import re
import time
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .constants import LoggingConstants
from .logging import clear_request_context, generate_request_id, get_logger, set_request_context

SECURITY_HEADERS = {
    "Strict-Transport-Security": "max-age=63072000; includeSubDomains; preload",
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    # /docs do FastAPI carrega swagger-ui do jsdelivr
    "Content-Security-Policy": (
        "default-src 'self'; img-src 'self' data: https://fastapi.tiangolo.com; "
        "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net;"
    ),
}

SESSION_PATH_RE = re.compile(r"/sessions/([A-Za-z0-9_-]+)")
QUIET_PATHS = frozenset({"/health", "/favicon.ico"})


def session_id_from_path(path: str) -> Optional[str]:
    match = SESSION_PATH_RE.search(path)
    return match.group(1) if match else None


def client_ip(request: Request) -> str:
    # atrás de proxy reverso o IP real vem no X-Forwarded-For
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("x-real-ip") or (request.client.host if request.client else "unknown")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Uma linha de log na entrada e outra na saída, com request_id e session_id."""

    logger = get_logger("middleware.request")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = generate_request_id()
        set_request_context(request_id, session_id_from_path(request.url.path))
        quiet = request.url.path in QUIET_PATHS
        started = time.time()
        fields = {"method": request.method, "path": request.url.path}

        try:
            if not quiet:
                self.logger.info("Request started", client_ip=client_ip(request), **fields)
            try:
                response = await call_next(request)
            except Exception as exc:
                self.logger.error(
                    "Unhandled exception during request",
                    duration_ms=round((time.time() - started) * 1000, 2),
                    error=str(exc),
                    error_type=type(exc).__name__,
                    **fields,
                )
                raise

            response.headers["X-Request-ID"] = request_id
            if not quiet:
                self._log_response(response.status_code, round((time.time() - started) * 1000, 2), fields)
            return response
        finally:
            clear_request_context()

    def _log_response(self, status_code: int, duration_ms: float, fields: dict) -> None:
        fields = dict(fields, status_code=status_code, duration_ms=duration_ms)
        if status_code >= 500:
            self.logger.error("Request finished with server error", **fields)
        elif status_code >= 400:
            self.logger.warning("Request finished with client error", **fields)
        elif duration_ms > LoggingConstants.SLOW_REQUEST_THRESHOLD_MS:
            # correções de redação com o modelo pro costumam passar do limite
            self.logger.warning("Slow request", **fields)
        else:
            self.logger.info("Request finished", **fields)
