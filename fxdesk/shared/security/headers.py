"""
Secure HTTP headers middleware.

Every HTTP response gets the hardening headers below. Headers a route
sets itself (the SSE stream sets its own ``Cache-Control``) are kept.
WebSocket traffic does not pass through this middleware.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

HARDENING_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'self'",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    "Cache-Control": "no-store",
}

# Debug-only docs pages load their UI bundle from a CDN.
CSP_EXEMPT_PATHS = ("/docs", "/redoc")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds the hardening headers to each response that lacks them."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        skip_csp = request.url.path.startswith(CSP_EXEMPT_PATHS)
        for name, value in HARDENING_HEADERS.items():
            if skip_csp and name == "Content-Security-Policy":
                continue
            if name not in response.headers:
                response.headers[name] = value
        return response
