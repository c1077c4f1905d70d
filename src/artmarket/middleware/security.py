from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from artmarket.config import settings

# Headers applied to every response. The API only returns JSON, so the
# policy denies everything except images from the public storage bucket.
_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=(), payment=()",
    "Content-Security-Policy": (
        "default-src 'none'; "
        f"img-src 'self' {settings.STORAGE_PUBLIC_URL}; "
        "frame-ancestors 'none'"
    ),
}

_HSTS_VALUE = "max-age=31536000; includeSubDomains"


def _apply_security_headers(response: Response, is_https: bool) -> None:
    """Set standard security headers on a response."""
    for name, value in _SECURITY_HEADERS.items():
        response.headers[name] = value
    if is_https:
        response.headers["Strict-Transport-Security"] = _HSTS_VALUE


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds standard security headers to every HTTP response."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        _apply_security_headers(response, is_https=request.url.scheme == "https")
        return response
