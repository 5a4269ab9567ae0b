"""
Security headers for API and static frontend responses.
"""
import logging
from typing import Dict, Optional
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)


DEFAULT_CSP = {
    "default-src": "'self'",
    "script-src": "'self'",
    "style-src": "'self' 'unsafe-inline'",
    "img-src": "'self' data: blob:",
    "connect-src": "'self'",
    "frame-ancestors": "'none'",
    "base-uri": "'self'",
    "form-action": "'self'",
}

STATIC_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def build_csp_header(csp_dict: Dict[str, str]) -> str:
    return "; ".join(f"{key} {value}" for key, value in csp_dict.items())


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add Content-Security-Policy and related headers to every response."""

    def __init__(self, app, csp_overrides: Optional[Dict[str, str]] = None):
        super().__init__(app)
        csp = DEFAULT_CSP.copy()
        if csp_overrides:
            csp.update(csp_overrides)
        self.csp_header = build_csp_header(csp)

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["Content-Security-Policy"] = self.csp_header
        for name, value in STATIC_HEADERS.items():
            response.headers[name] = value
        return response
