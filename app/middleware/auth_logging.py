from fastapi import Request
import logging
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("app")

# Endpoints that always require a bearer token
PROTECTED_PREFIXES = ("/users/me", "/feed/mentions", "/follows/")

class AuthLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if not request.headers.get("Authorization"):
            if any(prefix in path for prefix in PROTECTED_PREFIXES):
                logger.warning(f"Protected endpoint {path} accessed without auth header")

        response = await call_next(request)

        # Log auth-related status codes
        if response.status_code in (401, 403):
            logger.warning(f"Auth error: {response.status_code} on {request.method} {path}")

        return response
