"""Path-prefix gate in front of the protected pages and API routes.

The gate only checks that a well-formed, unexpired access token is present.
Handlers still resolve the user through ``get_current_user``.
"""

import logging
from urllib.parse import urlencode

from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ideahub.api.deps import extract_token
from ideahub.core.security import read_access_token

logger = logging.getLogger(__name__)

PROTECTED_PATHS = ("/ideas", "/api/v1/ideas", "/api/v1/idea-topics")
AUTH_PAGES = ("/auth/login", "/auth/signup")
LOGIN_PAGE = "/auth/login"
HOME_PAGE = "/ideas"


def is_protected(path: str) -> bool:
    return any(path.startswith(prefix) for prefix in PROTECTED_PATHS)


class AuthGateMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        authenticated = read_access_token(extract_token(request)) is not None

        if not authenticated and is_protected(path):
            if path.startswith("/api"):
                logger.debug("Rejected unauthenticated request to %s", path)
                return JSONResponse(
                    {"error": "Authentication required"}, status_code=401
                )
            query = urlencode({"redirectTo": path})
            return RedirectResponse(f"{LOGIN_PAGE}?{query}", status_code=303)

        if authenticated and path in AUTH_PAGES:
            return RedirectResponse(HOME_PAGE, status_code=303)

        return await call_next(request)
