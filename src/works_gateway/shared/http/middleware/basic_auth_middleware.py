"""
Basic Authentication Middleware
Challenge-based HTTP Basic auth for every route except health probes.
"""
from __future__ import annotations

import base64
import binascii
import secrets
from typing import Any, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from works_gateway.shared.logging import get_logger

logger = get_logger(__name__)


class BasicAuthMiddleware(BaseHTTPMiddleware):
    """
    Validates the Authorization: Basic header against configured credentials.

    Unauthenticated requests get 401 with a WWW-Authenticate challenge so
    browsers prompt for credentials.

    Attributes:
        excluded_paths: Paths (and their sub-paths) that skip authentication
    """

    def __init__(
        self,
        app: Any,
        *,
        username: str,
        password: str,
        realm: str = "works-gateway",
        excluded_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self._username = username
        self._password = password
        self._realm = realm
        self.excluded_paths = ["/health"] if excluded_paths is None else excluded_paths

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        path = request.url.path
        if any(path == p or path.startswith(p.rstrip("/") + "/") for p in self.excluded_paths):
            return await call_next(request)

        credentials = self._parse(request.headers.get("Authorization"))
        if credentials is None or not self._matches(*credentials):
            logger.warning("basic_auth_rejected", path=request.url.path)
            return PlainTextResponse(
                "Unauthorized",
                status_code=401,
                headers={"WWW-Authenticate": f'Basic realm="{self._realm}"'},
            )
        return await call_next(request)

    def _matches(self, username: str, password: str) -> bool:
        # Both comparisons always run
        user_ok = secrets.compare_digest(username.encode("utf-8"), self._username.encode("utf-8"))
        pass_ok = secrets.compare_digest(password.encode("utf-8"), self._password.encode("utf-8"))
        return user_ok and pass_ok

    @staticmethod
    def _parse(header: Optional[str]) -> Optional[Tuple[str, str]]:
        if not header:
            return None
        scheme, _, encoded = header.partition(" ")
        if scheme.lower() != "basic" or not encoded:
            return None
        try:
            decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return None
        username, sep, password = decoded.partition(":")
        if not sep:
            return None
        return username, password
