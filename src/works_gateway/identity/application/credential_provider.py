from __future__ import annotations

import asyncio
import time
from typing import Optional

import httpx

from works_gateway.identity.infrastructure.assertion_service import AssertionService
from works_gateway.shared.exceptions import AuthError
from works_gateway.shared.logging import get_logger

logger = get_logger(__name__)

JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"


class CredentialProvider:
    """
    Mints bot access tokens.

    With cache_seconds == 0 every call signs a new assertion and exchanges it.
    A positive value keeps one token in memory for that many seconds.
    """

    def __init__(
        self,
        *,
        assertion_service: AssertionService,
        http_client: httpx.AsyncClient,
        auth_url: str,
        client_id: str,
        client_secret: str,
        scope: str = "bot",
        cache_seconds: int = 0,
    ) -> None:
        self._assertions = assertion_service
        self._http = http_client
        self._auth_url = auth_url
        self._client_id = client_id
        self._client_secret = client_secret
        self._scope = scope
        self._cache_seconds = cache_seconds
        self._cached: Optional[str] = None
        self._cached_until = 0.0
        self._lock = asyncio.Lock()

    def issue_assertion(self) -> str:
        return self._assertions.issue_assertion()

    async def exchange_for_token(self, assertion: str) -> str:
        """POST the assertion to the token endpoint and return access_token."""
        if not assertion:
            raise AuthError("No assertion was supplied for the token exchange.")

        form = {
            "assertion": assertion,
            "grant_type": JWT_BEARER_GRANT,
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "scope": self._scope,
        }
        try:
            r = await self._http.post(self._auth_url, data=form)
            r.raise_for_status()
            data = r.json()
        except httpx.HTTPStatusError as e:
            logger.error("token_exchange_failed", status=e.response.status_code, body=e.response.text)
            raise AuthError(
                f"Failed to obtain a server access token: HTTP {e.response.status_code}",
                details={"upstream_status": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            logger.error("token_exchange_failed", error=str(e))
            raise AuthError(f"Failed to obtain a server access token: {e}") from e
        except ValueError as e:
            raise AuthError("Token endpoint returned a non-JSON response.") from e

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise AuthError("Failed to obtain a server access token: access_token missing from response.")
        logger.info("token_exchanged", expires_in=data.get("expires_in"))
        return token

    async def get_access_token(self) -> str:
        if self._cache_seconds <= 0:
            return await self.exchange_for_token(self.issue_assertion())

        async with self._lock:
            now = time.monotonic()
            if self._cached and now < self._cached_until:
                return self._cached
            token = await self.exchange_for_token(self.issue_assertion())
            self._cached = token
            self._cached_until = now + self._cache_seconds
            return token
