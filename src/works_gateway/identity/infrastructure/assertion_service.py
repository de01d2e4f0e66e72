"""
Assertion Service - signed JWT assertions for the JWT-bearer grant
External adapter for PyJWT RS256 signing
"""
from __future__ import annotations

import time
from typing import Any, Dict, Optional

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from works_gateway.config import Settings
from works_gateway.shared.exceptions import ConfigurationError
from works_gateway.shared.logging import get_logger

logger = get_logger(__name__)


class AssertionService:
    """
    Builds the service-account assertion exchanged for a bot access token.

    Claims: iss=client id, sub=service account, aud=token endpoint,
    iat=now, exp=iat + 1 hour. Signed with RS256.
    """

    ASSERTION_TTL_SECONDS = 60 * 60
    ALGORITHM = "RS256"

    def __init__(
        self,
        *,
        client_id: str,
        service_account: str,
        private_key_pem: str,
        audience: str,
    ) -> None:
        """
        Initialize assertion service.

        Args:
            client_id: OAuth client id (issuer)
            service_account: Service account id (subject)
            private_key_pem: PEM encoded RSA private key
            audience: Token endpoint URL

        Raises:
            ConfigurationError: If the key cannot be loaded as an RSA private key
        """
        if not client_id or not service_account:
            raise ConfigurationError("CLIENT_ID and SERVICE_ACCOUNT must be set.")
        try:
            self._private_key = serialization.load_pem_private_key(
                private_key_pem.encode("utf-8"), password=None
            )
        except (ValueError, TypeError) as exc:
            raise ConfigurationError("PRIVATE_KEY is not a valid PEM private key.") from exc
        # RS256 needs an RSA key
        if not isinstance(self._private_key, rsa.RSAPrivateKey):
            raise ConfigurationError("PRIVATE_KEY must be an RSA private key.")
        self._client_id = client_id
        self._service_account = service_account
        self._audience = audience

    @classmethod
    def from_settings(cls, settings: Settings) -> "AssertionService":
        return cls(
            client_id=settings.CLIENT_ID,
            service_account=settings.SERVICE_ACCOUNT,
            private_key_pem=settings.private_key_pem(),
            audience=settings.AUTH_URL,
        )

    def build_claims(self, issued_at: Optional[int] = None) -> Dict[str, Any]:
        iat = int(time.time()) if issued_at is None else issued_at
        return {
            "iss": self._client_id,
            "sub": self._service_account,
            "aud": self._audience,
            "iat": iat,
            "exp": iat + self.ASSERTION_TTL_SECONDS,
        }

    def issue_assertion(self) -> str:
        """
        Sign a fresh assertion.

        Returns:
            Encoded JWT string
        """
        claims = self.build_claims()
        token = jwt.encode(claims, self._private_key, algorithm=self.ALGORITHM)
        logger.debug("assertion_issued", expires_at=claims["exp"])
        return token
