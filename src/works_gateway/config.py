# src/works_gateway/config.py

import base64
import binascii
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from works_gateway.shared.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Central application settings (Pydantic v2).

    - Env keys match the deployment environment:
      CLIENT_ID, CLIENT_SECRET, SERVICE_ACCOUNT, PRIVATE_KEY (base64 PEM),
      BOT_ID, BASIC_ID, BASIC_PASS, PORT, NODE_ENV
    - Secrets are validated lazily by `private_key_pem()` so the app can be
      imported without them; startup fails if they are missing.
    """

    # ------------------------------------------------------------------------------------
    # App / API
    # ------------------------------------------------------------------------------------
    PROJECT_NAME: str = Field(default="works-bot-gateway", alias="APP_NAME")
    ENVIRONMENT: str = Field(
        default="development",
        validation_alias=AliasChoices("APP_ENV", "NODE_ENV", "ENVIRONMENT"),
    )
    PROJECT_VERSION: str = Field(default="1.0.0")
    PORT: int = Field(default=8080)
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: Optional[str] = Field(default=None, description="json | console")

    # ------------------------------------------------------------------------------------
    # LINE WORKS service account
    # ------------------------------------------------------------------------------------
    CLIENT_ID: str = Field(default="")
    CLIENT_SECRET: str = Field(default="")
    SERVICE_ACCOUNT: str = Field(default="")
    PRIVATE_KEY: Optional[str] = Field(default=None, description="base64 encoded PEM private key")
    BOT_ID: str = Field(default="")

    API_BASE_URL: str = Field(default="https://www.worksapis.com/v1.0")
    AUTH_URL: str = Field(default="https://auth.worksmobile.com/oauth2/v2.0/token")

    # None keeps httpx from timing out at all
    HTTP_TIMEOUT_SECONDS: Optional[float] = Field(default=None)
    # 0 mints a fresh token for every request
    TOKEN_CACHE_SECONDS: int = Field(default=0, ge=0)

    # ------------------------------------------------------------------------------------
    # Basic auth
    # ------------------------------------------------------------------------------------
    BASIC_ID: str = Field(default="")
    BASIC_PASS: str = Field(default="")

    # ------------------------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------------------------
    UPLOAD_DIR: str = Field(default="uploads")
    ATTACHMENT_STAGING_ONLY: bool = Field(default=False)

    # ------------------------------------------------------------------------------------
    # Helper properties
    # ------------------------------------------------------------------------------------
    @property
    def is_dev(self) -> bool:
        return self.ENVIRONMENT.lower() in {"dev", "development", "local", "test"}

    @property
    def is_prod(self) -> bool:
        return self.ENVIRONMENT.lower() in {"prod", "production"}

    @property
    def log_format(self) -> Optional[str]:
        return self.LOG_FORMAT

    @property
    def log_level(self) -> str:
        return self.LOG_LEVEL

    @property
    def api_base(self) -> str:
        return self.API_BASE_URL.rstrip("/")

    def require_basic_auth(self) -> None:
        if not self.BASIC_ID or not self.BASIC_PASS:
            raise ConfigurationError("BASIC_ID and BASIC_PASS must be set.")

    def private_key_pem(self) -> str:
        """Decode PRIVATE_KEY into PEM text or raise ConfigurationError."""
        if not self.PRIVATE_KEY:
            raise ConfigurationError("PRIVATE_KEY is not set; check the environment.")
        try:
            pem = base64.b64decode(self.PRIVATE_KEY, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ConfigurationError("PRIVATE_KEY must be a base64 encoded PEM key.") from exc
        if "PRIVATE KEY-----" not in pem:
            raise ConfigurationError("PRIVATE_KEY does not contain a PEM private key.")
        return pem

    # ------------------------------------------------------------------------------------
    # Pydantic v2 settings config
    # ------------------------------------------------------------------------------------
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "populate_by_name": True,   # enable aliases
        "extra": "ignore",          # don't crash on unrelated env keys
    }


@lru_cache()
def get_settings() -> Settings:
    return Settings()
