import base64

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient

from tests.fakes import API_BASE, AUTH_URL, BASIC_ID, BASIC_PASS, BOT_ID, FakeWorksApi, basic_auth_header
from works_gateway.config import Settings
from works_gateway.main import create_app


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_b64(rsa_private_key) -> str:
    pem = rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return base64.b64encode(pem).decode()


@pytest.fixture
def settings(private_key_b64, tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        CLIENT_ID="client-1",
        CLIENT_SECRET="client-secret",
        SERVICE_ACCOUNT="svc.account@example",
        PRIVATE_KEY=private_key_b64,
        BOT_ID=BOT_ID,
        BASIC_ID=BASIC_ID,
        BASIC_PASS=BASIC_PASS,
        API_BASE_URL=API_BASE,
        AUTH_URL=AUTH_URL,
        UPLOAD_DIR=str(tmp_path / "uploads"),
    )


@pytest.fixture
def fake_api() -> FakeWorksApi:
    return FakeWorksApi()


@pytest.fixture
def app(settings, fake_api):
    return create_app(settings, transport=httpx.MockTransport(fake_api))


@pytest.fixture
def client(app):
    with TestClient(app, headers=basic_auth_header(BASIC_ID, BASIC_PASS)) as c:
        yield c
