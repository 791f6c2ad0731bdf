import json

import pytest
from fastapi.testclient import TestClient

from credential_server.config import Settings
from credential_server.main import create_app
from credential_server.oauth.jwt_utils import TokenCodec
from credential_server.oauth.registry import ClientRegistry
from credential_server.oauth.schemas.dcr import ClientRegistrationRequest
from credential_server.oauth.signing import sign_request
from credential_server.oauth.storage import ClientStorage

JWT_SECRET = "test-jwt-secret-that-is-long-enough-for-hs256"
ACCESS_KEY = "test-access-key"
SECRET_KEY = "test-secret-key"
REDIRECT_URI = "https://app.example/cb"


def make_settings(**overrides) -> Settings:
    values = {
        "JWT_SECRET": JWT_SECRET,
        "SECURED_SERVER": True,
        "OAUTH_REGISTRATION_ACCESS_KEY": ACCESS_KEY,
        "OAUTH_REGISTRATION_SECRET_KEY": SECRET_KEY,
        "ACCESS_TOKEN_EXPIRE_SECONDS": 900,
        "REFRESH_TOKEN_EXPIRE_SECONDS": 86400,
        "AUTHORIZATION_CODE_EXPIRE_SECONDS": 600,
        "SERVER_URI": "https://auth.example",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def signed_json(payload: dict, timestamp_ms=None) -> tuple[bytes, dict]:
    """Serialize ``payload`` and sign the exact bytes with the test AK/SK."""
    body = json.dumps(payload).encode("utf-8")
    headers = sign_request(ACCESS_KEY, SECRET_KEY, body, timestamp_ms=timestamp_ms)
    headers["Content-Type"] = "application/json"
    return body, headers


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def store() -> ClientStorage:
    return ClientStorage()


@pytest.fixture
def registry(store) -> ClientRegistry:
    return ClientRegistry(store)


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(JWT_SECRET)


@pytest.fixture
def registered_client(registry):
    return registry.register(
        ClientRegistrationRequest(client_name="Test App", redirect_uris=[REDIRECT_URI])
    )


@pytest.fixture
def client(settings, store) -> TestClient:
    return TestClient(create_app(settings, store))
