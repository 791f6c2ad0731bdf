import pytest

from credential_server.oauth.errors import OAuthError
from credential_server.oauth.signing import (
    ACCESS_KEY_HEADER,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    RegistrationAuthenticator,
    sign_request
)

ACCESS_KEY = "ak-123"
SECRET_KEY = "sk-456"
NOW_MS = 1_700_000_000_000
BODY = b'{"redirect_uris":["https://app.example/cb"]}'


@pytest.fixture
def authenticator():
    return RegistrationAuthenticator(ACCESS_KEY, SECRET_KEY, clock_ms=lambda: NOW_MS)


def reason(authenticator, headers, body=BODY) -> str:
    with pytest.raises(OAuthError) as exc_info:
        authenticator.authenticate(headers, body)
    assert exc_info.value.error == "unauthorized"
    assert exc_info.value.status_code == 401
    return exc_info.value.description


def test_valid_signature(authenticator):
    """A freshly signed request passes"""
    headers = sign_request(ACCESS_KEY, SECRET_KEY, BODY, timestamp_ms=NOW_MS)
    authenticator.authenticate(headers, BODY)


@pytest.mark.parametrize("missing", [ACCESS_KEY_HEADER, TIMESTAMP_HEADER, SIGNATURE_HEADER])
def test_missing_header(authenticator, missing):
    headers = sign_request(ACCESS_KEY, SECRET_KEY, BODY, timestamp_ms=NOW_MS)
    del headers[missing]
    assert reason(authenticator, headers).startswith("Missing required headers")


def test_wrong_access_key(authenticator):
    headers = sign_request("someone-else", SECRET_KEY, BODY, timestamp_ms=NOW_MS)
    assert reason(authenticator, headers) == "Invalid access key"


def test_timestamp_four_minutes_old_accepted(authenticator):
    headers = sign_request(ACCESS_KEY, SECRET_KEY, BODY, timestamp_ms=NOW_MS - 4 * 60 * 1000)
    authenticator.authenticate(headers, BODY)


@pytest.mark.parametrize("offset_ms", [-(5 * 60 * 1000 + 1), 6 * 60 * 1000])
def test_timestamp_outside_window_rejected(authenticator, offset_ms):
    """Stale and future timestamps are both rejected even when correctly signed"""
    headers = sign_request(ACCESS_KEY, SECRET_KEY, BODY, timestamp_ms=NOW_MS + offset_ms)
    assert "timestamp expired" in reason(authenticator, headers).lower()


def test_unparsable_timestamp_rejected(authenticator):
    headers = sign_request(ACCESS_KEY, SECRET_KEY, BODY, timestamp_ms=NOW_MS)
    headers[TIMESTAMP_HEADER] = "yesterday"
    assert "timestamp expired" in reason(authenticator, headers).lower()


@pytest.mark.parametrize("index", [0, len(BODY) // 2, len(BODY) - 1])
def test_tampered_body_rejected(authenticator, index):
    """Flipping a single byte of the body invalidates the signature"""
    headers = sign_request(ACCESS_KEY, SECRET_KEY, BODY, timestamp_ms=NOW_MS)
    tampered = bytearray(BODY)
    tampered[index] ^= 0x01
    assert reason(authenticator, headers, bytes(tampered)) == "Invalid signature"


def test_wrong_secret_rejected(authenticator):
    headers = sign_request(ACCESS_KEY, "wrong-secret", BODY, timestamp_ms=NOW_MS)
    assert reason(authenticator, headers) == "Invalid signature"


@pytest.mark.parametrize("signature", ["abcd", "zz" * 32, "00" * 33])
def test_malformed_signature_rejected(authenticator, signature):
    """Short, non-hex and over-long signatures all report the same reason"""
    headers = sign_request(ACCESS_KEY, SECRET_KEY, BODY, timestamp_ms=NOW_MS)
    headers[SIGNATURE_HEADER] = signature
    assert reason(authenticator, headers) == "Invalid signature"


def test_requires_keys():
    with pytest.raises(ValueError):
        RegistrationAuthenticator("", SECRET_KEY)


def test_spaced_hex_signature_rejected(authenticator):
    """Only the canonical 64 character hex form is accepted"""
    headers = sign_request(ACCESS_KEY, SECRET_KEY, BODY, timestamp_ms=NOW_MS)
    signature = headers[SIGNATURE_HEADER]
    headers[SIGNATURE_HEADER] = " ".join(signature[i:i + 2] for i in range(0, len(signature), 2))
    assert reason(authenticator, headers) == "Invalid signature"


def test_uppercase_hex_signature_accepted(authenticator):
    headers = sign_request(ACCESS_KEY, SECRET_KEY, BODY, timestamp_ms=NOW_MS)
    headers[SIGNATURE_HEADER] = headers[SIGNATURE_HEADER].upper()
    authenticator.authenticate(headers, BODY)
