"""AK/SK signed-request authentication for client registration.

A registration request carries three headers:

    X-Access-Key   the pre-shared access key
    X-Timestamp    request time, epoch milliseconds
    X-Signature    hex HMAC-SHA256(secret_key, access_key + timestamp + body)

where ``body`` is the exact request body bytes.
"""

import hashlib
import hmac
import logging
import re
import time
from typing import Callable, Mapping, Optional

from credential_server.oauth.errors import unauthorized

logger = logging.getLogger(__name__)

ACCESS_KEY_HEADER = "X-Access-Key"
TIMESTAMP_HEADER = "X-Timestamp"
SIGNATURE_HEADER = "X-Signature"

MAX_CLOCK_SKEW_MS = 5 * 60 * 1000

# Hex HMAC-SHA256, nothing else
SIGNATURE_PATTERN = re.compile(r"[0-9a-fA-F]{64}")


def _now_ms() -> int:
    return int(time.time() * 1000)


def compute_signature(secret_key: str, access_key: str, timestamp: str, body: bytes) -> str:
    """Return the hex HMAC-SHA256 signature of a registration request."""
    message = access_key.encode("utf-8") + timestamp.encode("utf-8") + body
    return hmac.new(secret_key.encode("utf-8"), message, hashlib.sha256).hexdigest()


def sign_request(
    access_key: str,
    secret_key: str,
    body: bytes,
    timestamp_ms: Optional[int] = None
) -> dict:
    """Build the signed-request headers for a registration call.

    Args:
        access_key: Registration access key
        secret_key: Registration secret key
        body: Exact bytes that will be sent as the request body
        timestamp_ms: Request time in epoch milliseconds, defaults to now

    Returns:
        Headers to send with the request
    """
    timestamp = str(_now_ms() if timestamp_ms is None else timestamp_ms)
    return {
        ACCESS_KEY_HEADER: access_key,
        TIMESTAMP_HEADER: timestamp,
        SIGNATURE_HEADER: compute_signature(secret_key, access_key, timestamp, body)
    }


class RegistrationAuthenticator:
    """Verifies the signed-request envelope protecting ``/oauth/register``."""

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        clock_ms: Callable[[], int] = _now_ms
    ):
        if not access_key or not secret_key:
            raise ValueError("RegistrationAuthenticator requires an access key and a secret key")
        self._access_key = access_key
        self._secret_key = secret_key
        self._clock_ms = clock_ms

    def authenticate(self, headers: Mapping[str, str], body: bytes) -> None:
        """Verify a registration request.

        Args:
            headers: Request headers (a case-insensitive mapping)
            body: Raw request body

        Raises:
            OAuthError: ``unauthorized`` with the reason the check failed
        """
        access_key = headers.get(ACCESS_KEY_HEADER)
        timestamp = headers.get(TIMESTAMP_HEADER)
        signature = headers.get(SIGNATURE_HEADER)

        if not access_key or not timestamp or not signature:
            raise self._reject(
                f"Missing required headers: {ACCESS_KEY_HEADER}, {TIMESTAMP_HEADER}, {SIGNATURE_HEADER}"
            )

        if not hmac.compare_digest(access_key.encode("utf-8"), self._access_key.encode("utf-8")):
            raise self._reject("Invalid access key")

        if not self._within_window(timestamp):
            raise self._reject("Request timestamp expired (max 5 minutes)")

        expected = bytes.fromhex(
            compute_signature(self._secret_key, access_key, timestamp, body)
        )
        if not SIGNATURE_PATTERN.fullmatch(signature):
            raise self._reject("Invalid signature")

        if not hmac.compare_digest(bytes.fromhex(signature), expected):
            raise self._reject("Invalid signature")

    def _within_window(self, timestamp: str) -> bool:
        try:
            request_time = int(timestamp)
        except ValueError:
            return False
        return abs(self._clock_ms() - request_time) <= MAX_CLOCK_SKEW_MS

    @staticmethod
    def _reject(reason: str):
        logger.warning("Registration auth failed: %s", reason)
        return unauthorized(reason)
