"""JWT utilities for bearer token minting and verification."""

import time
from typing import Any

import jwt

DEFAULT_ALGORITHM = "HS256"

EXPIRED = "expired"
INVALID = "invalid"
NOT_ACTIVE = "not_active"
UNKNOWN = "unknown"


class TokenVerificationError(Exception):
    """Raised when a bearer token fails verification.

    Attributes:
        kind: One of ``expired``, ``invalid``, ``not_active`` or ``unknown``
    """

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind


class TokenCodec:
    """Mints and verifies self-contained HMAC-signed bearer tokens.

    No token state is kept server side: a token is valid exactly when its
    signature verifies under the shared secret and it has not expired.
    """

    def __init__(self, secret: str, algorithm: str = DEFAULT_ALGORITHM):
        if not secret:
            raise ValueError("TokenCodec requires a signing secret")
        self._secret = secret
        self._algorithm = algorithm

    def mint(self, subject: str, duration_seconds: int, **claims: Any) -> str:
        """Create a signed token.

        Args:
            subject: Value of the ``sub`` claim (the client id)
            duration_seconds: Lifetime; ``exp`` is ``iat`` plus this
            **claims: Extra claims such as ``scope``

        Returns:
            Encoded JWT token
        """
        issued_at = int(time.time())
        payload = {
            **claims,
            "sub": subject,
            "iat": issued_at,
            "exp": issued_at + duration_seconds
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> dict:
        """Verify and decode a token.

        Returns:
            Decoded token claims

        Raises:
            TokenVerificationError: If the token is expired, not yet valid or invalid
        """
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "iat", "exp"]}
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenVerificationError(EXPIRED, str(e))
        except jwt.ImmatureSignatureError as e:
            raise TokenVerificationError(NOT_ACTIVE, str(e))
        except jwt.InvalidTokenError as e:
            raise TokenVerificationError(INVALID, str(e))
        except Exception as e:
            raise TokenVerificationError(UNKNOWN, str(e))
