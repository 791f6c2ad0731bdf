"""PKCE (Proof Key for Code Exchange) helpers, S256 method only."""

import base64
import hashlib
import hmac
import secrets


def compute_challenge(code_verifier: str) -> str:
    """Return the S256 code_challenge for ``code_verifier`` (unpadded base64url)."""
    return base64.urlsafe_b64encode(
        hashlib.sha256(code_verifier.encode('utf-8')).digest()
    ).rstrip(b'=').decode('utf-8')


def verify_challenge(code_verifier: str, code_challenge: str) -> bool:
    """Check a code_verifier against a stored challenge in constant time."""
    return hmac.compare_digest(
        compute_challenge(code_verifier).encode('utf-8'),
        code_challenge.encode('utf-8')
    )


def generate_pkce_pair() -> tuple[str, str]:
    """
    Generate PKCE code_verifier and code_challenge pair.

    Returns:
        Tuple of (code_verifier, code_challenge) using S256 method.
    """
    # 32 random bytes give a 43 character verifier
    code_verifier = base64.urlsafe_b64encode(
        secrets.token_bytes(32)
    ).rstrip(b'=').decode('utf-8')

    return code_verifier, compute_challenge(code_verifier)
