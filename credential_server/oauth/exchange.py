"""Token exchange for the authorization_code and refresh_token grants."""

import logging
import time
from typing import Callable, Optional

from credential_server.oauth.authorization import DEFAULT_SCOPE
from credential_server.oauth.errors import invalid_client, invalid_grant, invalid_request
from credential_server.oauth.jwt_utils import EXPIRED, TokenCodec, TokenVerificationError
from credential_server.oauth.pkce import verify_challenge
from credential_server.oauth.registry import ClientRegistry
from credential_server.oauth.schemas.token import TokenRequest, TokenResponse
from credential_server.oauth.storage import ClientRecord

logger = logging.getLogger(__name__)


class TokenExchanger:
    """Redeems authorization codes and refresh tokens for new token pairs.

    Refresh tokens are checked by signature and expiry alone. Issuing a new
    pair does not invalidate the refresh token that was presented.
    """

    def __init__(
        self,
        registry: ClientRegistry,
        codec: TokenCodec,
        access_token_ttl: int,
        refresh_token_ttl: int,
        code_ttl: int,
        clock: Callable[[], float] = time.time
    ):
        self.registry = registry
        self.codec = codec
        self.access_token_ttl = access_token_ttl
        self.refresh_token_ttl = refresh_token_ttl
        self.code_ttl = code_ttl
        self._clock = clock

    def exchange(self, request: TokenRequest) -> TokenResponse:
        """Run the grant named by ``request.grant_type``.

        Raises:
            OAuthError: ``invalid_request``, ``invalid_client`` or ``invalid_grant``
        """
        if request.grant_type == "authorization_code":
            client_id, stored_scope = self._redeem_code(request)
        else:
            client_id, stored_scope = self._redeem_refresh_token(request)

        scope = stored_scope or request.scope or DEFAULT_SCOPE
        return TokenResponse(
            access_token=self.codec.mint(client_id, self.access_token_ttl, scope=scope),
            token_type="Bearer",
            expires_in=self.access_token_ttl,
            refresh_token=self.codec.mint(client_id, self.refresh_token_ttl, scope=scope),
            scope=scope
        )

    def _redeem_code(self, request: TokenRequest) -> tuple[str, Optional[str]]:
        if request.client_id:
            client = self.registry.get_client(request.client_id)
        else:
            client = self.registry.get_client_by_code(request.code)

        if not client:
            logger.info("Client not found or expired")
            raise invalid_client("Client not found or expired")

        if not request.code or not request.code_verifier:
            logger.info("Missing code or code_verifier - Client: %s", client.client_id)
            raise invalid_request("Missing code or code_verifier for authorization_code grant")

        redeemed = {}

        def consume(record: ClientRecord) -> ClientRecord:
            pending = record.pending
            if pending is None or pending.code != request.code:
                logger.info("Invalid authorization code - Client: %s", record.client_id)
                raise invalid_grant("Invalid authorization code")

            if pending.is_expired(self._clock(), self.code_ttl):
                logger.info("Authorization code expired - Client: %s", record.client_id)
                raise invalid_grant("Authorization code expired")

            if not verify_challenge(request.code_verifier, pending.code_challenge):
                logger.info("PKCE verification failed - Client: %s", record.client_id)
                raise invalid_grant("PKCE verification failed")

            # One-time use: the client stays registered for later authorizations
            redeemed["scope"] = pending.scope
            record.pending = None
            return record

        if self.registry.update_client(client.client_id, consume) is None:
            raise invalid_client("Client not found or expired")

        return client.client_id, redeemed["scope"]

    def _redeem_refresh_token(self, request: TokenRequest) -> tuple[str, Optional[str]]:
        if not request.refresh_token:
            logger.info("Missing refresh_token")
            raise invalid_request("Missing refresh_token")

        try:
            payload = self.codec.verify(request.refresh_token)
        except TokenVerificationError as e:
            logger.info("Invalid or expired refresh_token: %s", e.kind)
            if e.kind == EXPIRED:
                raise invalid_grant("Refresh token expired")
            raise invalid_grant("Invalid refresh token")

        return payload["sub"], payload.get("scope")
