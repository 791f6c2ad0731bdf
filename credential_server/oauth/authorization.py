"""Authorization code issuance for the PKCE authorization-code grant."""

import logging
import time
import uuid
from typing import Callable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from credential_server.oauth.errors import invalid_client, invalid_request
from credential_server.oauth.registry import ClientRegistry
from credential_server.oauth.schemas.authorize import AuthorizationRequest
from credential_server.oauth.storage import ClientRecord, PendingAuthorization

logger = logging.getLogger(__name__)

DEFAULT_SCOPE = "all"
SUPPORTED_CHALLENGE_METHODS = ("S256",)


def add_query_params(url: str, **params: str) -> str:
    """Set query parameters on ``url``, replacing any of the same name."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in params]
    query.extend(params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))


class AuthorizationCodeIssuer:
    """Attaches one-time authorization codes to client records."""

    def __init__(self, registry: ClientRegistry, clock: Callable[[], float] = time.time):
        self.registry = registry
        self._clock = clock

    def authorize(self, request: AuthorizationRequest) -> str:
        """Issue an authorization code.

        Any authorization still pending for the client is replaced, so its
        code can no longer be redeemed.

        Args:
            request: Validated authorization request

        Returns:
            The redirect URL carrying ``code`` and, if supplied, ``state``

        Raises:
            OAuthError: ``invalid_client`` for an unknown client,
                ``invalid_request`` for a bad redirect URI or challenge method
        """
        client = self.registry.get_client(request.client_id)
        if not client:
            logger.debug("Client not found: %s", request.client_id)
            raise invalid_client("Client not found")

        self._check_request(client, request)

        pending = PendingAuthorization(
            code=str(uuid.uuid4()),
            code_challenge=request.code_challenge,
            code_creation_date=self._clock(),
            scope=request.scope or DEFAULT_SCOPE
        )

        def attach(record: ClientRecord) -> ClientRecord:
            # Registration data may have changed since the first read
            self._check_request(record, request)
            record.pending = pending
            return record

        if self.registry.update_client(request.client_id, attach) is None:
            raise invalid_client("Client not found")

        params = {"code": pending.code}
        if request.state is not None:
            params["state"] = request.state
        return add_query_params(request.redirect_uri, **params)

    @staticmethod
    def _check_request(client: ClientRecord, request: AuthorizationRequest) -> None:
        if not client.redirect_uris:
            logger.info("No redirect URIs registered for this client - Client: %s", client.client_id)
            raise invalid_request("No redirect URIs registered for this client")

        # Exact match, no prefix or wildcard matching
        if request.redirect_uri not in client.redirect_uris:
            logger.info(
                "Invalid redirect_uri - Client: %s, URI: %s",
                client.client_id,
                request.redirect_uri
            )
            raise invalid_request("Invalid redirect_uri: not registered for this client")

        if request.code_challenge_method not in SUPPORTED_CHALLENGE_METHODS:
            logger.debug("Unsupported code_challenge_method: %s", request.code_challenge_method)
            raise invalid_request("Only S256 code_challenge_method is supported")

