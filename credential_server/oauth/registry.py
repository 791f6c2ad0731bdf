"""Client registry: create, read and update client records."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from credential_server.oauth.schemas.dcr import ClientRegistrationRequest, DEFAULT_CLIENT_NAME
from credential_server.oauth.storage import ClientRecord, ClientStore

logger = logging.getLogger(__name__)


class ClientRegistry:
    """Client records on top of an injected ClientStore."""

    def __init__(self, store: ClientStore):
        self.store = store

    def register(self, request: ClientRegistrationRequest) -> ClientRecord:
        """Create and store a new client.

        Every call creates a distinct client with a fresh id and secret. The
        secret is returned here once and plays no further part in the protocol.

        Args:
            request: Validated registration request

        Returns:
            Created ClientRecord
        """
        client = ClientRecord(
            client_id=str(uuid.uuid4()),
            client_secret=str(uuid.uuid4()),
            client_name=request.client_name or DEFAULT_CLIENT_NAME,
            redirect_uris=list(request.redirect_uris),
            created_at=datetime.now(timezone.utc).isoformat()
        )
        self.store.set_client(client.client_id, client)

        logger.info("New client registered: %s (%s)", client.client_name, client.client_id)
        return client

    def get_client(self, client_id: str) -> Optional[ClientRecord]:
        return self.store.get_client_by_id(client_id)

    def get_client_by_code(self, code: str) -> Optional[ClientRecord]:
        return self.store.get_client_by_code(code)

    def update_client(
        self,
        client_id: str,
        mutate: Callable[[ClientRecord], ClientRecord]
    ) -> Optional[ClientRecord]:
        """Apply ``mutate`` to a client as one atomic read-modify-write."""
        return self.store.update_client(client_id, mutate)
