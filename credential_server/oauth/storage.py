"""Client storage for OAuth clients."""

import copy
import json
import logging
import threading
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)

# Codes kept resolvable per client, so replays report invalid_grant
MAX_ISSUED_CODES = 8


@dataclass
class PendingAuthorization:
    """An authorization attempt awaiting redemption at the token endpoint."""
    code: str
    code_challenge: str
    code_creation_date: float
    scope: str

    def is_expired(self, now: float, max_age: float) -> bool:
        return now - self.code_creation_date >= max_age


@dataclass
class ClientRecord:
    """Registered OAuth client.

    ``pending`` holds the authorization attempt in progress, if any. It is
    replaced or cleared as a whole so its fields never mix two attempts.
    ``issued_codes`` lists the most recent codes issued to the client and is
    maintained by the store.
    """
    client_id: str
    client_secret: str
    client_name: str
    redirect_uris: List[str]
    created_at: str
    pending: Optional[PendingAuthorization] = field(default=None)
    issued_codes: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ClientRecord":
        """Create from dictionary."""
        data = dict(data)
        pending = data.pop("pending", None)
        return cls(
            **data,
            pending=PendingAuthorization(**pending) if pending else None
        )


def _record(data: dict) -> ClientRecord:
    return ClientRecord.from_dict(copy.deepcopy(data))


class ClientStore(Protocol):
    """Persistence collaborator for client records."""

    def get_client_by_id(self, client_id: str) -> Optional[ClientRecord]:
        ...

    def get_client_by_code(self, code: str) -> Optional[ClientRecord]:
        ...

    def set_client(self, client_id: str, record: ClientRecord) -> None:
        ...

    def update_client(
        self,
        client_id: str,
        mutate: Callable[[ClientRecord], ClientRecord]
    ) -> Optional[ClientRecord]:
        ...


class ClientStorage:
    """Thread-safe client storage.

    Supports both in-memory and file-based persistence. Records are held as
    plain dictionaries, so every read hands out an independent copy.
    """

    def __init__(self, storage_path: Optional[Path] = None):
        """Initialize storage.

        Args:
            storage_path: Optional path to JSON file for persistence
        """
        self.storage_path = storage_path
        self._clients: Dict[str, dict] = {}
        self._codes: Dict[str, str] = {}
        self._lock = threading.Lock()

        # Load from file if path provided and file exists
        if storage_path and storage_path.exists():
            self._load_from_file()

    def _load_from_file(self) -> None:
        """Load clients from JSON file."""
        with self._lock:
            data = json.loads(self.storage_path.read_text())
            for client_id, client_data in data.items():
                record = ClientRecord.from_dict(client_data)
                if record.pending and record.pending.code not in record.issued_codes:
                    record.issued_codes.append(record.pending.code)
                self._clients[client_id] = record.to_dict()
                for code in record.issued_codes:
                    self._codes[code] = client_id
            logger.info("Loaded %d clients from %s", len(self._clients), self.storage_path)

    def _save_to_file(self, clients: Dict[str, dict]) -> None:
        """Save clients to JSON file."""
        if not self.storage_path:
            return

        # Ensure directory exists
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)

        self.storage_path.write_text(json.dumps(clients, indent=2))

    def _put(self, client_id: str, record: ClientRecord) -> None:
        """Store a record and index its codes (assumes lock is held).

        Codes stay indexed after they are redeemed or replaced, so a replayed
        code still resolves to its client and fails the code check there.
        Only the last MAX_ISSUED_CODES codes per client are kept.

        The file is written before memory is touched, so a failed write
        leaves the store unchanged.
        """
        previous = self._clients.get(client_id)
        issued = list(previous["issued_codes"]) if previous else list(record.issued_codes)
        if record.pending and record.pending.code not in issued:
            issued.append(record.pending.code)
        dropped = issued[:-MAX_ISSUED_CODES]
        issued = issued[-MAX_ISSUED_CODES:]

        data = record.to_dict()
        data["issued_codes"] = issued
        self._save_to_file({**self._clients, client_id: data})

        self._clients[client_id] = data
        for code in dropped:
            self._codes.pop(code, None)
        for code in issued:
            self._codes[code] = client_id

    def get_client_by_id(self, client_id: str) -> Optional[ClientRecord]:
        """Get client by ID.

        Args:
            client_id: Client identifier

        Returns:
            ClientRecord if found, None otherwise
        """
        with self._lock:
            data = self._clients.get(client_id)
            return _record(data) if data else None

    def get_client_by_code(self, code: str) -> Optional[ClientRecord]:
        """Get the client ``code`` was issued to.

        The client's pending authorization may no longer hold this code.
        """
        if not code:
            return None

        with self._lock:
            client_id = self._codes.get(code)
            if client_id is None:
                return None
            return _record(self._clients[client_id])

    def set_client(self, client_id: str, record: ClientRecord) -> None:
        """Create or replace a client record."""
        with self._lock:
            self._put(client_id, record)

    def update_client(
        self,
        client_id: str,
        mutate: Callable[[ClientRecord], ClientRecord]
    ) -> Optional[ClientRecord]:
        """Atomically read, modify and write a client record.

        ``mutate`` runs under the storage lock and receives a copy of the
        current record. If it raises, nothing is written.

        Returns:
            The stored record, or None if the client does not exist
        """
        with self._lock:
            data = self._clients.get(client_id)
            if data is None:
                return None
            updated = mutate(_record(data))
            self._put(client_id, updated)
            return _record(self._clients[client_id])
