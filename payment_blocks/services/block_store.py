"""Storage for payment block records.

A store keeps every block record ever created and guarantees that at most one
record per client is active. ``insert`` enforces that guarantee atomically, so
callers never need to look before they insert.
"""

import threading
from abc import ABC, abstractmethod
from uuid import UUID

from pydantic import UUID4

from payment_blocks.models.payment_block import PaymentBlock


class BlockStoreError(Exception):
    """Base exception for block storage failures."""

    pass


class DuplicateActiveBlockError(BlockStoreError):
    """Exception raised when a client already has an active block."""

    def __init__(self, client_id: UUID) -> None:
        super().__init__(f"Client {client_id} already has an active payment block")
        self.client_id = client_id


class BlockRecordNotFoundError(BlockStoreError):
    """Exception raised when an active block record to update does not exist."""

    def __init__(self, block_id: UUID4) -> None:
        super().__init__(f"No active payment block with id {block_id}")
        self.block_id = block_id


class PaymentBlockStore(ABC):
    """Abstract interface for storing payment block records."""

    @abstractmethod
    async def find_active_by_client(self, client_id: UUID) -> PaymentBlock | None:
        """Get the active block for a client.

        Args:
            client_id: ID of the client

        Returns:
            The active block if there is one, None otherwise

        Raises:
            BlockStoreError: If the lookup fails
        """
        pass

    @abstractmethod
    async def insert(self, block: PaymentBlock) -> PaymentBlock:
        """Store a new block record.

        Args:
            block: The record to store

        Returns:
            The stored record

        Raises:
            DuplicateActiveBlockError: If the record is active and the client
                already has an active block
            BlockStoreError: If the write fails
        """
        pass

    @abstractmethod
    async def update(self, block: PaymentBlock) -> PaymentBlock:
        """Persist changes to a stored, still active record.

        Args:
            block: The record with its new field values

        Returns:
            The stored record

        Raises:
            BlockRecordNotFoundError: If no active record has the block's id
            BlockStoreError: If the write fails
        """
        pass


class InMemoryPaymentBlockStore(PaymentBlockStore):
    """In-memory block store.

    Records live in a dict keyed by id, with a second dict acting as the
    unique index of active blocks per client. Both are only touched while
    holding the lock, and nothing awaits while it is held.
    """

    def __init__(self) -> None:
        self._records: dict[UUID4, PaymentBlock] = {}
        self._active_by_client: dict[UUID, UUID4] = {}
        self._lock = threading.Lock()

    async def find_active_by_client(self, client_id: UUID) -> PaymentBlock | None:
        with self._lock:
            block_id = self._active_by_client.get(client_id)
            return self._records[block_id] if block_id is not None else None

    async def insert(self, block: PaymentBlock) -> PaymentBlock:
        with self._lock:
            if block.id in self._records:
                raise BlockStoreError(f"Payment block {block.id} already exists")
            if block.is_active:
                if block.client_id in self._active_by_client:
                    raise DuplicateActiveBlockError(block.client_id)
                self._active_by_client[block.client_id] = block.id
            self._records[block.id] = block
            return block

    async def update(self, block: PaymentBlock) -> PaymentBlock:
        with self._lock:
            stored = self._records.get(block.id)
            if stored is None or not stored.is_active:
                raise BlockRecordNotFoundError(block.id)
            if stored.client_id != block.client_id:
                raise BlockStoreError("The client of a payment block cannot change")
            if not block.is_active:
                del self._active_by_client[block.client_id]
            self._records[block.id] = block
            return block

    def history(self, client_id: UUID) -> list[PaymentBlock]:
        """Get every record stored for a client, oldest first."""
        with self._lock:
            return sorted(
                (b for b in self._records.values() if b.client_id == client_id),
                key=lambda b: b.created_at,
            )

    def size(self) -> int:
        """Get the number of records in the store."""
        with self._lock:
            return len(self._records)
