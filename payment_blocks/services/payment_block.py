from collections.abc import Callable
from datetime import UTC, datetime
from uuid import UUID, uuid4

import structlog
from pydantic import UUID4

from payment_blocks.models.payment_block import PaymentBlock
from payment_blocks.services.block_store import (
    BlockRecordNotFoundError,
    BlockStoreError,
    DuplicateActiveBlockError,
    PaymentBlockStore,
)

log = structlog.get_logger(__name__)


class PaymentBlockError(Exception):
    """Base exception for payment-block errors."""

    pass


class InvalidInputError(PaymentBlockError):
    """Exception raised when a client ID or required field is invalid."""

    pass


class AlreadyBlockedError(PaymentBlockError):
    """Exception raised when the client already has an active block."""

    pass


class NoActiveBlockError(PaymentBlockError):
    """Exception raised when the client has no active block."""

    pass


class StorageFailureError(PaymentBlockError):
    """Exception raised when the block store fails."""

    pass


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _parse_client_id(client_id: UUID | str) -> UUID:
    if isinstance(client_id, UUID):
        return client_id
    try:
        return UUID(str(client_id))
    except ValueError:
        raise InvalidInputError(f"Invalid client ID: {client_id!r}")


def _require(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise InvalidInputError(f"{field} is required")
    return value


class PaymentBlockService:
    """Service for blocking and unblocking client payments.

    The service applies the block lifecycle rules on top of a block store. It
    keeps no state of its own; every call goes to the store.

    Attributes:
        store: The block store records are read from and written to
    """

    def __init__(
        self,
        store: PaymentBlockStore,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], UUID4] = uuid4,
    ) -> None:
        self.store = store
        self._clock = clock
        self._id_factory = id_factory

    async def create_block(
        self,
        client_id: UUID | str,
        block_type: str,
        reason_description: str,
        created_by_user_id: str,
    ) -> PaymentBlock:
        """Block a client's payments.

        Args:
            client_id: ID of the client to block
            block_type: Classification label for the block
            reason_description: Why the client is being blocked
            created_by_user_id: Actor creating the block

        Returns:
            The created block record

        Raises:
            InvalidInputError: If the client ID is malformed or a field is empty
            AlreadyBlockedError: If the client already has an active block
            StorageFailureError: If the block could not be stored
        """
        parsed_id = _parse_client_id(client_id)
        block = PaymentBlock(
            id=self._id_factory(),
            client_id=parsed_id,
            is_active=True,
            block_type=_require(block_type, "blockType"),
            reason_description=_require(reason_description, "reasonDescription"),
            created_at=self._clock(),
            created_by_user_id=_require(created_by_user_id, "createdByUserId"),
        )
        bound_log = log.bind(client_id=str(parsed_id))

        try:
            created = await self.store.insert(block)
        except DuplicateActiveBlockError as e:
            bound_log.info("payment_block_conflict", created_by=created_by_user_id)
            raise AlreadyBlockedError(f"Client {parsed_id} is already blocked") from e
        except BlockStoreError as e:
            bound_log.error("payment_block_storage_failure", operation="create")
            raise StorageFailureError(f"Failed to block client: {str(e)}") from e

        bound_log.info(
            "payment_block_created",
            block_id=str(created.id),
            block_type=created.block_type,
            created_by=created.created_by_user_id,
        )
        return created

    async def unblock(
        self, client_id: UUID | str, unblocked_by_user_id: str
    ) -> PaymentBlock:
        """Lift a client's active payment block.

        Args:
            client_id: ID of the client to unblock
            unblocked_by_user_id: Actor lifting the block

        Returns:
            The lifted block record

        Raises:
            InvalidInputError: If the client ID is malformed or the actor is empty
            NoActiveBlockError: If the client has no active block
            StorageFailureError: If the store could not be read or written
        """
        parsed_id = _parse_client_id(client_id)
        unblocked_by_user_id = _require(unblocked_by_user_id, "unblockedByUserId")
        bound_log = log.bind(client_id=str(parsed_id))

        active = await self._find_active(parsed_id, "unblock")
        if active is None:
            bound_log.info("payment_block_not_found", operation="unblock")
            raise NoActiveBlockError(f"No active payment block for client {parsed_id}")

        try:
            lifted = await self.store.update(
                active.lift(unblocked_by_user_id, self._clock())
            )
        except BlockRecordNotFoundError as e:
            # Lifted by a concurrent request between the lookup and the update.
            bound_log.info("payment_block_not_found", operation="unblock")
            raise NoActiveBlockError(
                f"No active payment block for client {parsed_id}"
            ) from e
        except BlockStoreError as e:
            bound_log.error("payment_block_storage_failure", operation="unblock")
            raise StorageFailureError(f"Failed to unblock client: {str(e)}") from e

        bound_log.info(
            "payment_block_lifted",
            block_id=str(lifted.id),
            unblocked_by=lifted.unblocked_by_user_id,
        )
        return lifted

    async def get_status(self, client_id: UUID | str) -> PaymentBlock:
        """Get a client's active payment block.

        Args:
            client_id: ID of the client to check

        Returns:
            The active block record

        Raises:
            InvalidInputError: If the client ID is malformed
            NoActiveBlockError: If the client has no active block
            StorageFailureError: If the store could not be read
        """
        parsed_id = _parse_client_id(client_id)
        active = await self._find_active(parsed_id, "get_status")
        if active is None:
            raise NoActiveBlockError(f"No active payment block for client {parsed_id}")
        return active

    async def _find_active(self, client_id: UUID, operation: str) -> PaymentBlock | None:
        try:
            return await self.store.find_active_by_client(client_id)
        except BlockStoreError as e:
            log.error(
                "payment_block_storage_failure",
                client_id=str(client_id),
                operation=operation,
            )
            raise StorageFailureError(f"Failed to look up payment block: {str(e)}") from e
