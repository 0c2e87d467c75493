from typing import Any
from uuid import UUID

from neo4j import AsyncManagedTransaction
from neo4j.exceptions import ConstraintError, DriverError, Neo4jError

from payment_blocks.db import DatabaseManager
from payment_blocks.models.payment_block import PaymentBlock
from payment_blocks.services.block_store import (
    BlockRecordNotFoundError,
    BlockStoreError,
    DuplicateActiveBlockError,
    PaymentBlockStore,
)

# Only active blocks carry active_client_id, so the uniqueness constraint on it
# covers active blocks alone.
CONSTRAINTS = (
    # language=cypher
    """
    CREATE CONSTRAINT payment_block_id IF NOT EXISTS
    FOR (b:PaymentBlock) REQUIRE b.id IS UNIQUE
    """,
    # language=cypher
    """
    CREATE CONSTRAINT payment_block_active_client IF NOT EXISTS
    FOR (b:PaymentBlock) REQUIRE b.active_client_id IS UNIQUE
    """,
)


def _to_payment_block(properties: dict[str, Any]) -> PaymentBlock:
    """Build a PaymentBlock from stored node properties."""
    data = dict(properties)
    data.pop("active_client_id", None)
    for key in ("created_at", "unblocked_at"):
        value = data.get(key)
        if value is not None and hasattr(value, "to_native"):
            data[key] = value.to_native()
    return PaymentBlock(**data)


class Neo4jPaymentBlockStore(PaymentBlockStore):
    """Block store backed by Neo4j.

    Each record is a ``:PaymentBlock`` node. The node of an active block also
    holds ``active_client_id``, which is removed when the block is lifted; the
    uniqueness constraint on that property is what stops a client from having
    two active blocks.
    """

    def __init__(self, db_manager: DatabaseManager) -> None:
        self._db = db_manager

    async def ensure_constraints(self) -> None:
        """Create the schema constraints the store relies on, if missing.

        Raises:
            BlockStoreError: If the constraints cannot be created
        """
        try:
            async with self._db.driver.session(database=self._db.database) as session:
                for statement in CONSTRAINTS:
                    result = await session.run(statement)
                    await result.consume()
        except (Neo4jError, DriverError) as e:
            raise BlockStoreError(f"Failed to create constraints: {str(e)}") from e

    async def _find_active_block(
        self, tx: AsyncManagedTransaction, client_id: UUID
    ) -> PaymentBlock | None:
        # language=cypher
        query = """
        MATCH (b:PaymentBlock {active_client_id: $client_id})
        RETURN b {.*} AS block
        """
        result = await tx.run(query, client_id=str(client_id))
        if record := await result.single():
            return _to_payment_block(record["block"])
        return None

    async def find_active_by_client(self, client_id: UUID) -> PaymentBlock | None:
        try:
            async with self._db.driver.session(database=self._db.database) as session:
                return await session.execute_read(self._find_active_block, client_id)
        except (Neo4jError, DriverError) as e:
            raise BlockStoreError(f"Failed to look up active block: {str(e)}") from e

    async def _create_block(
        self, tx: AsyncManagedTransaction, block: PaymentBlock
    ) -> PaymentBlock:
        # language=cypher
        query = """
        CREATE (b:PaymentBlock {
            id: $id,
            client_id: $client_id,
            active_client_id: $active_client_id,
            is_active: $is_active,
            block_type: $block_type,
            reason_description: $reason_description,
            created_at: $created_at,
            created_by_user_id: $created_by_user_id,
            unblocked_at: $unblocked_at,
            unblocked_by_user_id: $unblocked_by_user_id
        })
        RETURN b {.*} AS block
        """
        result = await tx.run(
            query,
            id=str(block.id),
            client_id=str(block.client_id),
            active_client_id=str(block.client_id) if block.is_active else None,
            is_active=block.is_active,
            block_type=block.block_type,
            reason_description=block.reason_description,
            created_at=block.created_at,
            created_by_user_id=block.created_by_user_id,
            unblocked_at=block.unblocked_at,
            unblocked_by_user_id=block.unblocked_by_user_id,
        )
        if record := await result.single():
            return _to_payment_block(record["block"])
        raise BlockStoreError("Something went wrong when creating the payment block")

    async def insert(self, block: PaymentBlock) -> PaymentBlock:
        try:
            async with self._db.driver.session(database=self._db.database) as session:
                return await session.execute_write(self._create_block, block)
        except ConstraintError as e:
            raise DuplicateActiveBlockError(block.client_id) from e
        except (Neo4jError, DriverError) as e:
            raise BlockStoreError(f"Failed to create payment block: {str(e)}") from e

    async def _update_block(
        self, tx: AsyncManagedTransaction, block: PaymentBlock
    ) -> PaymentBlock | None:
        # Setting active_client_id to null removes it, releasing the constraint.
        # language=cypher
        query = """
        MATCH (b:PaymentBlock {id: $id, client_id: $client_id})
        WHERE b.is_active = true
        SET b.is_active = $is_active,
            b.active_client_id = CASE WHEN $is_active THEN b.client_id ELSE null END,
            b.block_type = $block_type,
            b.reason_description = $reason_description,
            b.unblocked_at = $unblocked_at,
            b.unblocked_by_user_id = $unblocked_by_user_id
        RETURN b {.*} AS block
        """
        result = await tx.run(
            query,
            id=str(block.id),
            client_id=str(block.client_id),
            is_active=block.is_active,
            block_type=block.block_type,
            reason_description=block.reason_description,
            unblocked_at=block.unblocked_at,
            unblocked_by_user_id=block.unblocked_by_user_id,
        )
        if record := await result.single():
            return _to_payment_block(record["block"])
        return None

    async def update(self, block: PaymentBlock) -> PaymentBlock:
        try:
            async with self._db.driver.session(database=self._db.database) as session:
                updated = await session.execute_write(self._update_block, block)
        except (Neo4jError, DriverError) as e:
            raise BlockStoreError(f"Failed to update payment block: {str(e)}") from e
        if updated is None:
            raise BlockRecordNotFoundError(block.id)
        return updated
