from collections.abc import Generator
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from payment_blocks.config import Settings
from payment_blocks.main import create_app
from payment_blocks.models.payment_block import PaymentBlock
from payment_blocks.services.block_store import InMemoryPaymentBlockStore
from payment_blocks.services.payment_block import PaymentBlockService


# Store and service fixtures
@pytest.fixture
def memory_store() -> InMemoryPaymentBlockStore:
    return InMemoryPaymentBlockStore()


@pytest.fixture
def payment_block_service(
    memory_store: InMemoryPaymentBlockStore,
) -> PaymentBlockService:
    return PaymentBlockService(memory_store)


# API fixtures
@pytest.fixture
def test_settings() -> Settings:
    return Settings(storage_backend="memory", environment="development")


@pytest.fixture
def api_client(
    test_settings: Settings, memory_store: InMemoryPaymentBlockStore
) -> Generator[TestClient, None, None]:
    app = create_app(test_settings, store=memory_store)
    with TestClient(app) as client:
        yield client


# Test data fixtures
@pytest.fixture
def client_id() -> UUID:
    return uuid4()


@pytest.fixture
def another_client_id() -> UUID:
    return uuid4()


@pytest.fixture
def active_block(client_id: UUID) -> PaymentBlock:
    return PaymentBlock(
        id=uuid4(),
        client_id=client_id,
        is_active=True,
        block_type="FRAUD",
        reason_description="suspicious activity",
        created_at=datetime(2024, 1, 1, 12, 0, tzinfo=UTC),
        created_by_user_id="agent-1",
    )
