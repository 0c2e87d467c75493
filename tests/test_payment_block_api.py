from unittest.mock import AsyncMock, patch
from uuid import UUID

import pytest
from fastapi.testclient import TestClient
from pytest_mock import MockerFixture

from payment_blocks.services.block_store import (
    BlockStoreError,
    InMemoryPaymentBlockStore,
)


def _url(client_id: UUID | str) -> str:
    return f"/internal/v1/clients/{client_id}/payment-block"


BLOCK_BODY = {
    "blockType": "FRAUD",
    "reasonDescription": "suspicious activity",
    "createdByUserId": "agent-1",
}


@pytest.mark.unit
class TestPaymentBlockApi:
    def test_health_check(self, api_client: TestClient):
        # Act
        response = api_client.get("/internal/v1/health")

        # Assert
        assert response.status_code == 200
        assert response.json() == {"success": True}

    def test_block_then_get_status(self, api_client: TestClient, client_id: UUID):
        # Act
        created = api_client.post(_url(client_id), json=BLOCK_BODY)
        status = api_client.get(_url(client_id))

        # Assert
        assert created.status_code == 201
        body = created.json()
        assert body["clientId"] == str(client_id)
        assert body["isActive"] is True
        assert body["blockType"] == "FRAUD"
        assert body["reasonDescription"] == "suspicious activity"
        assert body["createdByUserId"] == "agent-1"
        assert body["unblockedAt"] is None
        assert body["unblockedByUserId"] is None
        assert status.status_code == 200
        assert status.json() == body

    def test_block_twice_conflicts(self, api_client: TestClient, client_id: UUID):
        # Arrange
        api_client.post(_url(client_id), json=BLOCK_BODY)

        # Act
        response = api_client.post(
            _url(client_id),
            json={**BLOCK_BODY, "reasonDescription": "dup", "createdByUserId": "agent-2"},
        )

        # Assert
        assert response.status_code == 409
        assert set(response.json()) == {"error"}

    def test_unblock_then_status_not_found(
        self, api_client: TestClient, client_id: UUID
    ):
        # Arrange
        created = api_client.post(_url(client_id), json=BLOCK_BODY).json()

        # Act
        response = api_client.request(
            "DELETE", _url(client_id), json={"unblockedByUserId": "agent-3"}
        )
        status = api_client.get(_url(client_id))

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["id"] == created["id"]
        assert body["isActive"] is False
        assert body["unblockedByUserId"] == "agent-3"
        assert body["unblockedAt"] is not None
        assert status.status_code == 404
        assert "error" in status.json()

    def test_unblock_accepts_snake_case_body(
        self, api_client: TestClient, client_id: UUID
    ):
        # Arrange
        api_client.post(_url(client_id), json=BLOCK_BODY)

        # Act
        response = api_client.request(
            "DELETE", _url(client_id), json={"unblocked_by_user_id": "agent-3"}
        )

        # Assert
        assert response.status_code == 200
        assert response.json()["unblockedByUserId"] == "agent-3"

    def test_unblock_twice_not_found(self, api_client: TestClient, client_id: UUID):
        # Arrange
        api_client.post(_url(client_id), json=BLOCK_BODY)
        api_client.request(
            "DELETE", _url(client_id), json={"unblockedByUserId": "agent-3"}
        )

        # Act
        response = api_client.request(
            "DELETE", _url(client_id), json={"unblockedByUserId": "agent-4"}
        )

        # Assert
        assert response.status_code == 404

    def test_unblock_unknown_client(self, api_client: TestClient, client_id: UUID):
        # Act
        response = api_client.request(
            "DELETE", _url(client_id), json={"unblockedByUserId": "agent-1"}
        )

        # Assert
        assert response.status_code == 404

    @pytest.mark.parametrize("method", ["GET", "POST", "DELETE"])
    def test_invalid_client_id(self, api_client: TestClient, method: str):
        # Arrange
        body = {
            "POST": BLOCK_BODY,
            "DELETE": {"unblockedByUserId": "agent-1"},
            "GET": None,
        }[method]

        # Act
        response = api_client.request(method, _url("not-a-uuid"), json=body)

        # Assert
        assert response.status_code == 400
        assert "Invalid client ID" in response.json()["error"]

    def test_block_missing_field(self, api_client: TestClient, client_id: UUID):
        # Act
        response = api_client.post(
            _url(client_id),
            json={"blockType": "FRAUD", "createdByUserId": "agent-1"},
        )

        # Assert
        assert response.status_code == 400
        assert "reasonDescription" in response.json()["error"]

    def test_block_empty_field(self, api_client: TestClient, client_id: UUID):
        # Act
        response = api_client.post(
            _url(client_id), json={**BLOCK_BODY, "createdByUserId": ""}
        )

        # Assert
        assert response.status_code == 400
        assert response.json() == {"error": "createdByUserId is required"}

    def test_block_without_body(self, api_client: TestClient, client_id: UUID):
        # Act
        response = api_client.post(_url(client_id))

        # Assert
        assert response.status_code == 400
        assert "error" in response.json()

    def test_unblock_missing_actor(self, api_client: TestClient, client_id: UUID):
        # Act
        response = api_client.request("DELETE", _url(client_id), json={})

        # Assert
        assert response.status_code == 400

    def test_block_storage_failure(
        self,
        api_client: TestClient,
        memory_store: InMemoryPaymentBlockStore,
        client_id: UUID,
        mocker: MockerFixture,
    ):
        # Arrange
        mocker.patch.object(
            memory_store, "insert", side_effect=BlockStoreError("disk full")
        )

        # Act
        response = api_client.post(_url(client_id), json=BLOCK_BODY)

        # Assert
        assert response.status_code == 500
        assert "disk full" in response.json()["error"]

    def test_get_status_storage_failure(
        self,
        api_client: TestClient,
        memory_store: InMemoryPaymentBlockStore,
        client_id: UUID,
    ):
        # Arrange
        with patch.object(
            memory_store, "find_active_by_client", new_callable=AsyncMock
        ) as mock_find:
            mock_find.side_effect = BlockStoreError("unavailable")

            # Act
            response = api_client.get(_url(client_id))

        # Assert
        assert response.status_code == 500

    def test_unknown_route_uses_error_shape(self, api_client: TestClient):
        # Act
        response = api_client.get("/internal/v1/nothing-here")

        # Assert
        assert response.status_code == 404
        assert set(response.json()) == {"error"}

    def test_cors_preflight(self, api_client: TestClient, client_id: UUID):
        # Act
        response = api_client.options(
            _url(client_id),
            headers={
                "Origin": "https://backoffice.example.com",
                "Access-Control-Request-Method": "DELETE",
            },
        )

        # Assert
        assert response.status_code == 200
        assert "DELETE" in response.headers["access-control-allow-methods"]
        assert response.headers["access-control-max-age"] == str(12 * 60 * 60)
