"""
Tests for client records, needs profiles and the interaction log.
"""

import pytest
from httpx import AsyncClient
from fastapi import status

from app.models.client import Client, ClientRole
from app.repositories.client import ClientRepository
from tests.conftest import ClientFactory, assert_error


def tenant_payload(**overrides) -> dict:
    payload = {
        "name": "Amira Tenant",
        "email": "amira@example.com",
        "phone": "+216 22 333 444",
        "role": "tenant",
        "status": "active",
        "tags": ["family"],
        "needs": {
            "property_types": ["apartment"],
            "min_surface": 80,
            "max_surface": 120,
            "min_price": 800,
            "max_price": 1500,
            "locations": ["La Marsa"],
            "urgency": "high",
        },
    }
    payload.update(overrides)
    return payload


class TestClientCreation:
    """Creating clients with and without needs."""

    async def test_create_tenant_with_needs(self, async_client: AsyncClient, agent_headers):
        response = await async_client.post("/api/clients", json=tenant_payload(), headers=agent_headers)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["name"] == "Amira Tenant"
        assert data["role"] == "tenant"
        assert data["tags"] == ["family"]
        assert data["needs"]["property_types"] == ["apartment"]
        assert data["needs"]["min_surface"] == 80
        assert data["needs"]["urgency"] == "high"
        assert data["interactions"] == []

    async def test_needs_ignored_for_owner(self, async_client: AsyncClient, agent_headers):
        response = await async_client.post(
            "/api/clients",
            json=tenant_payload(role="owner", email="owner2@example.com"),
            headers=agent_headers
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["needs"] is None

    async def test_default_status_is_prospect(self, async_client: AsyncClient, agent_headers):
        payload = tenant_payload()
        del payload["status"]
        del payload["needs"]

        response = await async_client.post("/api/clients", json=payload, headers=agent_headers)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["status"] == "prospect"
        assert response.json()["preferred_contact_method"] == "phone"

    async def test_email_is_normalized(self, async_client: AsyncClient, agent_headers):
        response = await async_client.post(
            "/api/clients",
            json=tenant_payload(email="Amira@Example.COM"),
            headers=agent_headers
        )
        assert response.json()["email"] == "amira@example.com"

    async def test_duplicate_email(self, async_client: AsyncClient, agent_headers, test_tenant: Client):
        response = await async_client.post(
            "/api/clients",
            json=tenant_payload(email="tenant@example.com"),
            headers=agent_headers
        )
        assert_error(response, status.HTTP_400_BAD_REQUEST, "Email already exists")

    async def test_missing_required_fields(self, async_client: AsyncClient, agent_headers):
        response = await async_client.post(
            "/api/clients",
            json={"name": "No Contact", "role": "buyer"},
            headers=agent_headers
        )

        error = assert_error(response, status.HTTP_400_BAD_REQUEST)
        assert error["code"] == "VALIDATION_ERROR"
        fields = {detail["field"] for detail in error["details"]}
        assert "body -> email" in fields
        assert "body -> phone" in fields

    async def test_invalid_role(self, async_client: AsyncClient, agent_headers):
        response = await async_client.post(
            "/api/clients",
            json=tenant_payload(role="landlord"),
            headers=agent_headers
        )
        assert_error(response, status.HTTP_400_BAD_REQUEST)

    async def test_requires_authentication(self, async_client: AsyncClient):
        response = await async_client.post("/api/clients", json=tenant_payload())
        assert_error(response, status.HTTP_401_UNAUTHORIZED)


class TestClientQueries:
    """Listing and fetching clients."""

    async def test_list_filters_by_role(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_owner: Client,
        test_tenant: Client
    ):
        response = await async_client.get("/api/clients", params={"role": "owner"}, headers=agent_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 1
        assert data["clients"][0]["email"] == "owner@example.com"

    async def test_list_pagination(
        self,
        async_client: AsyncClient,
        agent_headers,
        client_repository: ClientRepository
    ):
        for _ in range(5):
            await ClientFactory.create_client(client_repository)

        response = await async_client.get(
            "/api/clients",
            params={"limit": 2, "offset": 2},
            headers=agent_headers
        )

        data = response.json()
        assert data["total"] == 5
        assert len(data["clients"]) == 2
        assert data["limit"] == 2
        assert data["offset"] == 2

    async def test_list_limit_out_of_range(self, async_client: AsyncClient, agent_headers):
        response = await async_client.get("/api/clients", params={"limit": 0}, headers=agent_headers)
        assert_error(response, status.HTTP_400_BAD_REQUEST)

    async def test_get_client(self, async_client: AsyncClient, agent_headers, test_tenant: Client):
        response = await async_client.get(f"/api/clients/{test_tenant.id}", headers=agent_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == "Tarek Tenant"

    async def test_get_unknown_client(self, async_client: AsyncClient, agent_headers):
        response = await async_client.get(
            "/api/clients/00000000-0000-0000-0000-000000000000",
            headers=agent_headers
        )
        assert_error(response, status.HTTP_404_NOT_FOUND, "Client not found")

    async def test_get_with_malformed_id(self, async_client: AsyncClient, agent_headers):
        response = await async_client.get("/api/clients/not-a-uuid", headers=agent_headers)
        assert_error(response, status.HTTP_400_BAD_REQUEST)


class TestClientUpdates:
    """Updating and deleting clients."""

    async def test_update_fields(self, async_client: AsyncClient, agent_headers, test_tenant: Client):
        response = await async_client.put(
            f"/api/clients/{test_tenant.id}",
            json={"status": "converted", "notes": "Signed last week"},
            headers=agent_headers
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "converted"
        assert data["notes"] == "Signed last week"
        assert data["name"] == "Tarek Tenant"

    async def test_update_upserts_needs(self, async_client: AsyncClient, agent_headers, test_tenant: Client):
        first = await async_client.put(
            f"/api/clients/{test_tenant.id}",
            json={"needs": {"locations": ["Carthage"], "max_price": 2000}},
            headers=agent_headers
        )
        assert first.json()["needs"]["locations"] == ["Carthage"]

        second = await async_client.put(
            f"/api/clients/{test_tenant.id}",
            json={"needs": {"locations": ["Sidi Bou Said"], "urgency": "urgent"}},
            headers=agent_headers
        )

        needs = second.json()["needs"]
        assert needs["id"] == first.json()["needs"]["id"]
        assert needs["locations"] == ["Sidi Bou Said"]
        assert needs["urgency"] == "urgent"

    async def test_update_email_conflict(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_tenant: Client,
        test_owner: Client
    ):
        response = await async_client.put(
            f"/api/clients/{test_tenant.id}",
            json={"email": "owner@example.com"},
            headers=agent_headers
        )
        assert_error(response, status.HTTP_400_BAD_REQUEST, "Email already exists")

    async def test_update_keeping_own_email(self, async_client: AsyncClient, agent_headers, test_tenant: Client):
        response = await async_client.put(
            f"/api/clients/{test_tenant.id}",
            json={"email": "tenant@example.com", "phone": "+216 50 000 001"},
            headers=agent_headers
        )
        assert response.status_code == status.HTTP_200_OK

    async def test_empty_update(self, async_client: AsyncClient, agent_headers, test_tenant: Client):
        response = await async_client.put(f"/api/clients/{test_tenant.id}", json={}, headers=agent_headers)
        assert_error(response, status.HTTP_400_BAD_REQUEST, "No valid fields to update")

    async def test_update_unknown_client(self, async_client: AsyncClient, agent_headers):
        response = await async_client.put(
            "/api/clients/00000000-0000-0000-0000-000000000000",
            json={"notes": "ghost"},
            headers=agent_headers
        )
        assert_error(response, status.HTTP_404_NOT_FOUND)

    async def test_delete_removes_needs_and_interactions(
        self,
        async_client: AsyncClient,
        agent_headers
    ):
        created = await async_client.post("/api/clients", json=tenant_payload(), headers=agent_headers)
        client_id = created.json()["id"]
        await async_client.post(
            f"/api/clients/{client_id}/interactions",
            json={"type": "call", "notes": "First contact"},
            headers=agent_headers
        )

        response = await async_client.delete(f"/api/clients/{client_id}", headers=agent_headers)
        assert response.status_code == status.HTTP_204_NO_CONTENT

        response = await async_client.get(f"/api/clients/{client_id}", headers=agent_headers)
        assert_error(response, status.HTTP_404_NOT_FOUND)

    async def test_delete_unknown_client(self, async_client: AsyncClient, agent_headers):
        response = await async_client.delete(
            "/api/clients/00000000-0000-0000-0000-000000000000",
            headers=agent_headers
        )
        assert_error(response, status.HTTP_404_NOT_FOUND)


class TestInteractions:
    """Interaction log."""

    async def test_add_interaction(self, async_client: AsyncClient, agent_headers, test_tenant: Client):
        response = await async_client.post(
            f"/api/clients/{test_tenant.id}/interactions",
            json={"type": "call", "notes": "Asked about sea view flats", "outcome": "interested", "duration": 12},
            headers=agent_headers
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["type"] == "call"
        assert data["outcome"] == "interested"
        assert data["user_name"] == "Test Agent"
        assert data["client_id"] == str(test_tenant.id)

    async def test_interactions_listed_on_client(
        self,
        async_client: AsyncClient,
        agent_headers,
        test_tenant: Client
    ):
        for notes in ("Call one", "Call two"):
            await async_client.post(
                f"/api/clients/{test_tenant.id}/interactions",
                json={"type": "email", "notes": notes},
                headers=agent_headers
            )

        response = await async_client.get(f"/api/clients/{test_tenant.id}", headers=agent_headers)

        interactions = response.json()["interactions"]
        assert len(interactions) == 2
        assert {item["notes"] for item in interactions} == {"Call one", "Call two"}

    async def test_interaction_for_unknown_client(self, async_client: AsyncClient, agent_headers):
        response = await async_client.post(
            "/api/clients/00000000-0000-0000-0000-000000000000/interactions",
            json={"type": "call", "notes": "Nobody home"},
            headers=agent_headers
        )
        assert_error(response, status.HTTP_404_NOT_FOUND, "Client not found")

    async def test_interaction_requires_notes(self, async_client: AsyncClient, agent_headers, test_tenant: Client):
        response = await async_client.post(
            f"/api/clients/{test_tenant.id}/interactions",
            json={"type": "call", "notes": ""},
            headers=agent_headers
        )
        assert_error(response, status.HTTP_400_BAD_REQUEST)


class TestClientRepository:
    """Repository-level behaviour."""

    async def test_email_taken(self, client_repository: ClientRepository, test_tenant: Client):
        assert await client_repository.email_taken("TENANT@example.com")
        assert not await client_repository.email_taken("tenant@example.com", exclude_id=test_tenant.id)

    async def test_list_by_role(self, client_repository: ClientRepository, test_tenant: Client, test_owner: Client):
        tenants = await client_repository.list_clients(role=ClientRole.TENANT)
        assert [client.id for client in tenants] == [test_tenant.id]
