"""
Tests for the document library.
"""

import pytest
from pathlib import Path
from httpx import AsyncClient
from fastapi import status

from app.config import settings
from app.services.document import parse_tags
from app.utils.exceptions import ValidationError
from tests.conftest import assert_error

PDF_BYTES = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\n%%EOF"


async def upload(async_client: AsyncClient, headers, **fields):
    data = {"name": "Lease template", "type": "pdf", "category": "contract"}
    data.update(fields)
    return await async_client.post(
        "/api/documents",
        data=data,
        files={"document": ("lease.pdf", PDF_BYTES, "application/pdf")},
        headers=headers
    )


class TestTagParsing:
    """Tags arrive as a form string."""

    def test_json_list(self):
        assert parse_tags('["lease", " 2024 ", ""]') == ["lease", "2024"]

    def test_comma_separated(self):
        assert parse_tags("lease, signed,,archive ") == ["lease", "signed", "archive"]

    def test_empty(self):
        assert parse_tags(None) == []
        assert parse_tags("   ") == []

    def test_malformed_json(self):
        with pytest.raises(ValidationError):
            parse_tags('["unterminated"')


class TestDocumentUpload:
    """Uploading and listing documents."""

    async def test_upload_document(self, async_client: AsyncClient, agent_headers, test_agent):
        response = await upload(
            async_client,
            agent_headers,
            tags="lease,template",
            description="Standard residential lease",
            is_public="true",
            expiry_date="2031-12-31"
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["name"] == "Lease template"
        assert data["type"] == "pdf"
        assert data["category"] == "contract"
        assert data["tags"] == ["lease", "template"]
        assert data["is_public"] is True
        assert data["expiry_date"] == "2031-12-31"
        assert data["status"] == "active"
        assert data["version"] == 1
        assert data["download_count"] == 0
        assert data["file_name"] == "lease.pdf"
        assert data["file_size"] == len(PDF_BYTES)
        assert data["uploaded_by"] == str(test_agent.id)
        assert data["uploaded_by_name"] == "Test Agent"
        assert data["file_path"].startswith("/uploads/documents/")

    async def test_upload_with_json_tags(self, async_client: AsyncClient, agent_headers):
        response = await upload(async_client, agent_headers, tags='["legal", "2024"]', category="legal")

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["tags"] == ["legal", "2024"]

    async def test_upload_linked_to_property(self, async_client: AsyncClient, agent_headers, test_property):
        response = await upload(
            async_client,
            agent_headers,
            related_entity_type="property",
            related_entity_id=str(test_property.id)
        )

        data = response.json()
        assert data["related_entity_type"] == "property"
        assert data["related_entity_id"] == str(test_property.id)

    async def test_upload_without_file(self, async_client: AsyncClient, agent_headers):
        response = await async_client.post(
            "/api/documents",
            data={"name": "Nothing", "type": "other", "category": "other"},
            headers=agent_headers
        )
        assert_error(response, status.HTTP_400_BAD_REQUEST, "No file uploaded")

    async def test_upload_with_bad_tags(self, async_client: AsyncClient, agent_headers):
        response = await upload(async_client, agent_headers, tags='["broken"')
        assert_error(response, status.HTTP_400_BAD_REQUEST, "Tags must be a JSON list")

    async def test_upload_with_unknown_type(self, async_client: AsyncClient, agent_headers):
        response = await upload(async_client, agent_headers, type="floppy")
        assert_error(response, status.HTTP_400_BAD_REQUEST)

    async def test_list_by_category(self, async_client: AsyncClient, agent_headers):
        await upload(async_client, agent_headers)
        await upload(async_client, agent_headers, name="Court ruling", category="legal")

        response = await async_client.get("/api/documents", params={"category": "legal"}, headers=agent_headers)

        data = response.json()
        assert data["total"] == 1
        assert data["documents"][0]["name"] == "Court ruling"
        assert data["limit"] == settings.default_page_size


class TestDocumentAccess:
    """Fetching, downloading, updating and deleting."""

    @pytest.fixture
    async def document(self, async_client: AsyncClient, agent_headers) -> dict:
        response = await upload(async_client, agent_headers)
        assert response.status_code == status.HTTP_201_CREATED, response.text
        return response.json()

    async def test_get_counts_download(self, async_client: AsyncClient, agent_headers, document: dict):
        first = await async_client.get(f"/api/documents/{document['id']}", headers=agent_headers)
        second = await async_client.get(f"/api/documents/{document['id']}", headers=agent_headers)

        assert first.json()["download_count"] == 1
        assert second.json()["download_count"] == 2

    async def test_list_does_not_count(self, async_client: AsyncClient, agent_headers, document: dict):
        await async_client.get("/api/documents", headers=agent_headers)
        response = await async_client.get("/api/documents", headers=agent_headers)
        assert response.json()["documents"][0]["download_count"] == 0

    async def test_download_file(self, async_client: AsyncClient, agent_headers, document: dict):
        response = await async_client.get(f"/api/documents/{document['id']}/download", headers=agent_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.content == PDF_BYTES
        assert response.headers["content-type"] == "application/pdf"
        assert "lease.pdf" in response.headers["content-disposition"]

        metadata = await async_client.get(f"/api/documents/{document['id']}", headers=agent_headers)
        assert metadata.json()["download_count"] == 2

    async def test_get_unknown_document(self, async_client: AsyncClient, agent_headers):
        response = await async_client.get(
            "/api/documents/00000000-0000-0000-0000-000000000000",
            headers=agent_headers
        )
        assert_error(response, status.HTTP_404_NOT_FOUND, "Document not found")

    async def test_update_document(self, async_client: AsyncClient, agent_headers, document: dict):
        response = await async_client.put(
            f"/api/documents/{document['id']}",
            json={"status": "archived", "tags": ["old"], "name": "Lease template v1"},
            headers=agent_headers
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "archived"
        assert data["tags"] == ["old"]
        assert data["name"] == "Lease template v1"

    async def test_empty_update(self, async_client: AsyncClient, agent_headers, document: dict):
        response = await async_client.put(f"/api/documents/{document['id']}", json={}, headers=agent_headers)
        assert_error(response, status.HTTP_400_BAD_REQUEST, "No valid fields to update")

    async def test_delete_removes_file(self, async_client: AsyncClient, agent_headers, document: dict):
        stored = Path(settings.upload_dir) / document["file_path"].removeprefix("/uploads/")
        assert stored.is_file()

        response = await async_client.delete(f"/api/documents/{document['id']}", headers=agent_headers)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not stored.exists()
        missing = await async_client.get(f"/api/documents/{document['id']}", headers=agent_headers)
        assert_error(missing, status.HTTP_404_NOT_FOUND)
