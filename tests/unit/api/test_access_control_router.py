"""Unit tests for the access-control API routes."""

import asyncio
from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from fastapi import status
from httpx import ASGITransport, AsyncClient

from roledesk.domain.services import RoleStore
from roledesk.infrastructure.api.app import app
from roledesk.infrastructure.api.dependencies import get_role_store, get_save_tracker
from roledesk.infrastructure.persistence.database import get_db_session

BASE = "/api/v1/access-control"


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app with the test database session."""
    app.dependency_overrides[get_db_session] = lambda: db_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def _ids_by_name(client: AsyncClient) -> dict[str, int]:
    response = await client.get(f"{BASE}/permissions")
    return {p["name"]: p["id"] for p in response.json()["all"]}


class TestPermissions:
    @pytest.mark.asyncio
    async def test_catalog_is_seeded_on_first_read(self, client):
        response = await client.get(f"{BASE}/permissions")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert len(data["all"]) == 36
        assert data["categories"][0] == "patients"
        assert [p["name"] for p in data["grouped"]["lab"]] == [
            "createLabOrder",
            "editLabResults",
            "viewLabResults",
        ]

    @pytest.mark.asyncio
    async def test_filters(self, client):
        response = await client.get(
            f"{BASE}/permissions", params={"search": "view", "category": "files"}
        )

        data = response.json()
        assert list(data["grouped"]) == ["files"]
        assert [p["name"] for p in data["grouped"]["files"]] == ["viewFiles"]
        assert len(data["all"]) == 36

    @pytest.mark.asyncio
    async def test_seed_endpoint(self, client):
        response = await client.post(f"{BASE}/permissions/seed")
        assert response.json()["seeded"] == 36

        response = await client.post(f"{BASE}/permissions/seed")
        data = response.json()
        assert data["seeded"] == 0
        assert data["total"] == 36
        assert data["message"] == "Permissions already seeded"

    @pytest.mark.asyncio
    async def test_unavailable_catalog_returns_503(self, client):
        store = AsyncMock(spec=RoleStore)
        store.list_permissions.side_effect = ConnectionError("database offline")
        app.dependency_overrides[get_role_store] = lambda: store

        response = await client.get(f"{BASE}/permissions")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert "database offline" in response.json()["detail"]


class TestRoles:
    @pytest.mark.asyncio
    async def test_create_and_get_role(self, client):
        ids = await _ids_by_name(client)
        payload = {
            "name": "Doctor",
            "description": "Clinical access",
            "permission_ids": [ids["viewPatients"], ids["editPatients"]],
        }

        response = await client.post(f"{BASE}/roles", json=payload)

        assert response.status_code == status.HTTP_201_CREATED
        role = response.json()
        assert role["name"] == "Doctor"
        assert role["permissions_count"] == 2

        response = await client.get(f"{BASE}/roles/{role['id']}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["permission_ids"] == sorted(payload["permission_ids"])

        response = await client.get(f"{BASE}/roles")
        assert response.json()["total"] == 1

    @pytest.mark.asyncio
    async def test_create_from_template(self, client):
        response = await client.post(f"{BASE}/roles", json={"template_id": "pharmacist"})

        assert response.status_code == status.HTTP_201_CREATED
        role = response.json()
        assert role["name"] == "Pharmacist"
        assert role["description"].startswith("Medication management")

        preview = await client.get(f"{BASE}/role-templates/pharmacist/preview")
        assert role["permission_ids"] == preview.json()["permission_ids"]

    @pytest.mark.asyncio
    async def test_create_from_template_with_custom_name(self, client):
        response = await client.post(
            f"{BASE}/roles", json={"template_id": "read-only", "name": "Observer"}
        )
        role = response.json()
        assert role["name"] == "Observer"
        assert role["permissions_count"] > 0

    @pytest.mark.asyncio
    async def test_blank_name_is_400(self, client):
        response = await client.post(f"{BASE}/roles", json={"name": "   "})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["code"] == "name_required"

    @pytest.mark.asyncio
    async def test_duplicate_name_is_409(self, client):
        await client.post(f"{BASE}/roles", json={"name": "Doctor"})
        response = await client.post(f"{BASE}/roles", json={"name": "doctor"})

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["code"] == "duplicate_name"

    @pytest.mark.asyncio
    async def test_unknown_permission_is_400(self, client):
        response = await client.post(
            f"{BASE}/roles", json={"name": "Doctor", "permission_ids": [9999]}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["permission_ids"] == [9999]

    @pytest.mark.asyncio
    async def test_unknown_template_is_404(self, client):
        response = await client.post(f"{BASE}/roles", json={"template_id": "surgeon"})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_missing_role_is_404(self, client):
        response = await client.get(f"{BASE}/roles/123")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "Role with ID 123 not found"

    @pytest.mark.asyncio
    async def test_replace_permissions(self, client):
        ids = await _ids_by_name(client)
        role = (await client.post(f"{BASE}/roles", json={"name": "Nurse"})).json()

        response = await client.put(
            f"{BASE}/roles/{role['id']}/permissions",
            json={"permission_ids": [ids["viewVisits"], ids["createVisit"]]},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["permission_ids"] == sorted([ids["viewVisits"], ids["createVisit"]])

    @pytest.mark.asyncio
    async def test_replace_permissions_errors(self, client):
        role = (await client.post(f"{BASE}/roles", json={"name": "Nurse"})).json()

        response = await client.put(f"{BASE}/roles/999/permissions", json={"permission_ids": []})
        assert response.status_code == status.HTTP_404_NOT_FOUND

        response = await client.put(
            f"{BASE}/roles/{role['id']}/permissions", json={"permission_ids": [5000]}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_overlapping_saves_for_one_role_conflict(self, client, permissions, roles):
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_replace(role_id, ids):
            started.set()
            await release.wait()
            return roles[0].with_permissions(ids)

        store = AsyncMock(spec=RoleStore)
        store.list_permissions.return_value = permissions
        store.list_roles.return_value = roles
        store.replace_role_permissions.side_effect = slow_replace
        app.dependency_overrides[get_role_store] = lambda: store

        first = asyncio.create_task(
            client.put(f"{BASE}/roles/1/permissions", json={"permission_ids": [1]})
        )
        await asyncio.wait_for(started.wait(), timeout=5)

        second = await client.put(f"{BASE}/roles/1/permissions", json={"permission_ids": [2]})
        assert second.status_code == status.HTTP_409_CONFLICT

        release.set()
        response = await first
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["permission_ids"] == [1]
        assert store.replace_role_permissions.await_count == 1
        assert 1 not in get_save_tracker()

    @pytest.mark.asyncio
    async def test_rename_role(self, client):
        doctor = (await client.post(f"{BASE}/roles", json={"name": "Doctor"})).json()
        await client.post(f"{BASE}/roles", json={"name": "Nurse"})

        response = await client.put(
            f"{BASE}/roles/{doctor['id']}", json={"name": "Physician", "description": "MD"}
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == "Physician"

        response = await client.put(f"{BASE}/roles/{doctor['id']}", json={"name": "NURSE"})
        assert response.status_code == status.HTTP_409_CONFLICT

    @pytest.mark.asyncio
    async def test_delete_role(self, client):
        role = (await client.post(f"{BASE}/roles", json={"name": "Temp"})).json()

        response = await client.delete(f"{BASE}/roles/{role['id']}")
        assert response.status_code == status.HTTP_204_NO_CONTENT

        response = await client.delete(f"{BASE}/roles/{role['id']}")
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestRoleTemplates:
    @pytest.mark.asyncio
    async def test_list_templates(self, client):
        response = await client.get(f"{BASE}/role-templates")

        templates = {t["id"]: t for t in response.json()}
        assert len(templates) == 8
        assert templates["doctor"]["icon"] == "stethoscope"
        assert templates["lab-technician"]["permissions_count"] == 4

    @pytest.mark.asyncio
    async def test_preview(self, client):
        response = await client.get(f"{BASE}/role-templates/lab-technician/preview")

        data = response.json()
        assert data["template"]["name"] == "Lab Technician"
        assert set(data["grouped"]) == {"patients", "lab"}
        assert len(data["permission_ids"]) == 4

    @pytest.mark.asyncio
    async def test_preview_unknown_template(self, client):
        response = await client.get(f"{BASE}/role-templates/surgeon/preview")
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestHealth:
    @pytest.mark.asyncio
    async def test_app_health(self, client):
        response = await client.get("/health")
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_access_control_health(self, client):
        response = await client.get(f"{BASE}/health")
        assert response.json() == {"status": "healthy", "permissions": 36, "categories": 12}

    @pytest.mark.asyncio
    async def test_correlation_id_is_echoed(self, client):
        response = await client.get("/health", headers={"X-Correlation-ID": "cid_test"})
        assert response.headers["X-Correlation-ID"] == "cid_test"
