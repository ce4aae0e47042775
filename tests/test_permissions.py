"""Tests for document permission grant endpoints."""

import uuid

import pytest
from httpx import AsyncClient


async def _bootstrap(client: AsyncClient, headers: dict, name: str) -> dict:
    """Helper: register a school and return its id and token headers."""
    resp = await client.post("/v1/schools", json={
        "name": name,
        "contact_email": f"office@{uuid.uuid4().hex[:8]}.edu",
    }, headers=headers)
    assert resp.status_code == 201
    data = resp.json()
    return {
        "id": data["school"]["id"],
        "headers": {"Authorization": f"Bearer {data['api_token']}"},
    }


async def _document_type(client: AsyncClient, headers: dict, cost: int = 1, name: str = "ID Card") -> str:
    resp = await client.post("/v1/document-types", json={
        "code": f"doc-{uuid.uuid4().hex[:10]}",
        "name": name,
        "base_credit_cost": cost,
    }, headers=headers)
    assert resp.status_code == 201
    return resp.json()["id"]


@pytest.mark.asyncio
async def test_grant_then_regrant_updates_terms(client: AsyncClient, admin_headers):
    school = await _bootstrap(client, admin_headers, "Regrant School")
    doc_id = await _document_type(client, admin_headers)
    url = f"/v1/schools/{school['id']}/grant-document/{doc_id}"

    resp = await client.post(url, json={"credits_per_use": 5, "granted_by": "admin1"},
                             headers=admin_headers)
    assert resp.status_code == 200
    first = resp.json()
    assert first["is_allowed"] is True
    assert first["state"] == "granted"

    resp = await client.post(url, json={"credits_per_use": 2, "granted_by": "admin2"},
                             headers=admin_headers)
    assert resp.status_code == 200
    second = resp.json()
    assert second["id"] == first["id"]

    resp = await client.get(f"/v1/schools/{school['id']}/permissions", headers=admin_headers)
    grants = [g for g in resp.json() if g["document_type_id"] == doc_id]
    assert len(grants) == 1
    assert grants[0]["credits_per_use"] == 2
    assert grants[0]["granted_by"] == "admin2"


@pytest.mark.asyncio
async def test_grant_unknown_school_or_type_is_404(client: AsyncClient, admin_headers):
    school = await _bootstrap(client, admin_headers, "Unknown Refs")
    doc_id = await _document_type(client, admin_headers)
    missing = str(uuid.uuid4())

    resp = await client.post(f"/v1/schools/{missing}/grant-document/{doc_id}",
                             json={"granted_by": "admin"}, headers=admin_headers)
    assert resp.status_code == 404

    resp = await client.post(f"/v1/schools/{school['id']}/grant-document/{missing}",
                             json={"granted_by": "admin"}, headers=admin_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_grant_inactive_type_is_404(client: AsyncClient, admin_headers):
    school = await _bootstrap(client, admin_headers, "Inactive Type")
    doc_id = await _document_type(client, admin_headers)
    await client.put(f"/v1/document-types/{doc_id}/active", json={"is_active": False},
                     headers=admin_headers)

    resp = await client.post(f"/v1/schools/{school['id']}/grant-document/{doc_id}",
                             json={"granted_by": "admin"}, headers=admin_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_grant_to_suspended_school_rejected(client: AsyncClient, admin_headers):
    school = await _bootstrap(client, admin_headers, "Suspended Grant")
    doc_id = await _document_type(client, admin_headers)
    sid = school["id"]
    await client.patch(f"/v1/schools/{sid}/status", json={"status": "active"}, headers=admin_headers)
    await client.patch(f"/v1/schools/{sid}/status", json={"status": "suspended"}, headers=admin_headers)

    resp = await client.post(f"/v1/schools/{sid}/grant-document/{doc_id}",
                             json={"granted_by": "admin"}, headers=admin_headers)
    assert resp.status_code == 409
    assert resp.json()["code"] == "tenant_inactive"


@pytest.mark.asyncio
async def test_grant_rejects_non_positive_credits_per_use(client: AsyncClient, admin_headers):
    school = await _bootstrap(client, admin_headers, "Zero Cost Grant")
    doc_id = await _document_type(client, admin_headers)

    resp = await client.post(f"/v1/schools/{school['id']}/grant-document/{doc_id}",
                             json={"credits_per_use": 0, "granted_by": "admin"},
                             headers=admin_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_revoke_keeps_row_and_regrant_restores(client: AsyncClient, admin_headers):
    school = await _bootstrap(client, admin_headers, "Revoke Cycle")
    doc_id = await _document_type(client, admin_headers)
    sid = school["id"]

    await client.post(f"/v1/schools/{sid}/grant-document/{doc_id}",
                      json={"granted_by": "admin", "notes": "pilot"}, headers=admin_headers)

    resp = await client.delete(f"/v1/schools/{sid}/revoke-document/{doc_id}", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["state"] == "revoked"
    assert resp.json()["revoked_at"] is not None

    resp = await client.get(f"/v1/schools/{sid}/document/{doc_id}/permission", headers=admin_headers)
    assert resp.json()["state"] == "revoked"

    resp = await client.post(f"/v1/schools/{sid}/grant-document/{doc_id}",
                             json={"granted_by": "admin"}, headers=admin_headers)
    regrant = resp.json()
    assert regrant["state"] == "granted"
    assert regrant["revoked_at"] is None
    assert regrant["notes"] == "pilot"


@pytest.mark.asyncio
async def test_revoke_never_granted_is_404(client: AsyncClient, admin_headers):
    school = await _bootstrap(client, admin_headers, "Never Granted")
    doc_id = await _document_type(client, admin_headers)

    resp = await client.delete(f"/v1/schools/{school['id']}/revoke-document/{doc_id}",
                               headers=admin_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_permission_status_unset_and_effective_cost(client: AsyncClient, admin_headers):
    school = await _bootstrap(client, admin_headers, "Status Lookup")
    doc_id = await _document_type(client, admin_headers, cost=4)
    url = f"/v1/schools/{school['id']}/document/{doc_id}/permission"

    resp = await client.get(url, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["state"] == "unset"
    assert resp.json()["effective_cost"] is None

    await client.post(f"/v1/schools/{school['id']}/grant-document/{doc_id}",
                      json={"granted_by": "admin"}, headers=admin_headers)
    resp = await client.get(url, headers=admin_headers)
    assert resp.json()["state"] == "granted"
    assert resp.json()["effective_cost"] == 4


@pytest.mark.asyncio
async def test_bulk_grant_is_all_or_nothing(client: AsyncClient, admin_headers):
    school = await _bootstrap(client, admin_headers, "Bulk Atomic")
    sid = school["id"]
    valid = [await _document_type(client, admin_headers) for _ in range(5)]

    resp = await client.post(f"/v1/schools/{sid}/bulk-permissions", json={
        "document_type_ids": valid[:3] + [str(uuid.uuid4())] + valid[3:],
        "action": "grant",
        "granted_by": "admin",
    }, headers=admin_headers)
    assert resp.status_code == 404

    resp = await client.get(f"/v1/schools/{sid}/permissions", headers=admin_headers)
    assert resp.json() == []

    resp = await client.post(f"/v1/schools/{sid}/bulk-permissions", json={
        "document_type_ids": valid,
        "action": "grant",
        "credits_per_use": 2,
        "granted_by": "admin",
    }, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["document_count"] == 5

    resp = await client.get(f"/v1/schools/{sid}/permissions", headers=admin_headers)
    grants = resp.json()
    assert len(grants) == 5
    assert all(g["is_allowed"] and g["credits_per_use"] == 2 for g in grants)


@pytest.mark.asyncio
async def test_bulk_revoke(client: AsyncClient, admin_headers):
    school = await _bootstrap(client, admin_headers, "Bulk Revoke")
    sid = school["id"]
    docs = [await _document_type(client, admin_headers) for _ in range(3)]
    await client.post(f"/v1/schools/{sid}/bulk-permissions", json={
        "document_type_ids": docs, "action": "grant", "granted_by": "admin",
    }, headers=admin_headers)

    # One id was never granted: nothing is revoked
    resp = await client.post(f"/v1/schools/{sid}/bulk-permissions", json={
        "document_type_ids": docs[:2] + [str(uuid.uuid4())], "action": "revoke",
    }, headers=admin_headers)
    assert resp.status_code == 404
    resp = await client.get(f"/v1/schools/{sid}/permissions", headers=admin_headers)
    assert all(g["is_allowed"] for g in resp.json())

    resp = await client.post(f"/v1/schools/{sid}/bulk-permissions", json={
        "document_type_ids": docs[:2], "action": "revoke",
    }, headers=admin_headers)
    assert resp.status_code == 200
    resp = await client.get(f"/v1/schools/{sid}/permissions", headers=admin_headers)
    states = {g["document_type_id"]: g["state"] for g in resp.json()}
    assert states == {docs[0]: "revoked", docs[1]: "revoked", docs[2]: "granted"}


@pytest.mark.asyncio
async def test_bulk_with_empty_list_rejected(client: AsyncClient, admin_headers):
    school = await _bootstrap(client, admin_headers, "Bulk Empty")
    resp = await client.post(f"/v1/schools/{school['id']}/bulk-permissions", json={
        "document_type_ids": [], "action": "grant", "granted_by": "admin",
    }, headers=admin_headers)
    assert resp.status_code == 400
