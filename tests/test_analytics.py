"""Tests for provider analytics endpoints."""

import uuid

import pytest
from httpx import AsyncClient


async def _funded_school_with_doc(client: AsyncClient, headers: dict, credits: int, cost: int):
    resp = await client.post("/v1/schools", json={
        "name": "Analytics School",
        "contact_email": f"office@{uuid.uuid4().hex[:8]}.edu",
    }, headers=headers)
    data = resp.json()
    sid = data["school"]["id"]
    school_headers = {"Authorization": f"Bearer {data['api_token']}"}
    await client.post(f"/v1/schools/{sid}/credits", json={"amount": credits}, headers=headers)

    resp = await client.post("/v1/document-types", json={
        "code": f"doc-{uuid.uuid4().hex[:10]}", "name": "Testimonial", "base_credit_cost": cost,
    }, headers=headers)
    doc_id = resp.json()["id"]
    await client.post(f"/v1/schools/{sid}/grant-document/{doc_id}",
                      json={"granted_by": "admin"}, headers=headers)
    return sid, doc_id, school_headers


@pytest.mark.asyncio
async def test_document_usage_counts_uses_and_credits(client: AsyncClient, admin_headers):
    _, doc_id, school_headers = await _funded_school_with_doc(client, admin_headers, credits=10, cost=2)
    for _ in range(3):
        resp = await client.post(f"/v1/me/documents/{doc_id}/consume", headers=school_headers)
        assert resp.status_code == 201

    resp = await client.get("/v1/analytics/document-usage", headers=admin_headers)
    assert resp.status_code == 200
    usage = next(u for u in resp.json() if u["document_type_id"] == doc_id)
    assert usage["schools_with_access"] == 1
    assert usage["total_uses"] == 3
    assert usage["credits_charged"] == 6
    assert usage["average_credits_per_use"] == 2.0


@pytest.mark.asyncio
async def test_overview_totals_move_with_consumption(client: AsyncClient, admin_headers):
    resp = await client.get("/v1/analytics/overview", headers=admin_headers)
    assert resp.status_code == 200
    before = resp.json()
    assert set(before["schools_by_status"]) == {"trial", "active", "suspended", "expired"}

    _, doc_id, school_headers = await _funded_school_with_doc(client, admin_headers, credits=8, cost=3)
    await client.post(f"/v1/me/documents/{doc_id}/consume", headers=school_headers)

    resp = await client.get("/v1/analytics/overview", headers=admin_headers)
    after = resp.json()
    assert after["schools"] == before["schools"] + 1
    assert after["total_credits_issued"] == before["total_credits_issued"] + 8
    assert after["total_credits_used"] == before["total_credits_used"] + 3
    assert after["documents_generated"] == before["documents_generated"] + 1
    assert after["total_credits_available"] == after["total_credits_issued"] - after["total_credits_used"]


@pytest.mark.asyncio
async def test_analytics_requires_super_admin_key(client: AsyncClient):
    resp = await client.get("/v1/analytics/overview")
    assert resp.status_code == 403
    resp = await client.get("/v1/analytics/document-usage",
                            headers={"X-Super-Admin-Key": "wrong"})
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
