"""
Issues API Tests

End-to-end tests for the /issues endpoints.
"""

import pytest
from httpx import AsyncClient

from tests.conftest import ORG_A, ORG_B, tenant_headers

ADMIN = tenant_headers(role="ADMIN")
MEMBER = tenant_headers(role="MEMBER", user_id="user-2")
OTHER_ADMIN = tenant_headers(organization_id=ORG_B, role="ADMIN", user_id="user-3")


async def create_issue(client: AsyncClient, headers=ADMIN, **body) -> dict:
    body.setdefault("title", "Test Issue")
    response = await client.post("/issues", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_issue(client: AsyncClient, sample_issue_data):
    response = await client.post("/issues", json=sample_issue_data, headers=MEMBER)

    assert response.status_code == 201
    data = response.json()
    assert data["title"] == sample_issue_data["title"]
    assert data["description"] == sample_issue_data["description"]
    assert data["assigneeId"] == "u1"
    assert data["status"] == "OPEN"
    assert data["organizationId"] == ORG_A
    assert "id" in data
    assert "createdAt" in data
    assert "updatedAt" in data


@pytest.mark.asyncio
async def test_create_ignores_organization_in_body(client: AsyncClient):
    data = await create_issue(client, title="Sneaky", organizationId=ORG_B)
    assert data["organizationId"] == ORG_A


@pytest.mark.asyncio
async def test_create_requires_title(client: AsyncClient):
    response = await client.post("/issues", json={"description": "no title"}, headers=ADMIN)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_is_tenant_scoped(client: AsyncClient):
    own = await create_issue(client, title="Mine")
    other = await create_issue(client, headers=OTHER_ADMIN, title="Theirs")

    response = await client.get("/issues", headers=ADMIN)

    assert response.status_code == 200
    ids = [i["id"] for i in response.json()]
    assert own["id"] in ids
    assert other["id"] not in ids


@pytest.mark.asyncio
async def test_get_round_trip(client: AsyncClient):
    created = await create_issue(client, title="Round trip", description="desc", assigneeId="u9")

    response = await client.get(f"/issues/{created['id']}", headers=MEMBER)

    assert response.status_code == 200
    assert response.json() == created


@pytest.mark.asyncio
async def test_get_missing_is_404(client: AsyncClient):
    response = await client.get("/issues/nope", headers=ADMIN)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_other_organization_is_403(client: AsyncClient):
    created = await create_issue(client)

    response = await client.get(f"/issues/{created['id']}", headers=OTHER_ADMIN)

    assert response.status_code == 403
    assert response.json()["type"] == "tenant_isolation_error"


@pytest.mark.asyncio
async def test_member_cannot_close_issue(client: AsyncClient):
    created = await create_issue(client)

    response = await client.patch(f"/issues/{created['id']}", json={"status": "CLOSED"}, headers=MEMBER)

    assert response.status_code == 403
    assert response.json()["type"] == "permission_denied"
    stored = (await client.get(f"/issues/{created['id']}", headers=ADMIN)).json()
    assert stored["status"] == "OPEN"


@pytest.mark.asyncio
async def test_member_cannot_send_null_assignee(client: AsyncClient):
    created = await create_issue(client, assigneeId="u1")

    response = await client.patch(f"/issues/{created['id']}", json={"assigneeId": None}, headers=MEMBER)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_member_can_rename(client: AsyncClient):
    created = await create_issue(client)

    response = await client.patch(f"/issues/{created['id']}", json={"title": "Renamed"}, headers=MEMBER)

    assert response.status_code == 200
    assert response.json()["title"] == "Renamed"


@pytest.mark.asyncio
async def test_admin_close_records_activity(client: AsyncClient):
    created = await create_issue(client)

    response = await client.patch(f"/issues/{created['id']}", json={"status": "CLOSED"}, headers=ADMIN)

    assert response.status_code == 200
    assert response.json()["status"] == "CLOSED"

    history = (await client.get(f"/issues/{created['id']}/activity", headers=MEMBER)).json()
    assert len(history) == 1
    assert history[0]["field"] == "status"
    assert history[0]["oldValue"] == "OPEN"
    assert history[0]["newValue"] == "CLOSED"
    assert history[0]["issueId"] == created["id"]
    assert history[0]["organizationId"] == ORG_A


@pytest.mark.asyncio
async def test_null_assignee_clears_and_logs_unassigned(client: AsyncClient):
    created = await create_issue(client, assigneeId="u1")

    response = await client.patch(f"/issues/{created['id']}", json={"assigneeId": None}, headers=ADMIN)

    assert response.status_code == 200
    assert response.json()["assigneeId"] is None
    history = (await client.get(f"/issues/{created['id']}/activity", headers=ADMIN)).json()
    assert [(h["field"], h["oldValue"], h["newValue"]) for h in history] == [
        ("assigneeId", "u1", "unassigned")
    ]


@pytest.mark.asyncio
async def test_absent_assignee_left_alone(client: AsyncClient):
    created = await create_issue(client, assigneeId="u1")

    response = await client.patch(f"/issues/{created['id']}", json={"description": "more"}, headers=ADMIN)

    assert response.json()["assigneeId"] == "u1"


@pytest.mark.asyncio
async def test_same_status_records_nothing(client: AsyncClient):
    created = await create_issue(client)

    await client.patch(f"/issues/{created['id']}", json={"status": "OPEN"}, headers=ADMIN)

    history = (await client.get(f"/issues/{created['id']}/activity", headers=ADMIN)).json()
    assert history == []


@pytest.mark.asyncio
async def test_invalid_status_rejected(client: AsyncClient):
    created = await create_issue(client)

    response = await client.patch(f"/issues/{created['id']}", json={"status": "DONE"}, headers=ADMIN)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_null_status_rejected(client: AsyncClient):
    created = await create_issue(client)

    response = await client.patch(f"/issues/{created['id']}", json={"status": None}, headers=ADMIN)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_activity_of_other_organization_is_403(client: AsyncClient):
    created = await create_issue(client)

    response = await client.get(f"/issues/{created['id']}/activity", headers=OTHER_ADMIN)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_member_cannot_delete(client: AsyncClient):
    created = await create_issue(client)

    response = await client.delete(f"/issues/{created['id']}", headers=MEMBER)

    assert response.status_code == 403
    assert (await client.get(f"/issues/{created['id']}", headers=ADMIN)).status_code == 200


@pytest.mark.asyncio
async def test_admin_delete_missing_is_404(client: AsyncClient):
    response = await client.delete("/issues/nope", headers=ADMIN)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_admin_delete(client: AsyncClient):
    created = await create_issue(client)

    response = await client.delete(f"/issues/{created['id']}", headers=ADMIN)

    assert response.status_code == 204
    assert (await client.get(f"/issues/{created['id']}", headers=ADMIN)).status_code == 404


@pytest.mark.asyncio
async def test_delete_other_organization_is_403(client: AsyncClient):
    created = await create_issue(client)

    response = await client.delete(f"/issues/{created['id']}", headers=OTHER_ADMIN)

    assert response.status_code == 403
