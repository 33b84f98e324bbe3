"""
Verification template, request and review endpoint tests.
"""

import pytest

from okr_backend.core.security import GROUP_LEADER


@pytest.fixture
async def org(seed):
    core = await seed.team("Core")
    infra = await seed.team("Infra")
    alice = await seed.user(core, "Alice")
    return {
        "alice": alice,
        "bob": await seed.user(core, "Bob"),
        "lead": await seed.user(core, "Lead", role=GROUP_LEADER),
        "outsider": await seed.user(infra, "Outsider", role=GROUP_LEADER),
        "goal": await seed.goal(alice, status="In Progress", review_status="Approved"),
    }


async def raise_request(client, goal, **values):
    body = {"goal_id": str(goal.id), "scope": "Led the incident review", "evidence_links": ["https://wiki/x"]}
    body.update(values)
    return await client.post("/api/v1/verification-requests", json=body)


@pytest.mark.asyncio
async def test_templates_are_leader_managed(test_client, auth, org):
    auth.member(org["alice"])
    response = await test_client.post("/api/v1/verification-templates", json={"name": "Tech talk"})
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Forbidden (Leader only)"

    auth.leader(org["lead"])
    response = await test_client.post(
        "/api/v1/verification-templates",
        json={"name": "Tech talk", "criteria": [{"key": "clarity", "weight": 2}]},
    )
    assert response.status_code == 201
    assert response.json()["data"]["scoring_type"] == "rubric"

    auth.member(org["alice"])
    response = await test_client.get("/api/v1/verification-templates")
    assert [t["name"] for t in response.json()["data"]] == ["Tech talk"]


@pytest.mark.asyncio
async def test_member_raises_request_on_own_goal(test_client, auth, org):
    auth.member(org["alice"])
    response = await raise_request(test_client, org["goal"])
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "Pending"
    assert data["requester_id"] == str(org["alice"].id)
    assert data["member_name"] == "Alice"
    assert data["team_name"] == "Core"
    assert data["goal"]["name"] == org["goal"].name
    assert data["review"] is None

    goals = (await test_client.get("/api/v1/goals")).json()["data"]
    assert goals[0]["verification_status"] == "Pending"
    assert goals[0]["verification_request_id"] == data["id"]


@pytest.mark.asyncio
async def test_cannot_request_on_someone_elses_goal(test_client, auth, org):
    auth.member(org["bob"])
    response = await raise_request(test_client, org["goal"])
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_request_visibility(test_client, auth, org):
    auth.member(org["alice"])
    request_id = (await raise_request(test_client, org["goal"])).json()["data"]["id"]

    assert (await test_client.get(f"/api/v1/verification-requests/{request_id}")).status_code == 200

    auth.member(org["bob"])
    assert (await test_client.get(f"/api/v1/verification-requests/{request_id}")).status_code == 403
    listed = (await test_client.get("/api/v1/verification-requests")).json()
    assert listed["data"] == []

    auth.leader(org["outsider"])
    response = await test_client.get(f"/api/v1/verification-requests/{request_id}")
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Forbidden (team scope)"

    auth.leader(org["lead"])
    assert (await test_client.get(f"/api/v1/verification-requests/{request_id}")).status_code == 200
    response = await test_client.get("/api/v1/verification-requests/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_leader_queue_filters(test_client, auth, org, seed):
    bob_goal = await seed.goal(org["bob"], year=2024)
    auth.member(org["alice"])
    await raise_request(test_client, org["goal"])
    auth.member(org["bob"])
    await raise_request(test_client, bob_goal)

    auth.leader(org["lead"])
    body = (await test_client.get("/api/v1/verification-requests")).json()
    assert len(body["data"]) == 2
    assert body["page"] == {"limit": 50, "offset": 0, "returned": 2}

    body = (await test_client.get("/api/v1/verification-requests", params={"year": 2024})).json()
    assert [r["member_name"] for r in body["data"]] == ["Bob"]

    body = (await test_client.get(
        "/api/v1/verification-requests", params={"user_id": str(org["alice"].id)}
    )).json()
    assert [r["member_name"] for r in body["data"]] == ["Alice"]

    body = (await test_client.get("/api/v1/verification-requests", params={"status": "Reviewed"})).json()
    assert body["data"] == []

    auth.leader(org["outsider"])
    body = (await test_client.get("/api/v1/verification-requests")).json()
    assert body["data"] == []


@pytest.mark.asyncio
async def test_review_request(test_client, auth, org):
    auth.member(org["alice"])
    request_id = (await raise_request(test_client, org["goal"])).json()["data"]["id"]

    auth.leader(org["outsider"])
    response = await test_client.post(
        f"/api/v1/verification-requests/{request_id}/review", json={"result": "Pass"}
    )
    assert response.status_code == 403

    auth.leader(org["lead"])
    response = await test_client.post(
        f"/api/v1/verification-requests/{request_id}/review",
        json={"result": "NeedsWork", "scores": {"clarity": 3}, "leader_feedback": "Add metrics"},
    )
    assert response.status_code == 200
    review = response.json()["data"]["review"]
    assert review["result"] == "NeedsWork"
    assert review["leader_id"] == str(org["lead"].id)

    response = await test_client.post(
        f"/api/v1/verification-requests/{request_id}/review", json={"result": "Pass"}
    )
    assert response.json()["data"]["review"]["id"] == review["id"]

    auth.member(org["alice"])
    data = (await test_client.get(f"/api/v1/verification-requests/{request_id}")).json()["data"]
    assert data["status"] == "Reviewed"
    assert data["review"]["result"] == "Pass"

    goals = (await test_client.get("/api/v1/goals")).json()["data"]
    assert goals[0]["verification_result"] == "Pass"


@pytest.mark.asyncio
async def test_review_rejects_unknown_result(test_client, auth, org):
    auth.member(org["alice"])
    request_id = (await raise_request(test_client, org["goal"])).json()["data"]["id"]

    auth.leader(org["lead"])
    response = await test_client.post(
        f"/api/v1/verification-requests/{request_id}/review", json={"result": "Maybe"}
    )
    assert response.status_code == 400
