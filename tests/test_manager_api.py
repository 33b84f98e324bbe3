"""
Manager dashboard endpoint tests.
"""

import uuid
from datetime import date

import pytest

from okr_backend.core.security import GROUP_MANAGER


@pytest.fixture
async def org(seed):
    core = await seed.team("Core")
    infra = await seed.team("Infra")
    alice = await seed.user(core, "Alice")
    bob = await seed.user(core, "Bob")
    carol = await seed.user(infra, "Carol")
    alice_goal = await seed.goal(alice, progress=60, status="In Progress", review_status="Approved")
    await seed.goal(bob, progress=20)
    await seed.goal(carol, progress=100, status="Completed")
    plan = await seed.plan(alice_goal, status="Completed", evidence_link="https://demo")
    await seed.report(plan, date.today(), blockers_challenges="Budget")
    return {
        "core": core,
        "infra": infra,
        "alice": alice,
        "bob": bob,
        "carol": carol,
        "boss": await seed.user(None, "Boss", role=GROUP_MANAGER),
    }


@pytest.mark.asyncio
async def test_manager_routes_require_manager(test_client, auth, org):
    auth.leader(org["alice"])
    response = await test_client.get("/api/v1/manager/teams")
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Forbidden (Manager only)"


@pytest.mark.asyncio
async def test_teams_and_users(test_client, auth, org):
    auth.manager(org["boss"])

    teams = (await test_client.get("/api/v1/manager/teams")).json()["data"]
    assert [team["name"] for team in teams] == ["Core", "Infra"]

    body = (await test_client.get("/api/v1/manager/users")).json()
    assert len(body["data"]) == 4
    assert body["page"]["limit"] == 500

    body = (await test_client.get("/api/v1/manager/users", params={"team_id": str(org["infra"].id)})).json()
    assert [user["name"] for user in body["data"]] == ["Carol"]


@pytest.mark.asyncio
async def test_member_insights_any_team(test_client, auth, org):
    auth.manager(org["boss"])
    response = await test_client.get(
        "/api/v1/manager/member-insights", params={"year": 2025, "user_id": str(org["alice"].id)}
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["window"]["weeks"] == 8
    assert data["action_plans"]["evidence_rate"] == 1
    assert data["weekly_reports"]["top_blockers"] == [{"text": "Budget", "count": 1}]


@pytest.mark.asyncio
async def test_overview(test_client, auth, org):
    auth.manager(org["boss"])

    response = await test_client.get("/api/v1/manager/overview")
    assert response.status_code == 400

    data = (await test_client.get("/api/v1/manager/overview", params={"year": 2025})).json()["data"]
    assert data["team_id"] is None
    assert data["org"]["goals_total"] == 3
    assert data["org"]["members_with_goal"] == 3
    assert data["org"]["progress_avg"] == 60
    assert data["org"]["progress_buckets"] == {"0_24": 1, "25_49": 0, "50_74": 1, "75_99": 0, "100": 1}
    assert data["org"]["action_plans"]["completed_with_evidence"] == 1
    assert data["org"]["weekly_reports"]["active_members_this_week"] == 1
    assert [team["team_name"] for team in data["per_team"]] == ["Core", "Infra"]
    assert len(data["trends"]["weeks"]) == 8
    assert data["trends"]["weeks"][-1]["active_members"] == 1

    data = (await test_client.get(
        "/api/v1/manager/overview", params={"year": 2025, "team_id": str(org["infra"].id)}
    )).json()["data"]
    assert [team["team_name"] for team in data["per_team"]] == ["Infra"]
    assert data["org"]["goals_total"] == 1
    assert data["org"]["progress_avg"] == 100


@pytest.mark.asyncio
async def test_team_members_summary(test_client, auth, org):
    auth.manager(org["boss"])

    response = await test_client.get("/api/v1/manager/team-members/summary", params={"year": 2025})
    assert response.status_code == 400
    assert response.json()["error"]["message"] == 'Query param "team_id" is required'

    data = (await test_client.get(
        "/api/v1/manager/team-members/summary",
        params={"year": 2025, "team_id": str(org["core"].id), "weeks": 2},
    )).json()["data"]
    assert data["team_name"] == "Core"
    assert data["window"]["weeks"] == 2
    by_name = {member["name"]: member for member in data["members"]}
    assert set(by_name) == {"Alice", "Bob"}
    assert by_name["Alice"]["weekly_reports"]["streak_weeks"] == 1
    assert by_name["Alice"]["action_plans"]["evidence_rate"] == 1
    assert by_name["Bob"]["goals"]["progress_avg"] == 20
    assert data["top"]["activity_streak"][0]["name"] == "Alice"


@pytest.mark.asyncio
async def test_team_members_trends(test_client, auth, org):
    auth.manager(org["boss"])
    data = (await test_client.get(
        "/api/v1/manager/team-members/trends",
        params={"year": 2025, "team_id": str(org["core"].id), "weeks": 3},
    )).json()["data"]
    assert len(data["weeks"]) == 3
    by_name = {member["name"]: member for member in data["members"]}
    assert by_name["Alice"]["reports_by_week"] == [0, 0, 1]
    assert by_name["Bob"]["reports_by_week"] == [0, 0, 0]


@pytest.mark.asyncio
async def test_unknown_team_trends_are_empty(test_client, auth, org):
    auth.manager(org["boss"])
    data = (await test_client.get(
        "/api/v1/manager/team-members/trends",
        params={"year": 2025, "team_id": str(uuid.uuid4())},
    )).json()["data"]
    assert data["team_name"] is None
    assert data["members"] == []
