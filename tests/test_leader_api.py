"""
Leader dashboard endpoint tests.
"""

import logging
from datetime import date

import pytest

from okr_backend.core.config import settings
from okr_backend.core.security import GROUP_LEADER


@pytest.fixture
async def org(seed):
    core = await seed.team("Core")
    infra = await seed.team("Infra")
    alice = await seed.user(core, "Alice")
    bob = await seed.user(core, "Bob")
    carol = await seed.user(infra, "Carol")
    return {
        "core": core,
        "infra": infra,
        "alice": alice,
        "bob": bob,
        "carol": carol,
        "lead": await seed.user(core, "Lead", role=GROUP_LEADER),
        "alice_goal": await seed.goal(alice, progress=40, review_status="Approved", status="In Progress"),
        "bob_goal": await seed.goal(bob, progress=20),
        "carol_goal": await seed.goal(carol, progress=90),
    }


@pytest.mark.asyncio
async def test_leader_routes_require_leader(test_client, auth, org):
    auth.member(org["alice"])
    response = await test_client.get("/api/v1/leader/goals")
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Forbidden (Leader only)"

    auth.manager(org["alice"])
    assert (await test_client.get("/api/v1/leader/goals")).status_code == 403


@pytest.mark.asyncio
async def test_team_goals(test_client, auth, org, seed):
    await seed.plan(org["alice_goal"], title="Lead retro")
    auth.leader(org["lead"])

    body = (await test_client.get("/api/v1/leader/goals", params={"year": 2025})).json()
    by_owner = {goal["user_name"]: goal for goal in body["data"]}
    assert set(by_owner) == {"Alice", "Bob"}
    assert by_owner["Alice"]["team"] == "Core"
    assert [p["title"] for p in by_owner["Alice"]["action_plans"]] == ["Lead retro"]
    assert by_owner["Bob"]["verification_status"] == "NotRequested"
    assert body["page"] == {"limit": 200, "offset": 0, "returned": 2}

    body = (await test_client.get(
        "/api/v1/leader/goals", params={"user_id": str(org["bob"].id), "limit": 9999}
    )).json()
    assert [goal["user_name"] for goal in body["data"]] == ["Bob"]
    assert body["page"]["limit"] == 500


@pytest.mark.asyncio
async def test_other_team_requested(test_client, auth, org):
    auth.leader(org["lead"])
    response = await test_client.get("/api/v1/leader/goals", params={"team_id": str(org["infra"].id)})
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Forbidden (team scope)"


@pytest.mark.asyncio
async def test_leader_without_team(test_client, auth, seed, org):
    loner = await seed.user(None, "Loner", role=GROUP_LEADER)
    auth.leader(loner)
    response = await test_client.get("/api/v1/leader/users")
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Leader is not assigned to a team"


@pytest.mark.asyncio
async def test_goals_summary(test_client, auth, org):
    auth.leader(org["lead"])

    response = await test_client.get("/api/v1/leader/goals/summary")
    assert response.status_code == 400

    data = (await test_client.get("/api/v1/leader/goals/summary", params={"year": 2025})).json()["data"]
    assert data == {"total": 2, "approved": 1, "pending": 1, "avgProgress": 30}


@pytest.mark.asyncio
async def test_users_and_teams(test_client, auth, org):
    auth.leader(org["lead"])

    body = (await test_client.get("/api/v1/leader/users")).json()
    assert [user["name"] for user in body["data"]] == ["Alice", "Bob", "Lead"]
    assert body["data"][0]["team_name"] == "Core"

    body = (await test_client.get("/api/v1/leader/users", params={"q": "ali"})).json()
    assert [user["name"] for user in body["data"]] == ["Alice"]

    teams = (await test_client.get("/api/v1/leader/teams")).json()["data"]
    assert teams == [{"id": str(org["core"].id), "name": "Core"}]


@pytest.mark.asyncio
async def test_member_insights(test_client, auth, org, seed):
    plan = await seed.plan(org["alice_goal"], status="In Progress")
    await seed.report(plan, date.today(), blockers_challenges="Flaky CI")
    auth.leader(org["lead"])

    response = await test_client.get("/api/v1/leader/member-insights", params={"year": 2025})
    assert response.status_code == 400
    assert response.json()["error"]["message"] == 'Query param "user_id" is required'

    response = await test_client.get(
        "/api/v1/leader/member-insights", params={"year": 2025, "user_id": str(org["carol"].id)}
    )
    assert response.status_code == 403

    response = await test_client.get(
        "/api/v1/leader/member-insights",
        params={"year": 2025, "user_id": str(org["alice"].id), "weeks": 4},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["window"]["weeks"] == 4
    assert data["goals"]["total"] == 1
    assert data["goals"]["approved"] == 1
    assert data["action_plans"]["total"] == 1
    assert data["weekly_reports"]["reports_in_window"] == 1
    assert data["weekly_reports"]["streak_weeks"] == 1
    assert data["weekly_reports"]["top_blockers"] == [{"text": "Flaky CI", "count": 1}]


@pytest.mark.asyncio
async def test_weekly_report_stats(test_client, auth, org, seed):
    reporting = await seed.plan(org["alice_goal"], status="In Progress")
    silent = await seed.plan(org["alice_goal"], status="Blocked")
    await seed.plan(org["alice_goal"], status="Completed")
    await seed.report(reporting, date(2025, 3, 4))
    await seed.report(reporting, date(2025, 2, 10))
    auth.leader(org["lead"])

    response = await test_client.get("/api/v1/leader/action-plans/weekly-report-stats", params={"year": 2025})
    assert response.status_code == 400

    response = await test_client.get(
        "/api/v1/leader/action-plans/weekly-report-stats",
        params={"year": 2025, "from": "2025-03-03", "to": "2025-03-09"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["data"] == {
        str(reporting.id): {"lastReportDate": "2025-03-04", "hasReportInRange": True},
        str(silent.id): {"lastReportDate": None, "hasReportInRange": False},
    }
    assert body["meta"]["plans"] == 2
    assert body["meta"]["reports"] == 2
    assert body["meta"]["from"] == "2025-03-03"


@pytest.mark.asyncio
async def test_leader_edits_team_goal(test_client, auth, org):
    auth.leader(org["lead"])

    response = await test_client.put(
        f"/api/v1/leader/goals/{org['bob_goal'].id}",
        json={"progress": 100, "leader_review_notes": "Done early"},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["progress"] == 100
    assert data["status"] == "Completed"
    assert data["leader_review_notes"] == "Done early"

    response = await test_client.put(f"/api/v1/leader/goals/{org['carol_goal'].id}", json={"progress": 10})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_goals_summary_stops_at_page_ceiling(test_client, auth, org, seed, monkeypatch, caplog):
    for _ in range(5):
        await seed.goal(org["alice"], progress=10)
    monkeypatch.setattr(settings, "SUMMARY_PAGE_SIZE", 2)
    monkeypatch.setattr(settings, "SUMMARY_MAX_PAGES", 2)
    auth.leader(org["lead"])

    with caplog.at_level(logging.WARNING, logger="okr_backend.services.analytics_service"):
        response = await test_client.get("/api/v1/leader/goals/summary", params={"year": 2025})

    assert response.status_code == 200
    assert response.json()["data"]["total"] == 4
    assert "Goals summary stopped at page ceiling" in caplog.messages


@pytest.mark.asyncio
async def test_goals_summary_reads_exact_multiple_of_page_size(test_client, auth, org, seed, monkeypatch, caplog):
    for _ in range(2):
        await seed.goal(org["bob"], progress=10)
    monkeypatch.setattr(settings, "SUMMARY_PAGE_SIZE", 2)
    monkeypatch.setattr(settings, "SUMMARY_MAX_PAGES", 3)
    auth.leader(org["lead"])

    with caplog.at_level(logging.WARNING, logger="okr_backend.services.analytics_service"):
        response = await test_client.get("/api/v1/leader/goals/summary", params={"year": 2025})

    assert response.json()["data"] == {"total": 4, "approved": 1, "pending": 3, "avgProgress": 20}
    assert "Goals summary stopped at page ceiling" not in caplog.messages
