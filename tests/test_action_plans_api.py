"""
Action plan endpoint tests: creation rules, deadline change quota and leader review.
"""

from datetime import date

import pytest

from okr_backend.core.security import GROUP_LEADER
from okr_backend.models import ActionPlan


@pytest.fixture
async def team(seed):
    core = await seed.team("Core")
    alice = await seed.user(core, "Alice")
    return {
        "alice": alice,
        "bob": await seed.user(core, "Bob"),
        "lead": await seed.user(core, "Lead", role=GROUP_LEADER),
        "goal": await seed.goal(alice),
    }


@pytest.mark.asyncio
async def test_create_and_list_by_year(test_client, auth, team, seed):
    await seed.goal(team["alice"], year=2024, name="Old goal")
    auth.member(team["alice"])

    response = await test_client.post(
        f"/api/v1/goals/{team['goal'].id}/action-plans",
        json={"title": "Pair weekly", "end_date": "2025-04-01"},
    )
    assert response.status_code == 201
    plan = response.json()["data"]
    assert plan["status"] == "Not Started"
    assert plan["deadline_change_count"] == 0

    response = await test_client.get("/api/v1/action-plans", params={"year": 2025})
    assert response.status_code == 200
    goals = response.json()["data"]
    assert len(goals) == 1
    assert [p["title"] for p in goals[0]["action_plans"]] == ["Pair weekly"]


@pytest.mark.asyncio
async def test_list_requires_numeric_year(test_client, auth, team):
    auth.member(team["alice"])
    response = await test_client.get("/api/v1/action-plans", params={"year": "soon"})
    assert response.status_code == 400
    assert response.json()["error"]["message"] == 'Query param "year" is required (number)'


@pytest.mark.asyncio
async def test_member_cannot_add_plans_to_started_goal(test_client, auth, team, seed):
    started = await seed.goal(team["alice"], status="In Progress")
    locked = await seed.goal(team["alice"], is_locked=True, review_status="Pending")
    auth.member(team["alice"])

    response = await test_client.post(f"/api/v1/goals/{started.id}/action-plans", json={"title": "Late"})
    assert response.status_code == 409
    response = await test_client.post(f"/api/v1/goals/{locked.id}/action-plans", json={"title": "Late"})
    assert response.status_code == 423


@pytest.mark.asyncio
async def test_leader_can_add_plans_to_started_goal(test_client, auth, team, seed):
    started = await seed.goal(team["alice"], status="In Progress")
    auth.leader(team["lead"])
    response = await test_client.post(f"/api/v1/goals/{started.id}/action-plans", json={"title": "Coaching"})
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_other_member_cannot_add_plans(test_client, auth, team):
    auth.member(team["bob"])
    response = await test_client.post(f"/api/v1/goals/{team['goal'].id}/action-plans", json={"title": "Nope"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_deadline_change_becomes_review_request(test_client, auth, team, seed):
    plan = await seed.plan(team["goal"], end_date=date(2025, 4, 1))
    auth.member(team["alice"])

    response = await test_client.put(f"/api/v1/action-plans/{plan.id}", json={"end_date": "2025-05-01"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["end_date"] == "2025-04-01"
    assert data["request_deadline_date"] == "2025-05-01"
    assert data["deadline_change_count"] == 1
    assert data["review_status"] == "Pending"
    assert data["is_locked"] is True

    response = await test_client.put(f"/api/v1/action-plans/{plan.id}", json={"title": "Other"})
    assert response.status_code == 423

    response = await test_client.post(f"/api/v1/action-plans/{plan.id}/cancel-review")
    data = response.json()["data"]
    assert data["review_status"] is None
    assert data["request_deadline_date"] is None
    assert data["deadline_change_count"] == 1


@pytest.mark.asyncio
async def test_deadline_quota_exhausted(test_client, auth, team, seed):
    """The fourth deadline change is refused and the plan is left untouched."""
    plan = await seed.plan(team["goal"], end_date=date(2025, 4, 1), deadline_change_count=3)
    auth.member(team["alice"])

    response = await test_client.put(
        f"/api/v1/action-plans/{plan.id}",
        json={"end_date": "2025-06-01", "title": "Renamed"},
    )
    assert response.status_code == 409
    assert response.json()["error"]["message"] == "Deadline can only be changed 3 times"

    stored = await seed.get(ActionPlan, plan.id)
    assert stored.end_date == date(2025, 4, 1)
    assert stored.title == "Ship the onboarding guide"
    assert stored.deadline_change_count == 3
    assert stored.request_deadline_date is None


@pytest.mark.asyncio
async def test_leader_approves_deadline_request(test_client, auth, team, seed):
    plan = await seed.plan(
        team["goal"],
        end_date=date(2025, 4, 1),
        request_deadline_date=date(2025, 5, 1),
        review_status="Pending",
        is_locked=True,
        deadline_change_count=1,
    )
    auth.leader(team["lead"])

    response = await test_client.put(f"/api/v1/leader/action-plans/{plan.id}/review", json={"status": "Approved"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["end_date"] == "2025-05-01"
    assert data["request_deadline_date"] is None
    assert data["is_locked"] is False


@pytest.mark.asyncio
async def test_leader_outside_team_cannot_review(test_client, auth, team, seed):
    other_team = await seed.team("Infra")
    outsider = await seed.user(other_team, "Outsider", role=GROUP_LEADER)
    plan = await seed.plan(team["goal"], review_status="Pending", is_locked=True)
    auth.leader(outsider)

    response = await test_client.put(f"/api/v1/leader/action-plans/{plan.id}/review", json={"status": "Approved"})
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Forbidden (team scope)"


@pytest.mark.asyncio
async def test_plan_review_request_is_member_only(test_client, auth, team, seed):
    plan = await seed.plan(team["goal"])

    auth.leader(team["lead"])
    response = await test_client.post(f"/api/v1/action-plans/{plan.id}/request-review")
    assert response.status_code == 403

    auth.member(team["alice"])
    response = await test_client.post(f"/api/v1/action-plans/{plan.id}/request-review")
    assert response.status_code == 200
    assert response.json()["data"]["review_status"] == "Pending"


@pytest.mark.asyncio
async def test_delete_plan(test_client, auth, team, seed):
    plan = await seed.plan(team["goal"])
    locked = await seed.plan(team["goal"], is_locked=True, review_status="Pending")
    auth.member(team["alice"])

    response = await test_client.delete(f"/api/v1/action-plans/{locked.id}")
    assert response.status_code == 423

    response = await test_client.delete(f"/api/v1/action-plans/{plan.id}")
    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert await seed.get(ActionPlan, plan.id) is None
