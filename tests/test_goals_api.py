"""
Goal endpoint tests: member lifecycle and leader review.
"""

import uuid

import pytest
from sqlalchemy import select

from okr_backend.core.security import GROUP_LEADER
from okr_backend.models import Goal, GoalProgressHistory


@pytest.fixture
async def team(seed):
    core = await seed.team("Core")
    return {
        "team": core,
        "alice": await seed.user(core, "Alice"),
        "lead": await seed.user(core, "Lead", role=GROUP_LEADER),
    }


@pytest.mark.asyncio
async def test_create_and_list_goals(test_client, auth, team):
    auth.member(team["alice"])

    response = await test_client.post(
        "/api/v1/goals",
        json={"year": 2025, "name": "Learn Rust", "progress": 130, "user_id": str(team["lead"].id)},
    )
    assert response.status_code == 201
    goal = response.json()["data"]
    assert goal["user_id"] == str(team["alice"].id)
    assert goal["progress"] == 100
    assert goal["status"] == "Completed"

    response = await test_client.get("/api/v1/goals")
    assert response.status_code == 200
    goals = response.json()["data"]
    assert [g["name"] for g in goals] == ["Learn Rust"]
    assert goals[0]["verification_status"] == "NotRequested"


@pytest.mark.asyncio
async def test_create_goal_defaults(test_client, auth, team):
    auth.member(team["alice"])
    response = await test_client.post("/api/v1/goals", json={"year": 2025, "name": "Mentor"})
    goal = response.json()["data"]
    assert goal["progress"] == 0
    assert goal["status"] == "Not started"
    assert goal["is_locked"] is False


@pytest.mark.asyncio
async def test_create_goal_requires_name(test_client, auth, team):
    auth.member(team["alice"])
    response = await test_client.post("/api/v1/goals", json={"year": 2025})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_progress_change_records_history(test_client, auth, team, test_session_maker):
    auth.member(team["alice"])
    created = (await test_client.post("/api/v1/goals", json={"year": 2025, "name": "Speak"})).json()["data"]

    await test_client.put(f"/api/v1/goals/{created['id']}", json={"progress": 40})
    await test_client.put(f"/api/v1/goals/{created['id']}", json={"description": "conference talk"})

    async with test_session_maker() as session:
        rows = (await session.execute(
            select(GoalProgressHistory.progress).where(GoalProgressHistory.goal_id == uuid.UUID(created["id"]))
        )).scalars().all()
    assert sorted(rows) == [0, 40]


@pytest.mark.asyncio
async def test_review_request_locks_goal(test_client, auth, team, seed):
    """Create a goal and plan, request review, then a second request conflicts while locked."""
    auth.member(team["alice"])
    goal = (await test_client.post("/api/v1/goals", json={"year": 2025, "name": "Lead a project"})).json()["data"]

    response = await test_client.post(f"/api/v1/goals/{goal['id']}/request-review")
    assert response.status_code == 409

    plan = await test_client.post(f"/api/v1/goals/{goal['id']}/action-plans", json={"title": "Write RFC"})
    assert plan.status_code == 201

    response = await test_client.post(f"/api/v1/goals/{goal['id']}/request-review")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["review_status"] == "Pending"
    assert data["is_locked"] is True

    response = await test_client.post(f"/api/v1/goals/{goal['id']}/request-review")
    assert response.status_code == 409
    assert response.json()["error"]["message"] == "Goal is already pending review"

    response = await test_client.put(f"/api/v1/goals/{goal['id']}", json={"name": "Renamed"})
    assert response.status_code == 423
    assert response.json()["error"]["message"] == "Goal is locked for review"

    response = await test_client.delete(f"/api/v1/goals/{goal['id']}")
    assert response.status_code == 423

    response = await test_client.post(f"/api/v1/goals/{goal['id']}/cancel-review")
    assert response.json()["data"]["review_status"] == "Cancelled"
    assert response.json()["data"]["is_locked"] is False


@pytest.mark.asyncio
async def test_approved_goal_accepts_progress_only(test_client, auth, team, seed):
    goal = await seed.goal(team["alice"], status="In Progress", review_status="Approved")
    auth.member(team["alice"])

    response = await test_client.put(f"/api/v1/goals/{goal.id}", json={"progress": 55, "status": "In Progress"})
    assert response.status_code == 200
    assert response.json()["data"]["progress"] == 55

    response = await test_client.put(f"/api/v1/goals/{goal.id}", json={"name": "Sneaky"})
    assert response.status_code == 423

    for payload in ({"progress": 50, "is_locked": False}, {"progress": 50, "leader_review_notes": "ok"}):
        response = await test_client.put(f"/api/v1/goals/{goal.id}", json=payload)
        assert response.status_code == 423
        assert response.json()["error"]["message"] == "Goal is locked (only status/progress updates are allowed)"
    assert (await seed.get(Goal, goal.id)).progress == 55

    response = await test_client.post(f"/api/v1/goals/{goal.id}/request-review")
    assert response.status_code == 409
    assert response.json()["error"]["message"] == "Goal already approved"


@pytest.mark.asyncio
async def test_member_cannot_touch_other_goals(test_client, auth, team, seed):
    goal = await seed.goal(team["lead"])
    auth.member(team["alice"])

    response = await test_client.put(f"/api/v1/goals/{goal.id}", json={"progress": 10})
    assert response.status_code == 403

    response = await test_client.delete("/api/v1/goals/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_goal(test_client, auth, team, seed):
    goal = await seed.goal(team["alice"])
    await seed.plan(goal)
    auth.member(team["alice"])

    response = await test_client.delete(f"/api/v1/goals/{goal.id}")
    assert response.status_code == 200
    assert response.json() == {"message": "Goal deleted successfully"}
    assert await seed.get(Goal, goal.id) is None


@pytest.mark.asyncio
async def test_leader_approval_starts_goal(test_client, auth, team, seed, test_session_maker):
    """A leader approving a pending, not-started goal moves it to In Progress and unlocks it."""
    goal = await seed.goal(team["alice"], review_status="Pending", is_locked=True)
    auth.leader(team["lead"])

    response = await test_client.put(
        f"/api/v1/leader/goals/{goal.id}/review",
        json={"status": "Approved", "comment": "Great scope"},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "In Progress"
    assert data["review_status"] == "Approved"
    assert data["is_locked"] is False
    assert data["leader_review_notes"] == "Great scope"

    async with test_session_maker() as session:
        reviewed_by, approved_at = (await session.execute(
            select(Goal.reviewed_by, Goal.approved_at).where(Goal.id == goal.id)
        )).one()
    assert reviewed_by == team["lead"].id
    assert approved_at is not None


@pytest.mark.asyncio
async def test_leader_unknown_decision_keeps_goal_pending(test_client, auth, team, seed):
    goal = await seed.goal(team["alice"])
    auth.leader(team["lead"])

    response = await test_client.put(f"/api/v1/leader/goals/{goal.id}/review", json={"status": "Maybe"})
    data = response.json()["data"]
    assert data["review_status"] == "Pending"
    assert data["is_locked"] is True


@pytest.mark.asyncio
async def test_unlocked_goal_update_ignores_unwritable_keys(test_client, auth, team, seed):
    goal = await seed.goal(team["alice"])
    auth.member(team["alice"])

    response = await test_client.put(
        f"/api/v1/goals/{goal.id}",
        json={"progress": 20, "user_id": str(team["lead"].id), "is_locked": True},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["progress"] == 20
    assert data["user_id"] == str(team["alice"].id)
    assert data["is_locked"] is False
