"""
Access guard tests against the in-memory database.
"""

import uuid
from datetime import date

import pytest

from okr_backend.core.security import GROUP_LEADER, GROUP_MANAGER, GROUP_MEMBER, Identity
from okr_backend.services.access_guard import AccessGuard


def identity_for(user, *groups):
    return Identity(user_id=user.id, groups=frozenset(groups or [GROUP_MEMBER]), email=user.email)


@pytest.fixture
async def world(seed):
    """Two teams, a member in each and a leader on the first."""
    core = await seed.team("Core")
    infra = await seed.team("Infra")
    alice = await seed.user(core, "Alice")
    bob = await seed.user(infra, "Bob")
    lead = await seed.user(core, "Lead", role=GROUP_LEADER)
    goal = await seed.goal(alice)
    plan = await seed.plan(goal)
    report = await seed.report(plan, date(2025, 3, 10))
    bob_goal = await seed.goal(bob)
    return {
        "alice": alice,
        "bob": bob,
        "lead": lead,
        "goal": goal,
        "plan": plan,
        "report": report,
        "bob_goal": bob_goal,
    }


@pytest.mark.asyncio
async def test_owner_is_granted_the_goal(test_db_session, world):
    result = await AccessGuard(test_db_session).can_access_goal(identity_for(world["alice"]), world["goal"].id)
    assert result.allowed
    assert result.resource.id == world["goal"].id


@pytest.mark.asyncio
async def test_missing_goal_is_not_found(test_db_session, world):
    result = await AccessGuard(test_db_session).can_access_goal(identity_for(world["alice"]), uuid.uuid4())
    assert not result.allowed
    assert result.status_code == 404
    assert result.message == "Goal not found"


@pytest.mark.asyncio
async def test_other_member_is_forbidden(test_db_session, world):
    guard = AccessGuard(test_db_session)
    bob = identity_for(world["bob"])

    assert (await guard.can_access_goal(bob, world["goal"].id)).status_code == 403
    assert (await guard.can_access_action_plan(bob, world["plan"].id)).status_code == 403
    assert (await guard.can_access_weekly_report(bob, world["report"].id)).status_code == 403


@pytest.mark.asyncio
async def test_report_access_walks_to_the_goal_owner(test_db_session, world):
    result = await AccessGuard(test_db_session).can_access_weekly_report(identity_for(world["alice"]), world["report"].id)
    assert result.allowed
    assert result.resource.id == world["report"].id


@pytest.mark.asyncio
async def test_missing_plan_and_report(test_db_session, world):
    guard = AccessGuard(test_db_session)
    alice = identity_for(world["alice"])
    assert (await guard.can_access_action_plan(alice, uuid.uuid4())).message == "Action plan not found"
    assert (await guard.can_access_weekly_report(alice, uuid.uuid4())).message == "Weekly report not found"


@pytest.mark.asyncio
async def test_privileged_callers_pass_ownership(test_db_session, world):
    guard = AccessGuard(test_db_session)
    assert (await guard.can_access_goal(identity_for(world["lead"], GROUP_LEADER), world["bob_goal"].id)).allowed
    assert (await guard.can_access_goal(identity_for(world["bob"], GROUP_MANAGER), world["goal"].id)).allowed


@pytest.mark.asyncio
async def test_owner_only_refuses_privileged_callers(test_db_session, world):
    result = await AccessGuard(test_db_session).can_access_goal(
        identity_for(world["lead"], GROUP_LEADER), world["goal"].id, owner_only=True
    )
    assert result.status_code == 403


@pytest.mark.asyncio
async def test_team_scope_holds_leaders_to_their_team(test_db_session, world):
    guard = AccessGuard(test_db_session)
    lead = identity_for(world["lead"], GROUP_LEADER)

    inside = await guard.can_access_goal(lead, world["goal"].id, enforce_team_scope=True)
    assert inside.allowed

    outside = await guard.can_access_goal(lead, world["bob_goal"].id, enforce_team_scope=True)
    assert outside.status_code == 403
    assert outside.message == "Forbidden (team scope)"


@pytest.mark.asyncio
async def test_team_scope_needs_a_team(test_db_session, seed, world):
    loner = await seed.user(None, "Loner", role=GROUP_LEADER)
    result = await AccessGuard(test_db_session).can_access_goal(
        identity_for(loner, GROUP_LEADER), world["goal"].id, enforce_team_scope=True
    )
    assert result.status_code == 403
    assert result.message == "Leader is not assigned to a team"


@pytest.mark.asyncio
async def test_team_scope_does_not_bind_managers(test_db_session, world):
    result = await AccessGuard(test_db_session).can_access_goal(
        identity_for(world["bob"], GROUP_MANAGER), world["goal"].id, enforce_team_scope=True
    )
    assert result.allowed
