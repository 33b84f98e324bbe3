"""
Pytest configuration and fixtures.
Provides test app client, async DB session replacement and identity override.
"""

import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DB_AUTO_CREATE", "false")

import uuid
from datetime import date, datetime
from typing import Optional

import pytest
from fastapi import HTTPException, status
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from okr_backend.main import app
from okr_backend.api.v1.middleware import get_current_identity
from okr_backend.core.security import GROUP_LEADER, GROUP_MANAGER, GROUP_MEMBER, Identity
from okr_backend.db.base import Base
from okr_backend.db.session import get_db
from okr_backend.models import ActionPlan, Goal, GoalProgressHistory, Team, User, WeeklyReport


# Test database URL (in-memory SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="function")
async def test_engine():
    """In-memory SQLite engine with every table created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
def test_session_maker(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture(scope="function")
async def test_db_session(test_session_maker):
    """A session for service-level tests; callers commit explicitly."""
    async with test_session_maker() as session:
        yield session


class Seeder:
    """Inserts fixture rows, each in its own committed session."""

    def __init__(self, session_maker):
        self.session_maker = session_maker

    async def _add(self, instance):
        async with self.session_maker() as session:
            session.add(instance)
            await session.commit()
            await session.refresh(instance)
        return instance

    async def team(self, name: str = "Platform") -> Team:
        return await self._add(Team(name=name))

    async def user(
        self,
        team: Optional[Team] = None,
        name: str = "Member",
        email: Optional[str] = None,
        role: str = GROUP_MEMBER,
    ) -> User:
        user_id = uuid.uuid4()
        return await self._add(User(
            id=user_id,
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}@example.com",
            role=role,
            team_id=team.id if team else None,
        ))

    async def goal(self, user: User, **values) -> Goal:
        values.setdefault("year", 2025)
        values.setdefault("name", "Grow as an engineer")
        values.setdefault("progress", 0)
        values.setdefault("status", "Not started")
        return await self._add(Goal(user_id=user.id, **values))

    async def plan(self, goal: Goal, **values) -> ActionPlan:
        values.setdefault("title", "Ship the onboarding guide")
        values.setdefault("status", "Not Started")
        return await self._add(ActionPlan(goal_id=goal.id, **values))

    async def report(self, plan: ActionPlan, day: date, **values) -> WeeklyReport:
        return await self._add(WeeklyReport(action_plan_id=plan.id, goal_id=plan.goal_id, date=day, **values))

    async def snapshot(self, goal: Goal, progress: int, recorded_at: datetime) -> GoalProgressHistory:
        return await self._add(GoalProgressHistory(goal_id=goal.id, progress=progress, recorded_at=recorded_at))

    async def get(self, model, id):
        async with self.session_maker() as session:
            return await session.get(model, id)


@pytest.fixture(scope="function")
def seed(test_session_maker) -> Seeder:
    return Seeder(test_session_maker)


class AuthState:
    """The identity the overridden auth dependency hands to endpoints."""

    def __init__(self):
        self.identity: Optional[Identity] = None

    def member(self, user: User) -> Identity:
        return self._set(user, GROUP_MEMBER)

    def leader(self, user: User) -> Identity:
        return self._set(user, GROUP_LEADER)

    def manager(self, user: User) -> Identity:
        return self._set(user, GROUP_MANAGER)

    def anonymous(self) -> None:
        self.identity = None

    def _set(self, user: User, group: str) -> Identity:
        self.identity = Identity(user_id=user.id, groups=frozenset([group]), email=user.email)
        return self.identity


@pytest.fixture(scope="function")
def auth() -> AuthState:
    return AuthState()


@pytest.fixture(scope="function")
async def test_client(test_session_maker, auth):
    """
    Create a test HTTP client bound to the in-memory database.
    """
    async def override_get_db():
        async with test_session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_identity() -> Identity:
        if auth.identity is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
        return auth.identity

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_identity] = override_identity

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
