"""Pytest configuration and fixtures."""
from typing import Optional

import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.exceptions import StoreError
from app.main import app
from app.models.investment_goal import InvestmentGoal, compute_monthly_value
from app.routers.investment_goals import get_goal_service
from app.utils.query import merge_fields


class InMemoryGoalService:
    """Stand-in for InvestmentGoalService that keeps goals in a dict."""

    def __init__(self):
        self.goals: dict[int, InvestmentGoal] = {}
        self.next_id = 1
        self.fail = False

    def _check(self):
        if self.fail:
            raise StoreError("connection refused")

    async def create_goal(self, name, months, value, monthly_value):
        self._check()
        goal = InvestmentGoal(
            id=self.next_id,
            name=name,
            months=months,
            value=value,
            monthly_value=monthly_value,
        )
        self.goals[goal.id] = goal
        self.next_id += 1
        return goal

    async def list_goals(self, name: Optional[str] = None, month=None):
        self._check()
        goals = sorted(self.goals.values(), key=lambda g: g.id, reverse=True)
        if name:
            goals = [g for g in goals if name.lower() in g.name.lower()]
        if month:
            goals = [g for g in goals if month.value in g.months]
        return goals

    async def get_goal(self, goal_id):
        self._check()
        return self.goals.get(goal_id)

    async def replace_goal(self, goal_id, name, months, value, monthly_value):
        self._check()
        if goal_id not in self.goals:
            return None
        self.goals[goal_id] = InvestmentGoal(
            id=goal_id,
            name=name,
            months=months,
            value=value,
            monthly_value=monthly_value,
        )
        return self.goals[goal_id]

    async def patch_goal(self, goal_id, fields):
        self._check()
        current = self.goals.get(goal_id)
        if current is None:
            return None
        merged = merge_fields(current.model_dump(), fields, ("name", "months", "value"))
        return await self.replace_goal(
            goal_id,
            monthly_value=compute_monthly_value(merged["value"], merged["months"]),
            **merged,
        )

    async def delete_goal(self, goal_id):
        self._check()
        return self.goals.pop(goal_id, None) is not None


@pytest_asyncio.fixture
async def goal_service():
    """In-memory goal service shared by the app for one test."""
    service = InMemoryGoalService()
    app.dependency_overrides[get_goal_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_goal_service, None)


@pytest_asyncio.fixture
async def app_client(goal_service):
    """
    Create a test client backed by the in-memory goal service.

    The application lifespan is not run, so no database connection is made.
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client
