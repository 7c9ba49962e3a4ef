"""Investment goal service - data access for the investment_goals table."""
import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from app.exceptions import StoreError
from app.models.investment_goal import InvestmentGoal, Month, compute_monthly_value
from app.utils.query import build_where_clause, escape_like, merge_fields


logger = logging.getLogger(__name__)

GOAL_COLUMNS = "id, name, months, total_value, monthly_value"
MUTABLE_FIELDS = ("name", "months", "value")

INSERT_GOAL_SQL = f"""
    INSERT INTO investment_goals (name, months, total_value, monthly_value)
    VALUES (:name, :months, :value, :monthly_value)
    RETURNING {GOAL_COLUMNS}
"""

SELECT_GOAL_SQL = f"SELECT {GOAL_COLUMNS} FROM investment_goals WHERE id = :id"

UPDATE_GOAL_SQL = f"""
    UPDATE investment_goals
    SET name = :name, months = :months, total_value = :value, monthly_value = :monthly_value
    WHERE id = :id
    RETURNING {GOAL_COLUMNS}
"""

DELETE_GOAL_SQL = "DELETE FROM investment_goals WHERE id = :id RETURNING id"


def _month_codes(months) -> list[str]:
    return [month.value if isinstance(month, Month) else str(month) for month in months]


def _to_numeric(value) -> Decimal:
    return Decimal(str(value))


class InvestmentGoalService:
    """Service for handling investment goal persistence."""

    def __init__(self, engine: AsyncEngine):
        """Initialize service with the database engine."""
        self.engine = engine

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[AsyncConnection]:
        """Yield a connection inside a transaction, wrapping driver failures in StoreError."""
        try:
            async with self.engine.begin() as conn:
                yield conn
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(str(e)) from e

    def _row_to_goal(self, row) -> InvestmentGoal:
        """Convert a database row to an InvestmentGoal model."""
        return InvestmentGoal(
            id=int(row["id"]),
            name=row["name"],
            months=list(row["months"]),
            value=float(row["total_value"]),
            monthly_value=float(row["monthly_value"]),
        )

    async def create_goal(
        self,
        name: str,
        months: list,
        value: float,
        monthly_value: float,
    ) -> InvestmentGoal:
        """
        Insert a new goal.

        Args:
            name: Goal name
            months: Target month codes
            value: Total target value
            monthly_value: Value per month

        Returns:
            Persisted goal including its generated id

        Raises:
            StoreError: If the insert fails
        """
        async with self._connection() as conn:
            result = await conn.execute(
                text(INSERT_GOAL_SQL),
                {
                    "name": name,
                    "months": _month_codes(months),
                    "value": _to_numeric(value),
                    "monthly_value": _to_numeric(monthly_value),
                },
            )
            goal = self._row_to_goal(result.mappings().one())

        logger.info("Created investment goal %s", goal.id)
        return goal

    async def list_goals(
        self,
        name: Optional[str] = None,
        month: Optional[Month] = None,
    ) -> list[InvestmentGoal]:
        """
        List goals, most recently created first.

        Args:
            name: Optional case-insensitive substring of the name
            month: Optional month code the goal must include

        Returns:
            List of goals (empty if nothing matches)
        """
        conditions: list[tuple[str, Any]] = []

        if name:
            conditions.append(("name ILIKE {param} ESCAPE '\\'", f"%{escape_like(name)}%"))
        if month:
            conditions.append(("{param} = ANY(months)", _month_codes([month])[0]))

        where, params = build_where_clause(conditions)
        query = f"SELECT {GOAL_COLUMNS} FROM investment_goals {where} ORDER BY id DESC"

        async with self._connection() as conn:
            result = await conn.execute(text(query), params)
            rows = result.mappings().all()

        return [self._row_to_goal(row) for row in rows]

    async def get_goal(self, goal_id: int) -> Optional[InvestmentGoal]:
        """Get a goal by id, or None if it does not exist."""
        async with self._connection() as conn:
            result = await conn.execute(text(SELECT_GOAL_SQL), {"id": goal_id})
            row = result.mappings().first()

        if row is None:
            return None
        return self._row_to_goal(row)

    async def replace_goal(
        self,
        goal_id: int,
        name: str,
        months: list,
        value: float,
        monthly_value: float,
    ) -> Optional[InvestmentGoal]:
        """
        Overwrite every mutable field of a goal.

        Returns:
            Updated goal, or None if the id does not exist

        Raises:
            StoreError: If the update fails
        """
        async with self._connection() as conn:
            result = await conn.execute(
                text(UPDATE_GOAL_SQL),
                {
                    "id": goal_id,
                    "name": name,
                    "months": _month_codes(months),
                    "value": _to_numeric(value),
                    "monthly_value": _to_numeric(monthly_value),
                },
            )
            row = result.mappings().first()

        if row is None:
            return None
        return self._row_to_goal(row)

    async def patch_goal(self, goal_id: int, fields: dict) -> Optional[InvestmentGoal]:
        """
        Update only the supplied fields of a goal.

        The current row is locked, merged with ``fields`` and written back in one
        transaction. The monthly value is recomputed from the merged value and months.

        Args:
            goal_id: Goal id
            fields: Subset of name, months and value

        Returns:
            Updated goal, or None if the id does not exist

        Raises:
            StoreError: If the read or the update fails
        """
        async with self._connection() as conn:
            result = await conn.execute(
                text(f"{SELECT_GOAL_SQL} FOR UPDATE"),
                {"id": goal_id},
            )
            row = result.mappings().first()
            if row is None:
                return None

            current = self._row_to_goal(row)
            merged = merge_fields(
                {"name": current.name, "months": current.months, "value": current.value},
                fields,
                MUTABLE_FIELDS,
            )
            monthly_value = compute_monthly_value(merged["value"], merged["months"])

            result = await conn.execute(
                text(UPDATE_GOAL_SQL),
                {
                    "id": goal_id,
                    "name": merged["name"],
                    "months": _month_codes(merged["months"]),
                    "value": _to_numeric(merged["value"]),
                    "monthly_value": _to_numeric(monthly_value),
                },
            )
            updated = self._row_to_goal(result.mappings().one())

        return updated

    async def delete_goal(self, goal_id: int) -> bool:
        """Hard delete a goal. Returns True if a row was removed."""
        async with self._connection() as conn:
            result = await conn.execute(text(DELETE_GOAL_SQL), {"id": goal_id})
            deleted = result.first() is not None

        if deleted:
            logger.info("Deleted investment goal %s", goal_id)
        return deleted
