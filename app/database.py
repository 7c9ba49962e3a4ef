"""PostgreSQL connection pool using the SQLAlchemy async engine (asyncpg driver)."""
import logging

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    Identity,
    MetaData,
    Numeric,
    String,
    Table,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from app.config import settings


logger = logging.getLogger(__name__)

metadata = MetaData()

investment_goals = Table(
    "investment_goals",
    metadata,
    Column("id", BigInteger, Identity(always=True), primary_key=True),
    Column("name", String(20), nullable=False),
    Column("months", ARRAY(String), nullable=False),
    Column("total_value", Numeric(14, 2), nullable=False),
    Column("monthly_value", Numeric(14, 2), nullable=False),
    CheckConstraint("total_value > 0", name="investment_goals_total_value_positive"),
)


class Database:
    """PostgreSQL connection manager."""

    engine: AsyncEngine | None = None

    async def connect(self, url: str | None = None) -> None:
        """Create the process-wide engine (connection pool)."""
        self.engine = create_async_engine(
            url or settings.database_url,
            pool_size=settings.db_pool_size,
            echo=settings.db_echo,
        )
        logger.info("Connected to PostgreSQL")

    async def disconnect(self) -> None:
        """Dispose of the engine and close pooled connections."""
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            logger.info("Disconnected from PostgreSQL")

    async def create_schema(self, drop: bool = False) -> None:
        """Create the investment_goals table if it does not exist."""
        if self.engine is None:
            raise RuntimeError("Database not connected")
        async with self.engine.begin() as conn:
            if drop:
                await conn.run_sync(metadata.drop_all)
            await conn.run_sync(metadata.create_all)


# Global database instance
database = Database()


async def get_engine() -> AsyncEngine:
    """Dependency to get the database engine."""
    if database.engine is None:
        raise RuntimeError("Database not connected")
    return database.engine
