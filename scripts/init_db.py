"""Create the investment_goals table.

Usage:
    python scripts/init_db.py [--database-url URL] [--drop]
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import settings
from app.database import database
from app.logging_config import configure_logging


async def init_db(database_url: str, drop: bool) -> None:
    """Connect and create the schema."""
    await database.connect(database_url)
    try:
        await database.create_schema(drop=drop)
        print("investment_goals table ready")
    finally:
        await database.disconnect()


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the investment goals schema")
    parser.add_argument("--database-url", default=settings.database_url, help="SQLAlchemy database URL")
    parser.add_argument("--drop", action="store_true", help="Drop the table before creating it")
    args = parser.parse_args()

    configure_logging(settings.log_level)
    asyncio.run(init_db(args.database_url, args.drop))


if __name__ == "__main__":
    main()
