"""rewardkit - entity schemas for the tasks, goals and product collections of a rewards app."""

import asyncio
import logging
import sys

from src.core.db_client import init_db
from src.core.errors import DatabaseError, SchemaConstructionError
from src.core.field_types import SQLiteTypes
from src.core.logging import configure_logfire
from src.core.schema import SchemaRegistry, init_registry


logger = logging.getLogger(__name__)


async def startup(*, db_path: str | None = None) -> SchemaRegistry:
    """Run the startup sequence and return the registry for the rest of the process.

    Raises:
        SchemaConstructionError: If an entity declaration is defective
        DatabaseError: If the tables cannot be created
    """
    # Configure logging first so registration logs are captured
    configure_logfire()

    registry = init_registry(SQLiteTypes())
    await init_db(registry=registry, db_path=db_path)

    logger.info("startup_complete", extra={"entities": registry.names()})
    return registry


def main() -> None:
    """Initialise the schema registry and database, exiting non-zero on failure."""
    try:
        asyncio.run(startup())
    except (SchemaConstructionError, DatabaseError) as e:
        logger.error("startup_failed", extra={"error": str(e)})
        print(f"\n❌ Startup failed: {e}\n", file=sys.stderr)  # noqa: T201
        sys.exit(1)


if __name__ == "__main__":
    main()
