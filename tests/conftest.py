"""Pytest configuration and shared fixtures."""

import logging
from collections.abc import Generator
from pathlib import Path

import logfire
import pytest

from src.core.db_client import init_db
from src.core.field_types import PocketBaseTypes, SQLiteTypes
from src.core.schema import SchemaRegistry, init_registry


logger = logging.getLogger(__name__)


@pytest.fixture(scope="session", autouse=True)
def _configure_logfire_for_tests() -> Generator[None]:
    """Configure Logfire locally so spans work without sending anything."""
    logfire.configure(send_to_logfire=False, console=False)
    yield


@pytest.fixture
def registry() -> SchemaRegistry:
    """Registry built for the SQLite backend."""
    return init_registry(SQLiteTypes())


@pytest.fixture
def pb_registry() -> SchemaRegistry:
    """Registry built for the PocketBase backend."""
    return init_registry(PocketBaseTypes())


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """Path to a throwaway SQLite database file."""
    return str(tmp_path / "rewardkit_test.db")


@pytest.fixture
async def initialized_db(registry: SchemaRegistry, db_path: str) -> str:
    """SQLite database with every entity table created."""
    await init_db(registry=registry, db_path=db_path)
    logger.info("Test database initialized at %s", db_path)
    return db_path


@pytest.fixture
def task_data() -> dict:
    """Minimal valid Task input keyed by column name."""
    return {"title": "Tidy your room", "coinReward": 10, "difficultyLevel": "easy"}


@pytest.fixture
def goal_data() -> dict:
    """Minimal valid Goal input keyed by column name."""
    return {"title": "New bike", "type": "COIN"}


@pytest.fixture
def collection_data() -> dict:
    """Minimal valid Collection input keyed by column name."""
    return {"name": "Summer toys"}


@pytest.fixture
def image_data() -> dict:
    """Image metadata as produced by the upload handler."""
    return {
        "url": "https://cdn.example.com/goals/bike.png",
        "filename": "goals/bike.png",
        "originalName": "bike.png",
        "size": 20480,
        "mimetype": "image/png",
    }
