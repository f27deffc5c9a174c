"""Shared test fixtures."""

import pytest

from dynastykeeper.config import Settings
from dynastykeeper.core.teams import TeamDirectory
from dynastykeeper.models.teams import Team


@pytest.fixture
def settings() -> Settings:
    """Test settings with defaults."""
    return Settings(dynasty_env="development", database_url="sqlite+aiosqlite:///:memory:")


@pytest.fixture
def teams() -> TeamDirectory:
    """A small directory: two Big Ten schools, one ACC school, one independent."""
    return TeamDirectory(
        [
            Team(name="Home U", conference="Big Ten", state="OH"),
            Team(name="State", conference="Big Ten", state="MI"),
            Team(name="Tech", conference="ACC", state="GA"),
            Team(name="Notre Dame", conference="Independent", state="IN"),
            Team(name="Nowhere", conference=""),
        ]
    )
