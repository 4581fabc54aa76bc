"""
Shared pytest fixtures and configuration for all tests.
"""

import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Add src directory to path so imports work
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minigraphql.config import settings
from minigraphql.database.connection import init_database, reset_database
from minigraphql.database.seed_data import mock_posts, mock_tutorials
from minigraphql.graphql.schema import (
    GraphQLService,
    create_post_service,
    create_tutorial_service,
)
from minigraphql.records import Post, RecordStore, Tutorial, next_int_id, next_str_id


@pytest.fixture
def tutorial_store() -> RecordStore[Tutorial]:
    """A tutorial store holding the two mock tutorials."""
    store = RecordStore(Tutorial, name="tutorial", id_factory=next_int_id)
    store.replace_all(mock_tutorials())
    return store


@pytest.fixture
def post_store() -> RecordStore[Post]:
    """A post store holding the three mock posts."""
    store = RecordStore(Post, name="post", id_factory=next_str_id)
    store.replace_all(mock_posts())
    return store


@pytest.fixture
def tutorial_service(tutorial_store: RecordStore[Tutorial]) -> GraphQLService:
    return create_tutorial_service(tutorial_store)


@pytest.fixture
def post_service(post_store: RecordStore[Post]) -> GraphQLService:
    return create_post_service(post_store)


@pytest.fixture
def database_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[str, None, None]:
    """Point the settings at a fresh SQLite file and reset the shared engine."""
    url = f"sqlite:///{tmp_path / 'test.db'}"
    monkeypatch.setattr(settings, "database_url", url)

    reset_database()
    yield url
    reset_database()


@pytest.fixture
def test_database(database_url: str) -> Generator[str, None, None]:
    """An initialized, empty database."""
    init_database(database_url, force_reinit=True)
    yield database_url
