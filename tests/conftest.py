"""Shared pytest fixtures."""

import pytest

from app.config.models import MatchingConfig
from app.logging.context import clear_log_context
from app.persistence import close_database, get_session, init_database
from app.persistence.repositories import ItemRepository
from app.pipeline import MatchOrchestrator

from tests.helpers.factories import NOW

ENV_VARS = ("DATABASE_URL", "LOG_LEVEL", "ENVIRONMENT", "TRIGGER_WORKERS")


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Start every test from an environment with none of the service variables set."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture(autouse=True)
def reset_log_context():
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def memory_db():
    """Fresh in-memory database for one test."""
    init_database("sqlite:///:memory:")
    yield
    close_database()


@pytest.fixture
def file_db(tmp_path):
    """File-backed database, needed when several threads share the store."""
    init_database(f"sqlite:///{tmp_path / 'lost_found.db'}")
    yield
    close_database()


@pytest.fixture
def matching_config():
    return MatchingConfig()


@pytest.fixture
def orchestrator(matching_config):
    return MatchOrchestrator.from_config(matching_config, clock=lambda: NOW)


@pytest.fixture
def store_items():
    """Persist items and return them as stored."""

    def _store(*items):
        with get_session() as session:
            repo = ItemRepository(session)
            return [repo.add(item) for item in items]

    return _store
