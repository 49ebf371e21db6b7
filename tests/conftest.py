"""Pytest configuration and shared fixtures."""

import pytest


@pytest.fixture
async def repo(tmp_path):
    """Create an initialized board repository in a temp directory."""
    from src.store.repository import BoardRepository

    repository = BoardRepository(tmp_path / "board.db")
    await repository.initialize()
    yield repository
    await repository.close()


@pytest.fixture
async def board(repo):
    """Board service over the temp repository."""
    from src.board.service import BoardService

    return BoardService(repo)


@pytest.fixture
def owner_id() -> str:
    """Sample owner id for testing."""
    return "user_1"


@pytest.fixture(autouse=True)
def _reset_logging_state():
    """Keep logger configuration from leaking between tests."""
    from src.utils.logging import reset_logging

    yield
    reset_logging()
