import pytest

from edustream.db import init_db


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_edustream.db")
    return db_path


@pytest.fixture
def ready_db(tmp_db):
    """A temporary database with the schema applied."""
    init_db(tmp_db)
    return tmp_db
