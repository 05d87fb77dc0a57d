import pytest

from dotgoals.goals.collection import GoalCollection
from dotgoals.storage.database import GoalDatabase
from dotgoals.storage.preferences import PreferenceStore


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "goals.db")


@pytest.fixture
def database(db_path):
    """Initialized goal database in a temp dir."""
    db = GoalDatabase(db_path)
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def preferences(db_path):
    return PreferenceStore(db_path)


@pytest.fixture
def collection(db_path):
    """Uninitialized collection on a fresh database."""
    goals = GoalCollection(GoalDatabase(db_path), PreferenceStore(db_path))
    yield goals
    goals.close()
