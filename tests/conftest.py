import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app import create_app
from database import BoardStore
from security import PasswordHasher

# Lowest cost bcrypt accepts; keeps the suite fast
TEST_BCRYPT_ROUNDS = 4


@pytest.fixture
def db_path(tmp_path):
    """Path of a fresh SQLite file for each test."""
    return str(tmp_path / "board_test.db")


@pytest_asyncio.fixture
async def store(db_path):
    board_store = BoardStore(db_path)
    await board_store.init_schema()
    return board_store


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def client(db_path):
    """TestClient over an app bound to the temporary database.

    Used as a context manager so the startup hook creates the schema.
    """
    app = create_app(db_path, bcrypt_rounds=TEST_BCRYPT_ROUNDS)
    with TestClient(app) as test_client:
        yield test_client
