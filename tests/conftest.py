"""
pytest configuration and fixtures.
"""

import pytest

from users_service import UserStore, create_app


@pytest.fixture
def store() -> UserStore:
    """Store pre-seeded with John (id 1) and Jane (id 2)."""
    return UserStore.seeded()


@pytest.fixture
def app(store):
    application = create_app(store=store)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def sample_user():
    """A valid user payload."""
    return {"name": "Ann", "email": "ann@x.com"}
