import os

os.environ.setdefault("ENVIRONMENT", "test")

import mongomock  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402


@pytest.fixture()
def db():
    """A fresh in-memory database per test."""
    return mongomock.MongoClient(tz_aware=True)["hotelMenu_test"]


@pytest.fixture()
def client(db):
    from database import get_db
    from main import app

    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def pizza():
    return {
        "name": "Pizza",
        "price": 200,
        "image": "https://img.example.com/pizza.jpg",
        "cuisine": "Italian",
        "section": "Mains",
    }
