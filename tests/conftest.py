import os

# cheap hashes for the test run; must be set before security is imported
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import datetime

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import Database, parse_object_id
from main import app
from schemas import SessionUser, User
from security import create_session_token, hash_password

PASSWORD = "secret123"


def make_user(db, email, role="user", name=None, password=PASSWORD, is_active=True):
    user = User(
        name=name or email.split("@")[0],
        email=email,
        password_hash=hash_password(password),
        role=role,
        is_active=is_active,
    )
    user_id = db.create_document("user", user)
    return db.get_document("user", parse_object_id(user_id))


def session_for(user_doc):
    return SessionUser(
        id=str(user_doc["_id"]),
        email=user_doc["email"],
        name=user_doc["name"],
        role=user_doc["role"],
        is_active=user_doc.get("is_active", True),
    )


def auth_headers(user_doc):
    return {"Authorization": f"Bearer {create_session_token(session_for(user_doc))}"}


def insert(db, collection_name, doc, created_at):
    """Insert ``doc`` with fixed timestamps and return its id as a string."""
    doc = dict(doc, created_at=created_at, updated_at=created_at)
    return str(db[collection_name].insert_one(doc).inserted_id)


@pytest.fixture
def db():
    database = Database(mongomock.MongoClient(), "plant_exchange_test")
    database.ensure_indexes()
    app.state.database = database
    yield database
    app.state.database = None


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def superadmin(db):
    return make_user(db, "root@example.com", role="superadmin", name="Root")


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", role="admin", name="Admin")


@pytest.fixture
def member(db):
    return make_user(db, "siti@example.com", name="Siti")


@pytest.fixture
def superadmin_headers(superadmin):
    return auth_headers(superadmin)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def day():
    """Return a naive UTC datetime for a day in October 2026."""
    def _day(d, month=10, year=2026, hour=12):
        return datetime(year, month, d, hour)
    return _day
