"""
Shared fixtures for the BroTech admin tests.

The document store is an in-memory mongomock client, uploads land in a
temporary static folder, and the assistant has no API key unless a test
sets one.
"""

from datetime import datetime, timedelta, timezone

import mongomock
import pytest
from flask import Flask

from brotech_admin import BrotechAdmin
from brotech_admin.core.config import Config

ADMIN_EMAIL = "admin@brotech.io"
ADMIN_PASSWORD = "secret123"

# Wednesday; whole seconds because the store keeps millisecond precision
NOW = datetime(2024, 5, 8, 12, 0, 0, tzinfo=timezone.utc)


def days_ago(days, hours=0):
    return NOW - timedelta(days=days, hours=hours)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mongo_client():
    return mongomock.MongoClient()


@pytest.fixture
def app(tmp_path, mongo_client, monkeypatch):
    """Flask app with every admin module registered on a mongomock store."""
    monkeypatch.setattr(Config, "GEMINI_API_KEY", None)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)

    static_dir = tmp_path / "static"
    static_dir.mkdir()

    app = Flask(__name__, static_folder=str(static_dir))
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["MONGO_DB_NAME"] = "brotech_test"
    app.config["STORAGE_TYPE"] = "local"
    app.config["FANOUT_MAX_WORKERS"] = 4

    BrotechAdmin(app, client=mongo_client)
    return app


@pytest.fixture
def store(app):
    return app.extensions["brotech_admin"].store


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_id(app):
    """An existing admin account."""
    with app.test_request_context("/"):
        return app.extensions["brotech_admin"].auth.create_admin(
            ADMIN_EMAIL, ADMIN_PASSWORD, ADMIN_PASSWORD, "Site Admin")


@pytest.fixture
def auth_client(client, admin_id):
    """Test client with a signed-in admin session."""
    with client.session_transaction() as sess:
        sess["admin_id"] = admin_id
        sess["admin_email"] = ADMIN_EMAIL
        sess["admin_name"] = "Site Admin"
    return client


@pytest.fixture
def messages(store):
    """Four contact messages, newest last in insertion order."""
    records = [
        {"name": "Acme Corp", "email": "ceo@acme.com", "subject": "Website redesign",
         "message": "We need a new site.", "createdAt": days_ago(10)},
        {"name": "Jane Doe", "email": "jane@example.com", "subject": "Pricing",
         "message": 'He said "hi"', "createdAt": days_ago(3)},
        {"name": "Bob", "email": "bob@example.com", "subject": "Hello",
         "message": "Quick question", "createdAt": days_ago(0, hours=20)},
        {"name": "Carol", "email": "carol@example.com", "subject": "Support",
         "message": "Something broke", "createdAt": days_ago(0, hours=1)},
    ]
    ids = [store.contacts.create(record) for record in records]
    return ids
