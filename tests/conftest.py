from pathlib import Path
import sys
import os

import pytest
from flask import g
from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Safety default for any module-level app creation during test imports.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from fairvote import create_app
from fairvote.extensions import db
from fairvote.models import User
from fairvote.services.elections import create_election
from fairvote.store import ElectionStore

PASSWORD = "correct-horse"


@pytest.fixture()
def app(tmp_path: Path):
    db_file = tmp_path / "test.sqlite3"
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_file}",
            "SQLALCHEMY_ENGINE_OPTIONS": {},
            "VOTE_TRANSACTION_MAX_ATTEMPTS": 5,
        }
    )

    with app.app_context():
        driver = db.engine.url.drivername
        if driver != "sqlite":
            raise RuntimeError(
                f"Test database must be SQLite, got '{driver}'. Refusing to run destructive test setup."
            )
        db.drop_all()
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def db_session(app):
    with app.app_context():
        yield db.session


@pytest.fixture()
def store(db_session):
    return ElectionStore(db_session)


@pytest.fixture()
def other_store(app):
    """A second, independent session on the same database."""
    session = Session(db.engine)
    yield ElectionStore(session)
    session.close()


def _make_user(db_session, email, name):
    user = User(
        email=email,
        display_name=name,
        password_hash=generate_password_hash(PASSWORD, method="pbkdf2:sha256"),
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def organizer(db_session):
    return _make_user(db_session, "organizer@example.com", "Organizer")


@pytest.fixture()
def voter_a(db_session):
    return _make_user(db_session, "a@x.com", "Voter A")


@pytest.fixture()
def voter_b(db_session):
    return _make_user(db_session, "b@x.com", "Voter B")


@pytest.fixture()
def outsider(db_session):
    return _make_user(db_session, "c@x.com", "Outsider")


@pytest.fixture()
def election(store, organizer):
    return create_election(
        store,
        organizer,
        title="Class Representative",
        candidates=["Ava", "Noah", "Liam"],
        max_selections=2,
        eligible_emails=["a@x.com", "b@x.com"],
    )


@pytest.fixture()
def login(client):
    def _login(user):
        # Requests share the fixture's app context, so drop Flask-Login's cached user.
        g.pop("_login_user", None)
        with client.session_transaction() as session:
            session["_user_id"] = str(user.id)
            session["_fresh"] = True
        return client

    return _login
