import os

# Must be set before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from expense_tracker.core import security
from expense_tracker.db.session import Base, get_db
from expense_tracker.main import app

# Minimum bcrypt cost keeps the suite fast
security.pwd_context.update(bcrypt__rounds=4)


@pytest.fixture()
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def client(db_engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def register_and_login(client, username="alice", email="a@x.com", password="secret1"):
    """Register a user and return an Authorization header for them."""
    response = client.post("/register", json={"username": username, "email": email, "password": password})
    assert response.status_code == 201, response.text
    response = client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture()
def alice(client):
    return register_and_login(client)


@pytest.fixture()
def bob(client):
    return register_and_login(client, username="bob", email="b@x.com", password="secret2")


@pytest.fixture()
def failing_commit(client, db_engine):
    """Make every commit in the next requests raise the given error."""

    def install(error):
        class FailingSession(Session):
            def commit(self):
                raise error

        FailingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine, class_=FailingSession)

        def override_get_db():
            db = FailingSessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db

    return install
