import os

# Settings are read at import time, so the environment must be ready first
os.environ["JWT_SECRET"] = "test-secret-key-for-pytest"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RUN_MODE"] = "test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402
from sqlmodel.pool import StaticPool  # noqa: E402

from todo_api.database import get_session  # noqa: E402
from todo_api.main import app  # noqa: E402

API = "/api/v1"


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture(name="anon_client")
def anon_client_fixture(session: Session):
    app.dependency_overrides[get_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


def signup(client: TestClient, name="Ada", email="a@x.com", password="pw123456"):
    return client.post(
        f"{API}/users/signup", json={"name": name, "email": email, "password": password}
    )


def login(client: TestClient, email="a@x.com", password="pw123456"):
    return client.post(f"{API}/users/login", json={"email": email, "password": password})


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(name="make_user")
def make_user_fixture(anon_client: TestClient):
    """Sign up and log in a user; returns (user json, auth headers)."""

    def _make_user(name="Ada", email="a@x.com", password="pw123456"):
        assert signup(anon_client, name, email, password).status_code == 201
        data = login(anon_client, email, password).json()
        return data["user"], bearer(data["token"])

    return _make_user


@pytest.fixture(name="client")
def client_fixture(session: Session, make_user):
    """A client authenticated as a freshly signed-up user."""
    _, headers = make_user()
    client = TestClient(app, headers=headers)
    yield client
