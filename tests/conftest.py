import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from app.core.config import settings
from app.core.security import create_access_token
from app.db.session import get_db
from app.main import app
from app.models import User


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))

    def override_get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(engine):
    def _make(name: str) -> User:
        with Session(engine) as session:
            user = User(email=f"{name}@example.com", full_name=name.title())
            session.add(user)
            session.commit()
            session.refresh(user)
            session.expunge(user)
        return user
    return _make


@pytest.fixture
def owner(make_user):
    return make_user("owner")


@pytest.fixture
def manager(make_user):
    return make_user("manager")


@pytest.fixture
def member(make_user):
    return make_user("member")


@pytest.fixture
def outsider(make_user):
    return make_user("outsider")


def auth(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(subject=user.email)}"}


@pytest.fixture
def project(client, owner, manager, member):
    """A project owned by `owner` with one manager and one plain member."""
    response = client.post(
        "/api/v1/projects",
        json={
            "name": "Launch",
            "description": "Ship it",
            "end_date": "2030-01-31",
            "members": [
                {"user_id": manager.id, "role": "Manager"},
                {"user_id": member.id},
            ],
        },
        headers=auth(owner),
    )
    assert response.status_code == 201, response.text
    return response.json()
