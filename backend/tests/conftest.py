"""
Shared pytest fixtures.

Settings are read once and cached, so the environment is pinned here before
anything from handshakeiq is imported.
"""
import os

os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["API_AUTH_KEY"] = "test-key"
os.environ["GOOGLE_SEARCH_API_KEY"] = "test"
os.environ["GOOGLE_SEARCH_ENGINE_ID"] = "test"
os.environ["SEARCH_ENRICHMENT_ENABLED"] = "false"
for _key in ("REDIS_URL", "OPENAI_API_KEY", "OPENROUTER_API_KEY"):
    os.environ.pop(_key, None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from handshakeiq.core.db import Base, get_db
from handshakeiq.schemas.dossier import UserContext, UserUpsert
from handshakeiq.services.storage import DossierStorage

API_KEY = "test-key"
USER_ID = "user-1"
OTHER_USER_ID = "user-2"


@pytest.fixture
def db_session():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def storage(db_session):
    return DossierStorage(db_session)


@pytest.fixture
def user(storage):
    return storage.upsert_user(
        UserUpsert(
            id=USER_ID,
            email="sam@acme.com",
            first_name="Sam",
            last_name="Lee",
            google_access_token="google-token",
        )
    )


@pytest.fixture
def other_user(storage):
    return storage.upsert_user(UserUpsert(id=OTHER_USER_ID, email="kim@globex.com"))


@pytest.fixture
def ctx(user):
    return UserContext(user_id=user.id)


@pytest.fixture
def other_ctx(other_user):
    return UserContext(user_id=other_user.id)


@pytest.fixture
def app(db_session):
    from handshakeiq.main import app as fastapi_app

    def _override_get_db():
        yield db_session

    fastapi_app.dependency_overrides[get_db] = _override_get_db
    try:
        yield fastapi_app
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest.fixture
def api_client(app, user):
    """Authenticated client for `user`."""
    with TestClient(app, headers={"X-API-Key": API_KEY, "X-User-Id": USER_ID}) as client:
        yield client
