import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from auth import create_token, resolve_caller
from database import Base, get_db
from main import app
from services.user_service import UserService


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


def make_caller(db, sub, plan="free"):
    UserService.store(db, {"sub": sub, "email": f"{sub}@example.com", "name": sub})
    if plan != "free":
        UserService.update_plan(db, sub, plan)
    return resolve_caller(db, {"sub": sub})


@pytest.fixture
def caller(db):
    return make_caller(db, "user_free")


@pytest.fixture
def pro_caller(db):
    return make_caller(db, "user_pro", plan="pro")


@pytest.fixture
def other_caller(db):
    return make_caller(db, "user_other", plan="pro")


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(sub, **claims):
    return {"Authorization": f"Bearer {create_token({'sub': sub, **claims})}"}
