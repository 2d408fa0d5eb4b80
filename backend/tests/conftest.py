"""Shared fixtures: an in-memory database per test and an API client bound to it."""

from typing import Callable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps_auth import get_db
from app.core.database import Base
from app.core.security import create_access_token
from app.main import app
from app.services import users as users_service

PASSWORD = "correct-horse-battery"


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory) -> TestClient:
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db) -> Callable[..., dict]:
    def _make(name: str = "Jane Doe", email: str = "jane@example.com", role: str = "user") -> dict:
        return users_service.create_user(db, name=name, email=email, password=PASSWORD, role=role)

    return _make


def token_for(user: dict) -> str:
    return create_access_token({"sub": str(user["id"]), "role": user["role"]})


@pytest.fixture()
def auth_headers() -> Callable[[dict], dict]:
    def _headers(user: dict) -> dict[str, str]:
        return {"Authorization": f"Bearer {token_for(user)}"}

    return _headers


@pytest.fixture()
def auth_token() -> Callable[[dict], str]:
    return token_for


@pytest.fixture()
def password() -> str:
    return PASSWORD
