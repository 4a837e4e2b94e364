"""
Pytest configuration and fixtures for the lab inventory API
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

import models  # noqa: F401
from database import Base, SessionLocal, engine, get_db
from main import app
from models.inventory import Item
from models.project import Project
from models.user import Department, User, UserRole
from security import create_access_token, hash_password


@pytest.fixture
def db():
    """Fresh in-memory schema per test"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """Test client whose requests share the test session"""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, username, role=UserRole.MEMBER, password="secret123", department=Department.SOFTWARE):
    user = User(
        username=username,
        password_hash=hash_password(password),
        role=role,
        full_name=username.title(),
        email=f"{username}@example.com",
        department=department,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_item(db, name="Oscilloscope", quantity=20, available=None, category="Electronics"):
    item = Item(
        name=name,
        category=category,
        quantity=quantity,
        available_quantity=quantity if available is None else available,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def admin(db):
    return make_user(db, "admin", role=UserRole.ADMIN)


@pytest.fixture
def member(db):
    return make_user(db, "alice")


@pytest.fixture
def other_member(db):
    return make_user(db, "bob", department=Department.MECHANICAL)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def member_headers(member):
    return auth_headers(member)


@pytest.fixture
def item(db):
    return make_item(db)


@pytest.fixture
def project(db, admin):
    project = Project(name="Line Follower", lead_id=admin.id)
    db.add(project)
    db.commit()
    db.refresh(project)
    return project
