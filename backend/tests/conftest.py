import os

# Settings are read at import time, so the test environment has to be in
# place before anything from app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["EMAIL_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

import app.models  # noqa: F401,E402
from app.core.database import Base, SessionLocal, engine, get_db  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.main import app as fastapi_app  # noqa: E402
from app.models.user import UserRole  # noqa: E402
from app.repositories.compatibility_repository import compatibility_repository  # noqa: E402
from app.repositories.metal_repository import metal_repository  # noqa: E402
from app.schemas.user import UserRegister  # noqa: E402
from app.services.user_service import user_service  # noqa: E402

DEFAULT_PASSWORD = "Secret123"


@pytest.fixture
def db():
    """Fresh schema and seeded version row for every test"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    compatibility_repository.ensure_version_row(session)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """TestClient whose requests share the test's database session"""
    def override_get_db():
        yield db

    fastapi_app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(fastapi_app)
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(role=UserRole.USER, email=None, password=DEFAULT_PASSWORD, is_active=True):
        counter["n"] += 1
        data = UserRegister(
            email=email or f"user{counter['n']}@example.com",
            password=password,
            first_name="Test",
            last_name="User",
        )
        user = user_service.create(db, data, role=role)
        if not is_active:
            user = user_service.deactivate_user(db, user.id)
        return user

    return _make_user


@pytest.fixture
def admin_user(make_user):
    return make_user(role=UserRole.ADMIN, email="admin@example.com")


@pytest.fixture
def moderator_user(make_user):
    return make_user(role=UserRole.MODERATOR, email="moderator@example.com")


@pytest.fixture
def regular_user(make_user):
    return make_user(role=UserRole.USER, email="regular@example.com")


def auth_headers_for(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def auth_headers():
    return auth_headers_for


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers_for(admin_user)


@pytest.fixture
def moderator_headers(moderator_user):
    return auth_headers_for(moderator_user)


@pytest.fixture
def user_headers(regular_user):
    return auth_headers_for(regular_user)


@pytest.fixture
def make_metal(db):
    def _make_metal(name):
        return metal_repository.create(db, name)

    return _make_metal
