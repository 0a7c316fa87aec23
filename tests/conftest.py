import pytest
import os
import tempfile
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set env before importing app components
_DB_DIR = tempfile.mkdtemp(prefix="dashboard-tests-")
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'app.db')}"

from app.database import Base, get_session_factory
from app.main import app
from fastapi.testclient import TestClient


@pytest.fixture(scope="function")
def engine(tmp_path):
    """
    File-backed SQLite per test. The fetch stage reads on several threads at
    once, each with its own connection, which an in-memory database can't share.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'dashboard.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="function")
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()

@pytest.fixture(scope="function")
def make_profile(db_session):
    """Factory for profiles; defaults to an employee."""
    from app.models.profile import Profile, ProfileRole

    def _make_profile(email, role=ProfileRole.EMPLOYEE, full_name=None, **fields):
        profile = Profile(
            email=email,
            role=role,
            full_name=full_name or email.split("@")[0].title(),
            is_active=True,
            **fields
        )
        db_session.add(profile)
        db_session.commit()
        db_session.refresh(profile)
        return profile
    return _make_profile

@pytest.fixture(scope="function")
def admin_profile(make_profile):
    from app.models.profile import ProfileRole
    return make_profile("admin@alphacorp.com", role=ProfileRole.ADMIN, full_name="System Admin", job_title="HR Director")

@pytest.fixture(scope="function")
def employee_profile(make_profile):
    return make_profile("dana@alphacorp.com", full_name="Dana Lee", job_title="Engineer", avatar_url="https://cdn.example.com/dana.png")

@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens for a profile."""
    from app.services.auth import create_access_token

    def _get_token(profile, **claims):
        return create_access_token(data={
            "sub": profile.email,
            "role": profile.role.value,
            "type": "access",
            **claims
        })
    return _get_token

@pytest.fixture(scope="function")
def client(session_factory):
    """Get a TestClient whose dashboard pipelines read from the test database."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
