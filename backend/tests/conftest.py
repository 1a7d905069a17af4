"""Test configuration and fixtures."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.database import Base, configure_sqlite, get_db
from app.main import app as fastapi_app
from app.schemas.common import Principal, UserRole
from app.services.consistency_coordinator import ConsistencyCoordinator
from app.services.unit_of_work import UnitOfWork


@pytest.fixture
def engine():
    """In-memory SQLite shared by every thread, with foreign keys enforced."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine, wal=False)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(bind=engine, autoflush=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def uow(db_session):
    return UnitOfWork(db_session)


@pytest.fixture
def coordinator(uow):
    return ConsistencyCoordinator(uow)


@pytest.fixture
def instructor():
    return Principal(id=1, role=UserRole.INSTRUCTOR)


@pytest.fixture
def other_instructor():
    return Principal(id=2, role=UserRole.INSTRUCTOR)


@pytest.fixture
def customer():
    return Principal(id=1, role=UserRole.CUSTOMER)


@pytest.fixture
def feedback_fields():
    return {
        "type": "group",
        "date": "2024.04.22",
        "link": "https://example.com/video",
        "content": "Good posture today, work on the final sprint.",
    }


@pytest.fixture
def sample_targets():
    return [
        {"lecture_id": 1, "student_ids": [2, 3]},
        {"lecture_id": 2, "student_ids": [4, 5, 13]},
    ]


@pytest.fixture
def client(engine):
    """API client whose requests share the in-memory test database."""
    Session = sessionmaker(bind=engine, autoflush=False)

    def _override_get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    fastapi_app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(fastapi_app)
    finally:
        fastapi_app.dependency_overrides.clear()
