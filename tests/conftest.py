import os

TEST_DB_FILE = "test_classroom_progress.db"
TEST_DB_URL = f"sqlite:///./{TEST_DB_FILE}"
os.environ.setdefault("DATABASE_URL", TEST_DB_URL)

import pytest  # noqa: E402
from fastapi import Depends  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.core.current_user import get_session  # noqa: E402
from app.core.deps import get_classroom_client, get_db  # noqa: E402
from app.core.session import SessionContext  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.main import app  # noqa: E402
from app.models.teacher_assignment import TeacherAssignment  # noqa: E402
from app.services.classroom_client import ClassroomClient  # noqa: E402
from tests.fake_classroom import school  # noqa: E402

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest.fixture(autouse=True)
def clean_relations():
    """Every test starts with no teacher/student relations."""
    db = TestingSessionLocal()
    try:
        db.query(TeacherAssignment).delete()
        db.commit()
        yield
    finally:
        db.close()


@pytest.fixture()
def fake():
    return school()


@pytest.fixture()
def client(fake):
    """Test client backed by the test DB and the fake Classroom."""

    async def override_classroom_client(session: SessionContext = Depends(get_session)):
        async with ClassroomClient(
            session.require(),
            transport=fake.transport(),
            retry_base_seconds=0,
        ) as c:
            yield c

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_classroom_client] = override_classroom_client
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth_header(token: str, role: str) -> dict:
    return {"Authorization": f"Bearer {token}", "X-User-Role": role}


def relate(db_session_factory=TestingSessionLocal, **fields) -> None:
    db = db_session_factory()
    try:
        db.add(TeacherAssignment(**fields))
        db.commit()
    finally:
        db.close()
