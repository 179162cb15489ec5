import os

# База и секрет - до импорта src.*: settings читаются один раз при импорте
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SESSION_SECRET", "test-secret")

import logging  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from src.db import Base, SessionLocal, engine  # noqa: E402
from src.main import app  # noqa: E402
from src.scripts.seed_demo import seed  # noqa: E402
from src.services.notifications import RecordingNotifier, get_notifier  # noqa: E402
from src.utils.session_dep import get_session_user_id  # noqa: E402


@pytest.fixture(autouse=True)
def database():
    """Свежая схема + демо-данные на каждый тест, после теста всё сносим."""
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        seed(session)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def quiet_sqlalchemy_logger():
    logger = logging.getLogger("sqlalchemy.engine")
    old = logger.level
    logger.setLevel(logging.WARNING)
    try:
        yield
    finally:
        logger.setLevel(old)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifier():
    rec = RecordingNotifier()
    app.dependency_overrides[get_notifier] = lambda: rec
    yield rec
    app.dependency_overrides.pop(get_notifier, None)


@pytest.fixture
def client(notifier):
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def as_user():
    """
    Подменяет слой аутентификации: запросы идут от имени user_id,
    как будто сессия уже содержит UserId.
    """
    def _as(user_id: int) -> None:
        app.dependency_overrides[get_session_user_id] = lambda: user_id
    return _as
