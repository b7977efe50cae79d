import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from prep_review.config import settings
from prep_review.database import get_db, init_db
from prep_review.main import app
from prep_review.services.ai_reviewer import ReviewResult, ReviewSuggestion, get_reviewer
from prep_review.services.document_store import DocumentStore


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class FakeReviewer:
    """Deterministic stand-in for the OpenAI-backed reviewer."""

    def __init__(self):
        self.calls: list[tuple[str, str]] = []

    async def review(self, text: str, document_type: str) -> ReviewResult:
        self.calls.append((text, document_type))
        suggestions = []
        position = text.find("very good")
        if position >= 0:
            suggestions.append(ReviewSuggestion(
                original_text="very good",
                suggested_text="outstanding",
                position=position,
            ))
        return ReviewResult(score=72, feedback=["Tighten the opening paragraph."], suggestions=suggestions)


@pytest.fixture
def tmp_data(tmp_path):
    data_path = tmp_path / "MagicPrep"
    (data_path / "uploads").mkdir(parents=True)
    return data_path


@pytest.fixture
def data_dir(tmp_data):
    original_data_path = settings.data_path
    settings.data_path = tmp_data
    yield tmp_data
    settings.data_path = original_data_path


@pytest.fixture
def test_db(tmp_data):
    db_path = tmp_data / "db.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    init_db(db_path)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def fake_reviewer(test_db):
    reviewer = FakeReviewer()
    app.dependency_overrides[get_reviewer] = lambda: reviewer
    return reviewer


@pytest.fixture
def store(test_db, data_dir):
    db = test_db()
    yield DocumentStore(db)
    db.close()


@pytest.fixture
def client(data_dir, test_db, fake_reviewer):
    return TestClient(app)
