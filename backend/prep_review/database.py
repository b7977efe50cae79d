import sqlite3
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from prep_review.config import settings


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_path: Path | None = None):
    path = db_path or settings.db_path
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


SCHEMA_SQL = """\
-- ============================================================
-- DOCUMENT RECORDS
-- ============================================================
CREATE TABLE IF NOT EXISTS documents (
    id                TEXT PRIMARY KEY,
    title             TEXT NOT NULL,
    doc_type          TEXT NOT NULL,
    student_id        TEXT NOT NULL,
    student_name      TEXT NOT NULL,
    content           TEXT NOT NULL DEFAULT '',
    file_url          TEXT,
    edited_file_url   TEXT,
    target_program    TEXT,
    target_university TEXT,
    status            TEXT NOT NULL DEFAULT 'pending'
                      CHECK(status IN ('pending','completed')),
    feedback_comments TEXT,
    ai_score          INTEGER,
    ai_feedback       TEXT,
    created_at        TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ','now')),
    updated_at        TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_documents_student ON documents(student_id);
CREATE INDEX IF NOT EXISTS idx_documents_status ON documents(status);

-- ============================================================
-- AI SUGGESTIONS
-- ============================================================
CREATE TABLE IF NOT EXISTS suggestions (
    seq            INTEGER PRIMARY KEY AUTOINCREMENT,
    id             TEXT NOT NULL UNIQUE,
    document_id    TEXT NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    position       INTEGER,
    original_text  TEXT NOT NULL,
    suggested_text TEXT NOT NULL,
    resolved       INTEGER NOT NULL DEFAULT 0,
    accepted       INTEGER
);

CREATE INDEX IF NOT EXISTS idx_suggestions_document ON suggestions(document_id);

-- ============================================================
-- EDIT LOG (append-only)
-- ============================================================
CREATE TABLE IF NOT EXISTS edit_records (
    seq            INTEGER PRIMARY KEY AUTOINCREMENT,
    id             TEXT NOT NULL UNIQUE,
    document_id    TEXT NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    edit_type      TEXT NOT NULL CHECK(edit_type IN ('direct','suggestion','file')),
    text           TEXT,
    position       INTEGER,
    original_text  TEXT,
    suggestion_id  TEXT,
    file_name      TEXT,
    file_path      TEXT,
    file_size      INTEGER,
    media_type     TEXT,
    mentor_tags    TEXT,
    edit_summary   TEXT,
    mentor_name    TEXT NOT NULL,
    mentor_id      TEXT NOT NULL,
    timestamp      TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_edit_records_document ON edit_records(document_id);
CREATE INDEX IF NOT EXISTS idx_edit_records_type ON edit_records(edit_type);
"""


# Append ALTER TABLE statements here when the schema changes after release.
MIGRATIONS: list[str] = []


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    # Run migrations idempotently (ALTER TABLE fails silently if column exists)
    for migration in MIGRATIONS:
        try:
            conn.execute(migration)
            conn.commit()
        except sqlite3.OperationalError:
            pass  # column already exists
    conn.close()
