import threading
import weakref
from contextlib import contextmanager

from sqlalchemy.orm import Session

from prep_review.errors import DocumentNotFound
from prep_review.models.document import DocumentRecord

# Entries vanish once no caller holds the lock
_record_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
_record_locks_guard = threading.Lock()


def _lock_for(document_id: str) -> threading.Lock:
    with _record_locks_guard:
        return _record_locks.setdefault(document_id, threading.Lock())


class DocumentStore:
    """Sole owner of DocumentRecord persistence, one instance per request session."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def locked(self, document_id: str):
        """Serialize read-modify-write cycles on a single record."""
        lock = _lock_for(document_id)
        with lock:
            yield

    def get(self, document_id: str) -> DocumentRecord | None:
        return self.db.query(DocumentRecord).filter(DocumentRecord.id == document_id).first()

    def require(self, document_id: str) -> DocumentRecord:
        record = self.get(document_id)
        if record is None:
            raise DocumentNotFound(document_id)
        return record

    def upsert(self, record: DocumentRecord) -> DocumentRecord:
        """Insert, or fully replace an existing record with the same id."""
        existing = self.get(record.id)
        if existing is not None:
            self.db.delete(existing)
            self.db.flush()
        self.db.add(record)
        self.commit(record)
        return record

    def commit(self, record: DocumentRecord) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(record)

    def count(self) -> int:
        return self.db.query(DocumentRecord).count()

    def filter(self, student_id: str | None = None, status: str | None = None) -> list[DocumentRecord]:
        query = self.db.query(DocumentRecord)
        if student_id is not None:
            query = query.filter(DocumentRecord.student_id == student_id)
        if status is not None:
            query = query.filter(DocumentRecord.status == status)
        return query.order_by(DocumentRecord.created_at.asc()).all()

    # Defined last: the method name shadows the builtin in the class body
    def list(self) -> list[DocumentRecord]:
        return self.filter()
