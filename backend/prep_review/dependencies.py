from fastapi import Depends
from sqlalchemy.orm import Session

from prep_review.database import get_db
from prep_review.services.document_store import DocumentStore


def get_store(db: Session = Depends(get_db)) -> DocumentStore:
    return DocumentStore(db)
