import logging
import mimetypes
import uuid

from prep_review.errors import InvalidInput
from prep_review.models.document import STATUS_PENDING, DocumentRecord, Suggestion
from prep_review.schemas.document import DocumentCreate, StudentSubmissionRequest
from prep_review.services.ai_reviewer import AIReviewer, ReviewResult
from prep_review.services.document_store import DocumentStore
from prep_review.services.text_extractor import extract_text_async
from prep_review.services.upload_service import resolve_upload
from prep_review.utils.timestamps import utc_timestamp

logger = logging.getLogger(__name__)

DISPLAY_TYPES = {
    "cv": "CV/Resume",
    "sop": "Statement of Purpose",
    "phs": "Personal History Statement",
}

REQUIRED_SUBMISSION_FIELDS = (
    "document_id",
    "document_name",
    "document_type",
    "student_id",
    "student_name",
    "file_url",
)


def display_type(document_type: str) -> str:
    return DISPLAY_TYPES.get(document_type.strip().lower(), document_type)


def content_placeholder(doc_type: str, document_name: str, student_name: str) -> str:
    return f"This is the {doc_type} '{document_name}' submitted by {student_name}."


def _suggestions_from(review: ReviewResult) -> list[Suggestion]:
    return [
        Suggestion(
            id=f"suggestion-{uuid.uuid4().hex[:12]}",
            position=s.position,
            original_text=s.original_text,
            suggested_text=s.suggested_text,
            resolved=False,
        )
        for s in review.suggestions
    ]


async def ingest(store: DocumentStore, submission: StudentSubmissionRequest, reviewer: AIReviewer) -> DocumentRecord:
    """Turn a student's uploaded file into a pending DocumentRecord.

    The record is fully built (extraction and AI analysis included) before
    anything is written, then upserted in a single commit. Re-submitting an
    existing documentId replaces that record.
    """
    missing = [
        name for name in REQUIRED_SUBMISSION_FIELDS
        if not (getattr(submission, name) or "").strip()
    ]
    if missing:
        raise InvalidInput("Missing required fields for document submission")

    doc_type = display_type(submission.document_type)

    content = ""
    file_path = resolve_upload(submission.file_url)
    if file_path is None:
        logger.warning(
            "File for document %s not found (%s), continuing without extraction",
            submission.document_id, submission.file_url,
        )
    else:
        media_type, _ = mimetypes.guess_type(file_path.name)
        content = await extract_text_async(file_path, media_type)

    review = await reviewer.review(content, doc_type)

    if not content.strip():
        content = content_placeholder(doc_type, submission.document_name, submission.student_name)

    now = utc_timestamp()
    record = DocumentRecord(
        id=submission.document_id,
        title=submission.document_name,
        doc_type=doc_type,
        student_id=submission.student_id,
        student_name=submission.student_name,
        content=content,
        file_url=submission.file_url,
        edited_file_url=None,
        target_program=submission.target_program,
        target_university=submission.target_university,
        status=STATUS_PENDING,
        ai_score=review.score,
        ai_feedback=review.feedback,
        created_at=now,
        updated_at=now,
    )
    record.suggestions = _suggestions_from(review)

    with store.locked(record.id):
        store.upsert(record)

    logger.info(
        "Document '%s' added for review by mentor. Total documents: %d",
        record.title, store.count(),
    )
    return record


def create_document(store: DocumentStore, req: DocumentCreate) -> DocumentRecord:
    if not req.title or not req.content:
        raise InvalidInput("Title and content are required")

    now = utc_timestamp()
    record = DocumentRecord(
        id=str(uuid.uuid4()),
        title=req.title,
        doc_type=req.type or "Document",
        student_id=req.student_id or "unknown",
        student_name=req.student_name or "Anonymous Student",
        content=req.content,
        status=STATUS_PENDING,
        ai_feedback=[],
        created_at=now,
        updated_at=now,
    )
    with store.locked(record.id):
        store.upsert(record)
    return record
