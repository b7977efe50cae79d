"""
Mentor operations on a DocumentRecord.

Every inline edit, accepted suggestion and replacement file is appended
to the record's single edit log; nothing in the log is ever rewritten.
The record's text content is left untouched: the log is the diff trail
and clients render the current text from it.
"""
import logging
import uuid

from pydantic import ValidationError

from prep_review.config import settings
from prep_review.errors import DocumentLocked, InvalidInput, SuggestionNotFound
from prep_review.models.document import (
    EDIT_DIRECT,
    EDIT_FILE,
    EDIT_SUGGESTION,
    STATUS_COMPLETED,
    DocumentRecord,
    EditRecord,
    Suggestion,
)
from prep_review.schemas.document import InlineEditIn
from prep_review.services.document_store import DocumentStore
from prep_review.services.upload_service import store_upload
from prep_review.utils.timestamps import utc_timestamp

logger = logging.getLogger(__name__)

DEFAULT_MENTOR_NAME = "Anonymous Mentor"
DEFAULT_MENTOR_ID = "unknown"


def _new_edit_id() -> str:
    return f"edit-{uuid.uuid4().hex}"


def _ensure_editable(record: DocumentRecord) -> None:
    if settings.lock_completed_documents and record.is_completed:
        raise DocumentLocked(record.id)


def apply_inline_edits(
    store: DocumentStore,
    document_id: str,
    edits,
    mentor_name: str | None = None,
    mentor_id: str | None = None,
) -> list[EditRecord]:
    """Stamp and append inline edits in the order given. An empty list only refreshes updated_at."""
    if not isinstance(edits, list):
        raise InvalidInput("Edits array is required")
    try:
        parsed = [InlineEditIn.model_validate(edit) for edit in edits]
    except ValidationError as exc:
        raise InvalidInput("Each edit needs a text value and an integer position") from exc

    with store.locked(document_id):
        record = store.require(document_id)
        _ensure_editable(record)

        now = utc_timestamp()
        stamped = [
            EditRecord(
                id=_new_edit_id(),
                edit_type=EDIT_DIRECT,
                text=edit.text,
                position=edit.position,
                original_text=edit.original_text or "",
                mentor_name=mentor_name or DEFAULT_MENTOR_NAME,
                mentor_id=mentor_id or DEFAULT_MENTOR_ID,
                timestamp=now,
            )
            for edit in parsed
        ]
        record.edits.extend(stamped)
        record.updated_at = now
        store.commit(record)

    logger.info("Saved %d edits on document %s", len(stamped), document_id)
    return stamped


def resolve_suggestion(
    store: DocumentStore,
    document_id: str,
    suggestion_id,
    accepted,
    mentor_name: str | None = None,
    mentor_id: str | None = None,
) -> Suggestion:
    """Accept or reject an AI suggestion.

    Accepting appends a suggestion edit to the log. Resolving again is
    allowed and each acceptance appends another edit, so callers must not
    retry blindly.
    """
    if not isinstance(suggestion_id, str) or not suggestion_id.strip() or not isinstance(accepted, bool):
        raise InvalidInput("Suggestion ID and accepted status are required")

    with store.locked(document_id):
        record = store.require(document_id)
        _ensure_editable(record)

        suggestion = next((s for s in record.suggestions if s.id == suggestion_id), None)
        if suggestion is None:
            raise SuggestionNotFound(suggestion_id)

        now = utc_timestamp()
        suggestion.resolved = True
        suggestion.accepted = accepted
        if accepted:
            record.edits.append(EditRecord(
                id=_new_edit_id(),
                edit_type=EDIT_SUGGESTION,
                text=suggestion.suggested_text,
                position=suggestion.position,
                original_text=suggestion.original_text,
                suggestion_id=suggestion.id,
                mentor_name=mentor_name or DEFAULT_MENTOR_NAME,
                mentor_id=mentor_id or DEFAULT_MENTOR_ID,
                timestamp=now,
            ))
        record.updated_at = now
        store.commit(record)

    logger.info(
        "Suggestion %s on document %s %s",
        suggestion_id, document_id, "accepted" if accepted else "rejected",
    )
    return suggestion


def replace_with_edited_file(
    store: DocumentStore,
    document_id: str | None,
    filename: str,
    content: bytes,
    media_type: str | None,
    mentor_name: str | None = None,
    mentor_id: str | None = None,
    mentor_tags: list[str] | None = None,
    edit_summary: str | None = None,
) -> tuple[DocumentRecord, EditRecord]:
    """Store a mentor's fully revised file and log it as a file edit."""
    if not document_id or not mentor_id:
        raise InvalidInput("Document ID and mentor ID are required")

    with store.locked(document_id):
        record = store.require(document_id)
        _ensure_editable(record)

        upload = store_upload(filename, content, media_type)
        now = utc_timestamp()
        edit = EditRecord(
            id=_new_edit_id(),
            edit_type=EDIT_FILE,
            file_name=upload.original_name,
            file_path=upload.path,
            file_size=upload.size,
            media_type=upload.media_type,
            mentor_tags=mentor_tags or [],
            edit_summary=edit_summary or "",
            mentor_name=mentor_name or DEFAULT_MENTOR_NAME,
            mentor_id=mentor_id,
            timestamp=now,
        )
        record.edits.append(edit)
        record.edited_file_url = upload.file_url
        record.updated_at = now
        store.commit(record)

    logger.info("Edited file %s uploaded for document %s by %s", upload.filename, document_id, mentor_id)
    return record, edit


def submit_feedback(
    store: DocumentStore,
    document_id: str,
    mentor_name: str | None = None,
    mentor_id: str | None = None,
    feedback_comments: str | None = None,
) -> DocumentRecord:
    """Complete the review. There is no transition back to pending."""
    with store.locked(document_id):
        record = store.require(document_id)
        record.status = STATUS_COMPLETED
        record.feedback_comments = feedback_comments or ""
        record.updated_at = utc_timestamp()
        store.commit(record)

    logger.info(
        "Feedback submitted for document %s by %s (edited file: %s)",
        document_id, mentor_name or DEFAULT_MENTOR_NAME, record.edited_file_url or "none",
    )
    return record
