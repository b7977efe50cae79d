import json

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from prep_review.dependencies import get_store
from prep_review.errors import DocumentLocked, DocumentNotFound, InvalidInput, SuggestionNotFound
from prep_review.models.document import DocumentRecord, EditRecord, Suggestion, EDIT_FILE
from prep_review.schemas.document import (
    DocumentCreate,
    DocumentResponse,
    DocumentSummary,
    EditedFileResponse,
    EditHistoryEntry,
    EditsRequest,
    EditsSavedResponse,
    FeedbackRequest,
    FeedbackResponse,
    FileDetails,
    MentorEditResponse,
    NotificationResponse,
    StudentSubmissionRequest,
    SuggestionResolveRequest,
    SuggestionResolvedResponse,
    SuggestionResponse,
)
from prep_review.services import review_service
from prep_review.services.ai_reviewer import AIReviewer, get_reviewer
from prep_review.services.document_store import DocumentStore
from prep_review.services.ingest_service import create_document, ingest
from prep_review.services.notification_service import project_notifications
from prep_review.services.upload_service import read_upload, validate_upload

router = APIRouter(prefix="/documents", tags=["documents"])

_REVIEW_ERRORS = (InvalidInput, DocumentNotFound, SuggestionNotFound, DocumentLocked)


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, InvalidInput):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, DocumentLocked):
        return HTTPException(status_code=409, detail=str(exc))
    return HTTPException(status_code=404, detail=str(exc))


def _suggestion_to_response(s: Suggestion) -> SuggestionResponse:
    return SuggestionResponse(
        id=s.id,
        position=s.position,
        original_text=s.original_text,
        suggested_text=s.suggested_text,
        resolved=bool(s.resolved),
        accepted=s.accepted,
    )


def _edit_to_response(e: EditRecord) -> MentorEditResponse:
    return MentorEditResponse(
        id=e.id,
        text=e.text,
        position=e.position,
        original_text=e.original_text,
        mentor_name=e.mentor_name,
        mentor_id=e.mentor_id,
        timestamp=e.timestamp,
        from_suggestion=e.from_suggestion,
        suggestion_id=e.suggestion_id,
    )


def _history_entry(e: EditRecord) -> EditHistoryEntry:
    entry = EditHistoryEntry(
        id=e.id,
        edit_type=e.edit_type,
        mentor_name=e.mentor_name,
        mentor_id=e.mentor_id,
        timestamp=e.timestamp,
    )
    if e.edit_type == EDIT_FILE:
        entry.file_details = FileDetails(
            filename=e.file_name,
            path=e.file_path,
            size=e.file_size,
            media_type=e.media_type,
        )
        entry.mentor_tags = e.mentor_tags or []
        entry.edit_summary = e.edit_summary
    else:
        entry.text = e.text
        entry.position = e.position
        entry.original_text = e.original_text
        entry.suggestion_id = e.suggestion_id
    return entry


def _doc_to_response(doc: DocumentRecord) -> DocumentResponse:
    return DocumentResponse(
        id=doc.id,
        title=doc.title,
        type=doc.doc_type,
        student_id=doc.student_id,
        student_name=doc.student_name,
        content=doc.content,
        file_url=doc.file_url,
        edited_file_url=doc.edited_file_url,
        target_program=doc.target_program,
        target_university=doc.target_university,
        status=doc.status,
        feedback_comments=doc.feedback_comments,
        ai_score=doc.ai_score,
        ai_feedback=doc.ai_feedback or [],
        suggestions=[_suggestion_to_response(s) for s in doc.suggestions],
        mentor_edits=[_edit_to_response(e) for e in doc.mentor_edits],
        edit_history=[_history_entry(e) for e in doc.edits],
        created_at=doc.created_at,
        updated_at=doc.updated_at,
    )


def _doc_to_summary(doc: DocumentRecord) -> DocumentSummary:
    return DocumentSummary(
        id=doc.id,
        title=doc.title,
        type=doc.doc_type,
        student_name=doc.student_name,
        status=doc.status,
        created_at=doc.created_at,
        updated_at=doc.updated_at,
    )


def _parse_tags(raw: str | None) -> list[str]:
    """Form fields carry tags either as a JSON array or comma separated."""
    if not raw:
        return []
    raw = raw.strip()
    if raw.startswith("["):
        try:
            values = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise HTTPException(status_code=400, detail="mentorTags is not valid JSON") from exc
        return [str(v).strip() for v in values if str(v).strip()]
    return [t.strip() for t in raw.split(",") if t.strip()]


@router.get("", response_model=list[DocumentSummary])
async def list_documents(store: DocumentStore = Depends(get_store)):
    return [_doc_to_summary(d) for d in store.list()]


@router.get("/student/{student_id}", response_model=list[DocumentResponse])
async def student_documents(student_id: str, store: DocumentStore = Depends(get_store)):
    if not student_id.strip():
        raise HTTPException(status_code=400, detail="Student ID is required")
    return [_doc_to_response(d) for d in store.filter(student_id=student_id)]


@router.get("/notifications/{student_id}", response_model=list[NotificationResponse])
async def student_notifications(student_id: str, store: DocumentStore = Depends(get_store)):
    try:
        notifications = project_notifications(store, student_id)
    except InvalidInput as exc:
        raise _http_error(exc) from exc
    return [NotificationResponse(**n) for n in notifications]


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(document_id: str, store: DocumentStore = Depends(get_store)):
    doc = store.get(document_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Document not found")
    return _doc_to_response(doc)


@router.post("", response_model=DocumentResponse, status_code=201)
async def create(req: DocumentCreate, store: DocumentStore = Depends(get_store)):
    try:
        doc = create_document(store, req)
    except InvalidInput as exc:
        raise _http_error(exc) from exc
    return _doc_to_response(doc)


@router.post("/student-submission", response_model=DocumentResponse, status_code=201)
async def student_submission(
    req: StudentSubmissionRequest,
    store: DocumentStore = Depends(get_store),
    reviewer: AIReviewer = Depends(get_reviewer),
):
    """Ingest a student's uploaded document for mentor review."""
    try:
        doc = await ingest(store, req, reviewer)
    except InvalidInput as exc:
        raise _http_error(exc) from exc
    return _doc_to_response(doc)


@router.post("/edited-document", response_model=EditedFileResponse)
async def upload_edited_document(
    edited_file: UploadFile | None = File(None, alias="editedFile"),
    document_id: str | None = Form(None, alias="documentId"),
    mentor_name: str | None = Form(None, alias="mentorName"),
    mentor_id: str | None = Form(None, alias="mentorId"),
    mentor_tags: str | None = Form(None, alias="mentorTags"),
    edit_summary: str | None = Form(None, alias="editSummary"),
    store: DocumentStore = Depends(get_store),
):
    """Replace the reviewed document with a mentor-revised file."""
    if edited_file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")
    tags = _parse_tags(mentor_tags)
    try:
        validate_upload(edited_file.filename, edited_file.content_type)
        content = await read_upload(edited_file)
        doc, edit = review_service.replace_with_edited_file(
            store,
            document_id,
            filename=edited_file.filename,
            content=content,
            media_type=edited_file.content_type,
            mentor_name=mentor_name,
            mentor_id=mentor_id,
            mentor_tags=tags,
            edit_summary=edit_summary,
        )
    except _REVIEW_ERRORS as exc:
        raise _http_error(exc) from exc

    return EditedFileResponse(
        document_id=doc.id,
        edited_file_url=doc.edited_file_url,
        edit=_history_entry(edit),
    )


@router.post("/{document_id}/edits", response_model=EditsSavedResponse)
async def save_edits(document_id: str, req: EditsRequest, store: DocumentStore = Depends(get_store)):
    try:
        edits = review_service.apply_inline_edits(
            store, document_id, req.edits,
            mentor_name=req.mentor_name,
            mentor_id=req.mentor_id,
        )
    except _REVIEW_ERRORS as exc:
        raise _http_error(exc) from exc
    return EditsSavedResponse(document_id=document_id, edits=[_edit_to_response(e) for e in edits])


@router.post("/{document_id}/suggestions", response_model=SuggestionResolvedResponse)
async def respond_to_suggestion(
    document_id: str,
    req: SuggestionResolveRequest,
    store: DocumentStore = Depends(get_store),
):
    try:
        suggestion = review_service.resolve_suggestion(
            store, document_id, req.suggestion_id, req.accepted,
            mentor_name=req.mentor_name,
            mentor_id=req.mentor_id,
        )
    except _REVIEW_ERRORS as exc:
        raise _http_error(exc) from exc
    return SuggestionResolvedResponse(
        document_id=document_id,
        suggestion_id=suggestion.id,
        suggestion=_suggestion_to_response(suggestion),
    )


@router.post("/{document_id}/feedback", response_model=FeedbackResponse)
async def submit_feedback(
    document_id: str,
    req: FeedbackRequest | None = None,
    store: DocumentStore = Depends(get_store),
):
    req = req or FeedbackRequest()
    try:
        doc = review_service.submit_feedback(
            store, document_id,
            mentor_name=req.mentor_name,
            mentor_id=req.mentor_id,
            feedback_comments=req.feedback_comments,
        )
    except _REVIEW_ERRORS as exc:
        raise _http_error(exc) from exc
    return FeedbackResponse(
        document_id=doc.id,
        status=doc.status,
        has_edited_file=doc.edited_file_url is not None,
        edited_file_url=doc.edited_file_url,
    )
