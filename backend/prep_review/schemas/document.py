from typing import Any

from prep_review.schemas.common import CamelModel


# ---- requests ----

class StudentSubmissionRequest(CamelModel):
    # Required fields are validated by the ingestor so that blanks also get a 400.
    document_id: str | None = None
    document_name: str | None = None
    document_type: str | None = None
    student_id: str | None = None
    student_name: str | None = None
    file_url: str | None = None
    target_program: str | None = None
    target_university: str | None = None


class DocumentCreate(CamelModel):
    title: str | None = None
    content: str | None = None
    type: str | None = None
    student_name: str | None = None
    student_id: str | None = None


class InlineEditIn(CamelModel):
    text: str
    position: int | None = None
    original_text: str | None = None


class EditsRequest(CamelModel):
    edits: Any = None
    mentor_name: str | None = None
    mentor_id: str | None = None
    mentor_tags: list[str] | None = None


class SuggestionResolveRequest(CamelModel):
    suggestion_id: Any = None
    accepted: Any = None
    mentor_name: str | None = None
    mentor_id: str | None = None


class FeedbackRequest(CamelModel):
    mentor_name: str | None = None
    mentor_id: str | None = None
    feedback_comments: str | None = None


# ---- responses ----

class SuggestionResponse(CamelModel):
    id: str
    position: int | None
    original_text: str
    suggested_text: str
    resolved: bool
    accepted: bool | None


class MentorEditResponse(CamelModel):
    id: str
    text: str | None
    position: int | None
    original_text: str | None
    mentor_name: str
    mentor_id: str
    timestamp: str
    from_suggestion: bool = False
    suggestion_id: str | None = None


class FileDetails(CamelModel):
    filename: str | None
    path: str | None
    size: int | None
    media_type: str | None


class EditHistoryEntry(CamelModel):
    id: str
    edit_type: str
    mentor_name: str
    mentor_id: str
    timestamp: str
    text: str | None = None
    position: int | None = None
    original_text: str | None = None
    suggestion_id: str | None = None
    file_details: FileDetails | None = None
    mentor_tags: list[str] = []
    edit_summary: str | None = None


class DocumentResponse(CamelModel):
    id: str
    title: str
    type: str
    student_id: str
    student_name: str
    content: str
    file_url: str | None
    edited_file_url: str | None
    target_program: str | None
    target_university: str | None
    status: str
    feedback_comments: str | None
    ai_score: int | None
    ai_feedback: list[str]
    suggestions: list[SuggestionResponse]
    mentor_edits: list[MentorEditResponse]
    edit_history: list[EditHistoryEntry]
    created_at: str
    updated_at: str


class DocumentSummary(CamelModel):
    id: str
    title: str
    type: str
    student_name: str
    status: str
    created_at: str
    updated_at: str


class EditsSavedResponse(CamelModel):
    document_id: str
    edits: list[MentorEditResponse]


class SuggestionResolvedResponse(CamelModel):
    document_id: str
    suggestion_id: str
    suggestion: SuggestionResponse


class EditedFileResponse(CamelModel):
    document_id: str
    edited_file_url: str
    edit: EditHistoryEntry


class FeedbackResponse(CamelModel):
    document_id: str
    status: str
    has_edited_file: bool
    edited_file_url: str | None


class NotificationResponse(CamelModel):
    id: str
    document_id: str
    document_name: str
    mentor_name: str
    date: str
    edits_accepted: int
    comments_added: int
    file_edited: bool
    has_edited_file: bool
    is_read: bool = False
    file_url: str | None
    edited_file_url: str | None
    feedback_comments: str | None
