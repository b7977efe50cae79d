from prep_review.errors import InvalidInput
from prep_review.models.document import EDIT_FILE, STATUS_COMPLETED
from prep_review.services.document_store import DocumentStore

DEFAULT_NOTIFICATION_MENTOR = "Your Mentor"


def project_notifications(store: DocumentStore, student_id: str) -> list[dict]:
    """Read-only feedback notifications for a student's completed reviews."""
    if not student_id or not student_id.strip():
        raise InvalidInput("Student ID is required")

    notifications = []
    for doc in store.filter(student_id=student_id, status=STATUS_COMPLETED):
        mentor_edits = doc.mentor_edits
        last_edit = mentor_edits[-1] if mentor_edits else None
        accepted = sum(1 for e in mentor_edits if e.from_suggestion)

        notifications.append({
            "id": f"notification-{doc.id}",
            "document_id": doc.id,
            "document_name": doc.title,
            "mentor_name": last_edit.mentor_name if last_edit else DEFAULT_NOTIFICATION_MENTOR,
            "date": doc.updated_at,
            "edits_accepted": accepted,
            "comments_added": len(mentor_edits) - accepted,
            "file_edited": any(e.edit_type == EDIT_FILE for e in doc.edits),
            "has_edited_file": doc.edited_file_url is not None,
            "is_read": False,
            "file_url": doc.file_url,
            "edited_file_url": doc.edited_file_url,
            "feedback_comments": doc.feedback_comments,
        })
    return notifications
