from prep_review.models.document import DocumentRecord, EditRecord, Suggestion

__all__ = ["DocumentRecord", "EditRecord", "Suggestion"]
