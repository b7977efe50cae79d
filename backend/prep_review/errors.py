class InvalidInput(ValueError):
    """Missing or malformed request data. Nothing is written."""


class DocumentNotFound(LookupError):
    def __init__(self, document_id: str):
        super().__init__("Document not found")
        self.document_id = document_id


class SuggestionNotFound(LookupError):
    def __init__(self, suggestion_id: str):
        super().__init__("Suggestion not found")
        self.suggestion_id = suggestion_id


class DocumentLocked(RuntimeError):
    """Raised when a completed review is modified."""

    def __init__(self, document_id: str):
        super().__init__("Document review is already completed")
        self.document_id = document_id
