from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from prep_review.database import Base

# Edit log discriminators. "direct" and "suggestion" make up the mentor edits view.
EDIT_DIRECT = "direct"
EDIT_SUGGESTION = "suggestion"
EDIT_FILE = "file"
INLINE_EDIT_TYPES = (EDIT_DIRECT, EDIT_SUGGESTION)

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"


class DocumentRecord(Base):
    __tablename__ = "documents"

    id = Column(Text, primary_key=True)
    title = Column(Text, nullable=False)
    doc_type = Column(Text, nullable=False)
    student_id = Column(Text, nullable=False)
    student_name = Column(Text, nullable=False)
    content = Column(Text, nullable=False, default="")
    file_url = Column(Text)
    edited_file_url = Column(Text)
    target_program = Column(Text)
    target_university = Column(Text)
    status = Column(Text, nullable=False, default=STATUS_PENDING)
    feedback_comments = Column(Text)
    ai_score = Column(Integer)
    ai_feedback = Column(JSON)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    suggestions = relationship(
        "Suggestion",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="Suggestion.seq",
    )
    edits = relationship(
        "EditRecord",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="EditRecord.seq",
    )

    @property
    def mentor_edits(self) -> list["EditRecord"]:
        return [e for e in self.edits if e.edit_type in INLINE_EDIT_TYPES]

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED


class Suggestion(Base):
    __tablename__ = "suggestions"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(Text, nullable=False, unique=True)
    document_id = Column(Text, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer)
    original_text = Column(Text, nullable=False)
    suggested_text = Column(Text, nullable=False)
    resolved = Column(Boolean, nullable=False, default=False)
    accepted = Column(Boolean)

    document = relationship("DocumentRecord", back_populates="suggestions")


class EditRecord(Base):
    __tablename__ = "edit_records"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(Text, nullable=False, unique=True)
    document_id = Column(Text, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    edit_type = Column(Text, nullable=False)
    # inline edits
    text = Column(Text)
    position = Column(Integer)
    original_text = Column(Text)
    suggestion_id = Column(Text)
    # file replacements
    file_name = Column(Text)
    file_path = Column(Text)
    file_size = Column(Integer)
    media_type = Column(Text)
    mentor_tags = Column(JSON)
    edit_summary = Column(Text)

    mentor_name = Column(Text, nullable=False)
    mentor_id = Column(Text, nullable=False)
    timestamp = Column(Text, nullable=False)

    document = relationship("DocumentRecord", back_populates="edits")

    @property
    def from_suggestion(self) -> bool:
        return self.edit_type == EDIT_SUGGESTION
