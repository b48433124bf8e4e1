import enum
import uuid

from sqlalchemy import Column, Integer, Float, String, Text, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.database import Base


class DocumentType(str, enum.Enum):
    PDF = "pdf"
    TEXT = "text"
    IMAGE = "image"


class Document(Base):
    """An uploaded document whose text has already been extracted."""

    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    # Store as string for cross-DB compatibility (SQLite/PostgreSQL)
    type = Column(String(10), nullable=False, default=DocumentType.TEXT.value)
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False, default=0)
    word_count = Column(Integer, nullable=False, default=0)
    estimated_read_time = Column(Integer, nullable=False, default=0)  # minutes

    progress = Column(Float, nullable=False, default=0)  # percent, 0-100

    chapters = Column(JSON, nullable=False, default=list)  # [{"id", "title", "startIndex"}]
    doc_metadata = Column("metadata", JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="documents")
    reading_sessions = relationship("ReadingSession", back_populates="document", cascade="all, delete-orphan")
    quiz_results = relationship("QuizResult", back_populates="document", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_documents_user_updated", "user_id", "updated_at"),
    )
