import uuid

from sqlalchemy import Column, Integer, Float, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.database import Base


class ReadingSession(Base):
    __tablename__ = "reading_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    document_id = Column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    chapter_id = Column(String(100), nullable=True)

    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=True)  # null while the session is open

    progress_start = Column(Float, nullable=False, default=0)
    progress_end = Column(Float, nullable=False, default=0)
    words_read = Column(Integer, nullable=False, default=0)
    is_completed = Column(Boolean, nullable=False, default=False)
    total_minutes = Column(Float, nullable=True)  # set when the session ends

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="reading_sessions")
    document = relationship("Document", back_populates="reading_sessions")

    __table_args__ = (
        # Open-session lookup: (user, document, end_time IS NULL) ORDER BY start_time DESC
        Index("ix_reading_sessions_open", "user_id", "document_id", "end_time", "start_time"),
    )
