from sqlalchemy import Column, Integer, String, LargeBinary, DateTime, ForeignKey, Index
from sqlalchemy.sql import func

from app.db.database import Base


class DataExport(Base):
    """A prepared export waiting for its one-time download.

    One pending export per user; requesting a new one replaces it.
    """

    __tablename__ = "data_exports"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    token = Column(String(64), nullable=False, unique=True)
    pdf = Column(LargeBinary, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_data_exports_expires", "expires_at"),
    )
