import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, Date
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.database import Base


class AchievementType(str, enum.Enum):
    SPEED_READER = "speed_reader"
    QUIZ_MASTER = "quiz_master"
    CONSISTENCY = "consistency"
    EXPLORER = "explorer"
    ENTHUSIAST = "enthusiast"
    TIME_SAVER = "time_saver"


class Achievement(Base):
    """An unlocked achievement. Rows are only ever inserted."""

    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(30), nullable=False)
    unlocked_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="achievements")

    __table_args__ = (
        UniqueConstraint("user_id", "type", name="uq_achievements_user_type"),
    )


class ReadingStreak(Base):
    """Persisted best streak; best_streak only ever increases."""

    __tablename__ = "reading_streaks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    best_streak = Column(Integer, nullable=False, default=0)
    last_active_date = Column(Date, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
