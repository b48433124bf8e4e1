import enum
from datetime import datetime

from pydantic import Field

from app.schemas.base import CamelModel


class ReadingAction(str, enum.Enum):
    START = "start"
    UPDATE = "update"
    END = "end"


class TrackReadingRequest(CamelModel):
    """Reading lifecycle event sent by the reader view."""
    document_id: str = Field(min_length=1)
    chapter_id: str | None = None
    action: ReadingAction
    progress: float | None = Field(None, ge=0, le=100)
    words_read: int | None = Field(None, ge=0)
    time_spent: float | None = Field(None, ge=0)  # seconds, client-measured


class TrackReadingResponse(CamelModel):
    success: bool = True
    session_id: str | None = None


class ReadingSessionResponse(CamelModel):
    id: str
    document_id: str
    chapter_id: str | None
    start_time: datetime
    end_time: datetime | None
    progress_start: float
    progress_end: float
    words_read: int
    is_completed: bool
    total_minutes: float | None
