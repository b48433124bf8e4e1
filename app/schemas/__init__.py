from app.schemas.user import UserCreate, UserResponse, Token
from app.schemas.document import DocumentCreate, DocumentSummary, DocumentDetail
from app.schemas.reading import TrackReadingRequest, TrackReadingResponse, ReadingAction
from app.schemas.stats import UserStats, UserStatsResponse

__all__ = [
    "UserCreate", "UserResponse", "Token",
    "DocumentCreate", "DocumentSummary", "DocumentDetail",
    "TrackReadingRequest", "TrackReadingResponse", "ReadingAction",
    "UserStats", "UserStatsResponse",
]
