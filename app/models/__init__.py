from app.models.user import User
from app.models.document import Document, DocumentType
from app.models.reading_session import ReadingSession
from app.models.quiz_result import QuizResult, QuizDifficulty
from app.models.achievement import Achievement, AchievementType, ReadingStreak
from app.models.data_export import DataExport
from app.models.audit_log import AuditLog, AuditAction

__all__ = [
    "User",
    "Document",
    "DocumentType",
    "ReadingSession",
    "QuizResult",
    "QuizDifficulty",
    "Achievement",
    "AchievementType",
    "ReadingStreak",
    "DataExport",
    "AuditLog",
    "AuditAction",
]
