"""User data export with one-time, expiring download tokens.

Pending exports live in the ``data_exports`` table rather than process
memory, so every instance behind a load balancer sees the same tokens. A
download always checks expiry itself; the scheduled purge only reclaims space.
"""

import logging
import secrets
from datetime import datetime, timedelta

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.timeutils import as_utc, utc_now
from app.db.database import SessionLocal
from app.models.achievement import Achievement
from app.models.data_export import DataExport
from app.models.document import Document
from app.models.quiz_result import QuizResult
from app.models.reading_session import ReadingSession
from app.models.user import User
from app.services.pdf_export import UserDataPDF

logger = logging.getLogger(__name__)


def _iso(value: datetime | None) -> str | None:
    return as_utc(value).isoformat() if value is not None else None


def collect_user_data(db: Session, user: User) -> dict:
    """Everything stored about ``user``, as plain JSON-ready data."""
    documents = db.query(Document).filter(Document.user_id == user.id).order_by(Document.created_at).all()
    sessions = (
        db.query(ReadingSession)
        .filter(ReadingSession.user_id == user.id)
        .order_by(ReadingSession.start_time)
        .all()
    )
    quiz_results = (
        db.query(QuizResult).filter(QuizResult.user_id == user.id).order_by(QuizResult.created_at).all()
    )
    achievements = db.query(Achievement).filter(Achievement.user_id == user.id).all()

    return {
        "user": {
            "id": user.id,
            "email": user.email,
            "fullName": user.full_name,
            "createdAt": _iso(user.created_at),
        },
        "documents": [
            {
                "id": d.id,
                "title": d.title,
                "type": d.type,
                "fileName": d.file_name,
                "wordCount": d.word_count,
                "progress": d.progress,
                "createdAt": _iso(d.created_at),
                "updatedAt": _iso(d.updated_at),
            }
            for d in documents
        ],
        "readingSessions": [
            {
                "id": s.id,
                "documentId": s.document_id,
                "chapterId": s.chapter_id,
                "startTime": _iso(s.start_time),
                "endTime": _iso(s.end_time),
                "wordsRead": s.words_read,
                "progressStart": s.progress_start,
                "progressEnd": s.progress_end,
                "isCompleted": s.is_completed,
                "totalMinutes": s.total_minutes,
            }
            for s in sessions
        ],
        "quizResults": [
            {
                "id": q.id,
                "documentId": q.document_id,
                "score": q.score,
                "totalQuestions": q.total_questions,
                "correctAnswers": q.correct_answers,
                "timeSpent": q.time_spent,
                "difficulty": q.difficulty,
                "createdAt": _iso(q.created_at),
            }
            for q in quiz_results
        ],
        "achievements": [
            {"type": a.type, "unlockedAt": _iso(a.unlocked_at)} for a in achievements
        ],
    }


def create_export(db: Session, user: User) -> DataExport:
    """Prepare a new export, replacing any pending one for the user."""
    db.query(DataExport).filter(DataExport.user_id == user.id).delete()
    db.flush()

    pdf = UserDataPDF().render(collect_user_data(db, user))

    export = DataExport(
        user_id=user.id,
        token=secrets.token_urlsafe(32),
        pdf=pdf,
        expires_at=utc_now() + timedelta(hours=settings.data_export_ttl_hours),
    )
    db.add(export)
    db.flush()
    logger.info(f"Data export prepared for user {user.id} ({len(pdf)} bytes), expires {export.expires_at.isoformat()}")
    return export


def redeem_export(db: Session, user: User, token: str) -> bytes:
    """Consume a download token and return the export PDF.

    The export row is deleted whether or not it has expired. Raises 404 for
    an unknown token and 410 for an expired one.
    """
    export = (
        db.query(DataExport)
        .filter(DataExport.user_id == user.id, DataExport.token == token)
        .first()
    )
    if not export:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invalid or expired download token")

    expired = as_utc(export.expires_at) < utc_now()
    pdf = export.pdf
    db.delete(export)
    db.commit()

    if expired:
        logger.info(f"Expired export token used by user {user.id}")
        raise HTTPException(status_code=status.HTTP_410_GONE, detail="Download token has expired")
    return pdf


def purge_expired_exports() -> int:
    """Scheduled job: delete exports past their expiry."""
    db: Session = SessionLocal()
    try:
        deleted = db.query(DataExport).filter(DataExport.expires_at < utc_now()).delete()
        db.commit()
        if deleted:
            logger.info(f"Purged {deleted} expired data exports")
        return deleted
    except Exception as e:
        db.rollback()
        logger.warning(f"Data export cleanup failed: {e}")
        return 0
    finally:
        db.close()
