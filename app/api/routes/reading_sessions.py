import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.models.reading_session import ReadingSession
from app.models.user import User
from app.schemas.reading import (
    ReadingAction,
    ReadingSessionResponse,
    TrackReadingRequest,
    TrackReadingResponse,
)
from app.api.deps import get_current_user
from app.services.reading_sessions import ReadingSessionRecorder

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reading-sessions", tags=["Reading Sessions"])


@router.post("", response_model=TrackReadingResponse, response_model_exclude_none=True)
def track_reading(
    data: TrackReadingRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Record a start, update or end event for the caller's reading of a document.

    update/end without an open session succeed without changing anything.
    """
    recorder = ReadingSessionRecorder(db)
    try:
        if data.action == ReadingAction.START:
            session = recorder.start(
                current_user.id, data.document_id, chapter_id=data.chapter_id, progress=data.progress
            )
            return TrackReadingResponse(session_id=session.id)

        if data.action == ReadingAction.UPDATE:
            recorder.update(
                current_user.id, data.document_id, words_read=data.words_read, progress=data.progress
            )
        else:
            recorder.end(
                current_user.id, data.document_id, words_read=data.words_read, progress=data.progress
            )
        return TrackReadingResponse()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(
            f"Failed to track reading | user={current_user.id} | document={data.document_id} | "
            f"action={data.action.value}"
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to track reading activity",
        )


@router.get("", response_model=list[ReadingSessionResponse])
def list_reading_sessions(
    document_id: Optional[str] = Query(None, alias="documentId"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List the caller's reading sessions, most recent first."""
    query = db.query(ReadingSession).filter(ReadingSession.user_id == current_user.id)
    if document_id:
        query = query.filter(ReadingSession.document_id == document_id)
    return (
        query.order_by(ReadingSession.start_time.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
