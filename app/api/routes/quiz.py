import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import desc
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.models.quiz_result import QuizResult
from app.models.user import User
from app.schemas.quiz import QuizResultCreate, QuizResultResponse
from app.api.deps import get_current_user
from app.api.routes.documents import get_owned_document

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quiz", tags=["Quizzes"])


@router.post("/results", response_model=QuizResultResponse, status_code=status.HTTP_201_CREATED)
def submit_quiz_result(
    data: QuizResultCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Record one completed quiz attempt for a document the caller owns."""
    get_owned_document(db, current_user, data.document_id)

    result = QuizResult(
        user_id=current_user.id,
        document_id=data.document_id,
        score=data.score,
        total_questions=data.total_questions,
        correct_answers=data.correct_answers,
        time_spent=data.time_spent,
        difficulty=data.difficulty.value,
    )
    db.add(result)
    db.commit()
    db.refresh(result)
    logger.info(
        f"Quiz result {result.id} recorded | user={current_user.id} | "
        f"document={data.document_id} | score={data.score}"
    )
    return result


@router.get("/results", response_model=list[QuizResultResponse])
def list_quiz_results(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List the caller's quiz attempts, newest first."""
    return (
        db.query(QuizResult)
        .filter(QuizResult.user_id == current_user.id)
        .order_by(desc(QuizResult.created_at))
        .offset(skip)
        .limit(limit)
        .all()
    )
