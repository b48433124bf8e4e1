from datetime import datetime

from pydantic import Field, model_validator

from app.models.quiz_result import QuizDifficulty
from app.schemas.base import CamelModel


class QuizResultCreate(CamelModel):
    document_id: str = Field(min_length=1)
    score: float = Field(ge=0, le=100)
    total_questions: int = Field(ge=1)
    correct_answers: int = Field(ge=0)
    time_spent: int = Field(ge=0)  # seconds
    difficulty: QuizDifficulty = QuizDifficulty.MEDIUM

    @model_validator(mode="after")
    def check_counts(self):
        if self.correct_answers > self.total_questions:
            raise ValueError("correctAnswers cannot exceed totalQuestions")
        return self


class QuizResultResponse(CamelModel):
    id: str
    document_id: str
    score: float
    total_questions: int
    correct_answers: int
    time_spent: int
    difficulty: QuizDifficulty
    created_at: datetime
