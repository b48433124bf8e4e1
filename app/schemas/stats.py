from datetime import datetime

from app.schemas.base import CamelModel


class WeeklyGoal(CamelModel):
    current: int
    target: int
    percentage: int


class StreakDay(CamelModel):
    date: str  # ISO calendar day (UTC)
    day: str  # Mon..Sun
    completed: bool
    count: int


class ReadingStreakStats(CamelModel):
    current_streak: int
    best_streak: int
    weekly_pattern: list[StreakDay]


class AchievementStatus(CamelModel):
    type: str
    title: str
    description: str
    target: int
    current: int
    earned: bool
    progress: int  # percent toward target, capped at 100
    unlocked_at: datetime | None = None


class StatsTotals(CamelModel):
    words_read: int
    reading_minutes: int
    sessions: int
    quizzes: int


class RecentQuiz(CamelModel):
    score: int
    date: datetime
    questions_answered: int
    correct_answers: int


class Growth(CamelModel):
    """Signed month-over-month change, e.g. "+25%"."""
    documents: str
    quizzes: str
    reading_time: str


class UserStats(CamelModel):
    documents_read: int
    total_documents: int
    hours_saved: int
    quiz_score: int
    reading_speed: int
    weekly_goal: WeeklyGoal
    reading_streak: ReadingStreakStats
    achievements: list[AchievementStatus]
    totals: StatsTotals
    consistency: int  # percent of the last 7 days with reading activity
    words_per_session: int
    completion_rate: int
    documents_this_week: int  # created in the last 7 days
    quizzes_this_week: int
    growth: Growth
    recent_quizzes: list[RecentQuiz]


class UserStatsResponse(CamelModel):
    success: bool = True
    stats: UserStats


class DataExportResponse(CamelModel):
    success: bool = True
    message: str
    download_url: str
    token: str
    expires_at: datetime
