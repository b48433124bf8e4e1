"""Dashboard statistics for a single user."""

import logging
from datetime import date, datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.timeutils import as_utc, start_of_week, utc_now
from app.models.achievement import ReadingStreak
from app.models.document import Document
from app.models.quiz_result import QuizResult
from app.models.reading_session import ReadingSession
from app.schemas.stats import (
    Growth,
    ReadingStreakStats,
    RecentQuiz,
    StatsTotals,
    UserStats,
    WeeklyGoal,
)
from app.services.analytics import (
    achievement_metrics,
    aggregate_progress,
    calculate_streak,
    evaluate_achievements,
    round_half_up,
    session_minutes,
)

logger = logging.getLogger(__name__)

RECENT_QUIZ_LIMIT = 10
GROWTH_PERIOD_DAYS = 30


def record_best_streak(db: Session, user_id: int, current_streak: int, today: date) -> int:
    """Raise the persisted best streak to ``current_streak`` if it is higher.

    Returns the best streak after the update. The caller owns the commit.
    """
    row = db.query(ReadingStreak).filter(ReadingStreak.user_id == user_id).first()
    if row is None:
        if current_streak <= 0:
            return 0
        try:
            with db.begin_nested():
                row = ReadingStreak(user_id=user_id, best_streak=current_streak, last_active_date=today)
                db.add(row)
                db.flush()
            return current_streak
        except IntegrityError:
            row = db.query(ReadingStreak).filter(ReadingStreak.user_id == user_id).one()

    if current_streak > row.best_streak:
        logger.info(f"New best streak for user {user_id}: {row.best_streak} -> {current_streak}")
        row.best_streak = current_streak
        row.last_active_date = today
    return row.best_streak


def count_weekly_documents(documents: list[Document], week_start: datetime) -> int:
    """Documents updated since the start of the week, read or not."""
    return sum(1 for d in documents if d.updated_at is not None and as_utc(d.updated_at) >= week_start)


def _count_between(timestamps, start: datetime, end: datetime | None = None) -> int:
    return sum(
        1
        for ts in timestamps
        if ts is not None and as_utc(ts) >= start and (end is None or as_utc(ts) < end)
    )


def format_growth(current: float, previous: float) -> str:
    """Change against the previous period as a signed percentage, e.g. "+25%".

    With nothing in the previous period any activity counts as +100%.
    """
    if previous > 0:
        change = (current - previous) / previous * 100
    else:
        change = 100 if current > 0 else 0
    rounded = round_half_up(change)
    return f"+{rounded}%" if change > 0 else f"{rounded}%"


def build_growth(documents, quiz_results, sessions, now: datetime) -> Growth:
    """Month-over-month growth: the last 30 days against the 30 before."""
    month_ago = now - timedelta(days=GROWTH_PERIOD_DAYS)
    two_months_ago = now - timedelta(days=2 * GROWTH_PERIOD_DAYS)

    created = [d.created_at for d in documents]
    taken = [q.created_at for q in quiz_results]

    def minutes_between(start, end=None):
        return sum(
            session_minutes(s)
            for s in sessions
            if s.end_time is not None
            and as_utc(s.end_time) >= start
            and (end is None or as_utc(s.end_time) < end)
        )

    return Growth(
        documents=format_growth(
            _count_between(created, month_ago), _count_between(created, two_months_ago, month_ago)
        ),
        quizzes=format_growth(
            _count_between(taken, month_ago), _count_between(taken, two_months_ago, month_ago)
        ),
        reading_time=format_growth(
            minutes_between(month_ago), minutes_between(two_months_ago, month_ago)
        ),
    )


def build_user_stats(db: Session, user_id: int, now: datetime | None = None) -> UserStats:
    """Load the user's reading data and derive the dashboard stats.

    Unlocks achievements and raises the persisted best streak as a side
    effect, then commits. Any database error propagates to the caller with
    nothing committed.
    """
    now = as_utc(now) if now is not None else utc_now()
    today = now.date()

    # One snapshot from the request session
    sessions = db.query(ReadingSession).filter(ReadingSession.user_id == user_id).all()
    documents = db.query(Document).filter(Document.user_id == user_id).all()
    quiz_results = (
        db.query(QuizResult)
        .filter(QuizResult.user_id == user_id)
        .order_by(QuizResult.created_at.desc(), QuizResult.id)
        .all()
    )

    progress = aggregate_progress(
        sessions, documents, quiz_results, baseline_wpm=settings.baseline_reading_wpm
    )
    streak = calculate_streak(documents, today, lookback_days=settings.streak_lookback_days)
    best_streak = record_best_streak(db, user_id, streak.current_streak, today)

    achievements = evaluate_achievements(
        db, user_id, achievement_metrics(progress, streak.current_streak), now
    )
    db.commit()

    weekly_current = count_weekly_documents(documents, start_of_week(today))
    week_ago = now - timedelta(days=7)
    weekly_target = settings.weekly_goal_target

    stats = UserStats(
        documents_read=progress.completed_documents,
        total_documents=progress.total_documents,
        hours_saved=round_half_up(progress.hours_saved),
        quiz_score=progress.quiz_average,
        reading_speed=progress.reading_speed,
        weekly_goal=WeeklyGoal(
            current=weekly_current,
            target=weekly_target,
            percentage=min(100, round_half_up(weekly_current / weekly_target * 100)),
        ),
        reading_streak=ReadingStreakStats(
            current_streak=streak.current_streak,
            best_streak=best_streak,
            weekly_pattern=streak.weekly_pattern,
        ),
        achievements=achievements,
        totals=StatsTotals(
            words_read=progress.total_words,
            reading_minutes=round_half_up(progress.total_minutes),
            sessions=progress.session_count,
            quizzes=progress.quiz_count,
        ),
        consistency=round_half_up(streak.active_days_last_week / 7 * 100),
        words_per_session=(
            round_half_up(progress.total_words / progress.session_count)
            if progress.session_count
            else 0
        ),
        completion_rate=progress.completion_rate,
        documents_this_week=_count_between([d.created_at for d in documents], week_ago),
        quizzes_this_week=_count_between([q.created_at for q in quiz_results], week_ago),
        growth=build_growth(documents, quiz_results, sessions, now),
        recent_quizzes=[
            RecentQuiz(
                score=round_half_up(q.score),
                date=as_utc(q.created_at),
                questions_answered=q.total_questions,
                correct_answers=q.correct_answers,
            )
            for q in quiz_results[:RECENT_QUIZ_LIMIT]
        ],
    )

    logger.debug(
        f"Stats computed for user {user_id} | documents={progress.total_documents} | "
        f"sessions={progress.session_count} | streak={streak.current_streak}"
    )
    return stats
