"""Reading analytics: progress aggregation, streaks and achievements.

``aggregate_progress`` and ``calculate_streak`` are pure functions over rows
that have already been loaded, so they work on ORM instances as well as any
object exposing the same attributes. ``evaluate_achievements`` is the only
piece here that writes.
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.timeutils import as_utc, utc_date
from app.models.achievement import Achievement, AchievementType
from app.schemas.stats import AchievementStatus, StreakDay

logger = logging.getLogger(__name__)

DEFAULT_BASELINE_WPM = 150
DEFAULT_LOOKBACK_DAYS = 365
COMPLETED_PROGRESS = 100
WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


# ============================================
# Progress aggregation
# ============================================


@dataclass
class ProgressSummary:
    total_words: int = 0
    total_minutes: float = 0.0
    reading_speed: int = 0  # words per minute
    hours_saved: float = 0.0
    session_count: int = 0
    total_documents: int = 0
    completed_documents: int = 0
    completion_rate: int = 0
    quiz_count: int = 0
    quiz_average: int = 0


def session_minutes(session) -> float:
    """Elapsed minutes of a closed session; open sessions count as zero."""
    if session.end_time is None:
        return 0.0
    elapsed = (as_utc(session.end_time) - as_utc(session.start_time)).total_seconds() / 60
    return max(0.0, elapsed)


def aggregate_progress(
    sessions: Iterable,
    documents: Iterable,
    quiz_results: Iterable,
    baseline_wpm: int = DEFAULT_BASELINE_WPM,
) -> ProgressSummary:
    sessions = list(sessions)
    documents = list(documents)
    quiz_results = list(quiz_results)

    total_words = sum(s.words_read or 0 for s in sessions)
    total_minutes = sum(session_minutes(s) for s in sessions)

    reading_speed = round_half_up(total_words / total_minutes) if total_minutes > 0 else 0

    # Minutes a baseline reader would need for the same words, minus what it took
    hours_saved = max(0.0, total_words / baseline_wpm - total_minutes) / 60

    completed = sum(1 for d in documents if (d.progress or 0) >= COMPLETED_PROGRESS)
    completion_rate = round_half_up(completed / len(documents) * 100) if documents else 0

    quiz_average = (
        round_half_up(sum(q.score for q in quiz_results) / len(quiz_results))
        if quiz_results
        else 0
    )

    return ProgressSummary(
        total_words=total_words,
        total_minutes=total_minutes,
        reading_speed=reading_speed,
        hours_saved=hours_saved,
        session_count=len(sessions),
        total_documents=len(documents),
        completed_documents=completed,
        completion_rate=completion_rate,
        quiz_count=len(quiz_results),
        quiz_average=quiz_average,
    )


# ============================================
# Streaks
# ============================================


@dataclass
class StreakSummary:
    current_streak: int = 0
    weekly_pattern: list[StreakDay] = field(default_factory=list)

    @property
    def active_days_last_week(self) -> int:
        return sum(1 for day in self.weekly_pattern if day.completed)


def daily_activity(documents: Iterable) -> Counter:
    """Map UTC calendar day -> number of documents with progress updated that day."""
    return Counter(
        utc_date(d.updated_at)
        for d in documents
        if (d.progress or 0) > 0 and d.updated_at is not None
    )


def calculate_streak(
    documents: Iterable,
    today: date,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> StreakSummary:
    """Consecutive days of reading activity ending today (or yesterday).

    Today without activity does not break the streak since the day is not
    over yet; the first empty day before that ends it.
    """
    activity = daily_activity(documents)

    current = 0
    for offset in range(lookback_days):
        if activity.get(today - timedelta(days=offset)):
            current += 1
        elif offset == 0:
            continue
        else:
            break

    weekly_pattern = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        count = activity.get(day, 0)
        weekly_pattern.append(
            StreakDay(date=day.isoformat(), day=WEEKDAY_NAMES[day.weekday()], completed=count > 0, count=count)
        )

    return StreakSummary(current_streak=current, weekly_pattern=weekly_pattern)


# ============================================
# Achievements
# ============================================


@dataclass(frozen=True)
class AchievementDefinition:
    type: AchievementType
    title: str
    description: str
    target: int


ACHIEVEMENTS: tuple[AchievementDefinition, ...] = (
    AchievementDefinition(AchievementType.SPEED_READER, "Speed Reader", "Read at 200+ WPM", 200),
    AchievementDefinition(AchievementType.QUIZ_MASTER, "Quiz Master", "90%+ average quiz score", 90),
    AchievementDefinition(AchievementType.CONSISTENCY, "Consistency Champion", "7-day reading streak", 7),
    AchievementDefinition(AchievementType.EXPLORER, "Document Explorer", "Complete 10+ documents", 10),
    AchievementDefinition(AchievementType.ENTHUSIAST, "Quiz Enthusiast", "Take 25+ quizzes", 25),
    AchievementDefinition(AchievementType.TIME_SAVER, "Time Saver", "Save 10+ hours of reading time", 10),
)


def achievement_metrics(progress: ProgressSummary, current_streak: int) -> dict[AchievementType, int]:
    """Current value each achievement is measured against."""
    return {
        AchievementType.SPEED_READER: progress.reading_speed,
        AchievementType.QUIZ_MASTER: progress.quiz_average,
        AchievementType.CONSISTENCY: current_streak,
        AchievementType.EXPLORER: progress.completed_documents,
        AchievementType.ENTHUSIAST: progress.quiz_count,
        AchievementType.TIME_SAVER: round_half_up(progress.hours_saved),
    }


def _unlock(db: Session, user_id: int, achievement_type: AchievementType, now: datetime) -> Achievement:
    """Insert an achievement row inside a SAVEPOINT.

    A concurrent request may have inserted the same (user, type) first; the
    unique constraint rejects ours and the existing row is returned instead.
    """
    try:
        with db.begin_nested():
            achievement = Achievement(user_id=user_id, type=achievement_type.value, unlocked_at=now)
            db.add(achievement)
            db.flush()
    except IntegrityError:
        logger.info(f"Achievement {achievement_type.value} already unlocked for user {user_id}")
        return (
            db.query(Achievement)
            .filter(Achievement.user_id == user_id, Achievement.type == achievement_type.value)
            .one()
        )

    logger.info(f"Achievement unlocked | user={user_id} | type={achievement_type.value}")
    return achievement


def evaluate_achievements(
    db: Session,
    user_id: int,
    metrics: dict[AchievementType, int],
    now: datetime,
) -> list[AchievementStatus]:
    """Unlock newly earned achievements and report all six.

    Earned achievements are never revoked, even if the metric later drops.
    The caller owns the commit.
    """
    unlocked = {
        a.type: a
        for a in db.query(Achievement).filter(Achievement.user_id == user_id).all()
    }

    statuses = []
    for definition in ACHIEVEMENTS:
        current = metrics[definition.type]
        record = unlocked.get(definition.type.value)
        if record is None and current >= definition.target:
            record = _unlock(db, user_id, definition.type, now)

        statuses.append(
            AchievementStatus(
                type=definition.type.value,
                title=definition.title,
                description=definition.description,
                target=definition.target,
                current=current,
                earned=record is not None,
                progress=min(100, round_half_up(current / definition.target * 100)),
                unlocked_at=as_utc(record.unlocked_at) if record is not None else None,
            )
        )
    return statuses
