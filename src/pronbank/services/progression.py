"""Stage transitions and review intervals for practiced words."""
import logging
from datetime import date, timedelta
from typing import Any, Optional

from pronbank.config import IntervalSettings, PracticeSettings, settings
from pronbank.models.practice_models import OutcomeUpdate, WordStage

logger = logging.getLogger(__name__)


def safe_count(value: Any) -> int:
    """Clamp a stored counter to a non-negative int; missing or malformed values count as 0."""
    try:
        count = int(value or 0)
    except (TypeError, ValueError):
        logger.warning(f"Malformed counter value {value!r}, using 0")
        return 0
    return max(count, 0)


def normalize_stage(value: Any) -> WordStage:
    """Stage of a record, falling back to LEARNING for unknown values."""
    if isinstance(value, WordStage):
        return value
    try:
        return WordStage(value)
    except ValueError:
        logger.warning(f"Unknown stage {value!r}, treating as learning")
        return WordStage.LEARNING


def is_graduated(record: Any, graduation_streak: Optional[int] = None) -> bool:
    """A word graduates out of daily rotation once its streak reaches the graduation streak."""
    if graduation_streak is None:
        graduation_streak = settings.practice.graduation_streak
    return safe_count(record.correct_streak) >= graduation_streak


def next_review_date(
    stage: WordStage,
    practice_count: int,
    today: date,
    intervals: Optional[IntervalSettings] = None,
) -> date:
    """Fixed lookup of the next review date for a stage."""
    intervals = intervals or settings.intervals
    if stage is WordStage.LEARNING:
        days = intervals.learning
    elif stage is WordStage.REVIEWING:
        if practice_count <= intervals.reviewing_threshold:
            days = intervals.reviewing_early
        else:
            days = intervals.reviewing_late
    else:
        days = intervals.mastered
    return today + timedelta(days=days)


def apply_outcome(
    record: Any,
    is_correct: bool,
    today: Optional[date] = None,
    practice: Optional[PracticeSettings] = None,
    intervals: Optional[IntervalSettings] = None,
) -> OutcomeUpdate:
    """Compute the fields a practice outcome changes on a word record.

    Pure: the record is not modified, the caller persists the result.

    Stages only move forward. An incorrect answer resets the streak but
    never demotes, so a mastered word stays mastered.

    Args:
        record: Any object with practice_count, correct_streak, total_errors and stage.
        is_correct: Whether the word was pronounced correctly.
        today: Practice date, defaults to date.today().
    """
    practice = practice or settings.practice
    today = today or date.today()

    practice_count = safe_count(record.practice_count)
    # a streak can never be longer than the number of attempts
    correct_streak = min(safe_count(record.correct_streak), practice_count)
    total_errors = safe_count(record.total_errors)
    stage = normalize_stage(record.stage)

    practice_count += 1
    if is_correct:
        correct_streak += 1
    else:
        correct_streak = 0
        total_errors += 1

    if stage is WordStage.LEARNING and correct_streak >= practice.graduation_streak:
        stage = WordStage.REVIEWING
    elif stage is WordStage.REVIEWING and correct_streak >= practice.mastery_streak:
        stage = WordStage.MASTERED

    return OutcomeUpdate(
        practice_count=practice_count,
        correct_streak=correct_streak,
        total_errors=total_errors,
        stage=stage,
        last_practiced_date=today,
        next_review_date=next_review_date(stage, practice_count, today, intervals),
    )
