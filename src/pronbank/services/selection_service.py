"""Daily practice selection.

Chooses which words a user practices today from their whole bank:

1. New: not graduated, practiced fewer than 3 times, oldest added first (up to 7)
2. Struggling: at least one error, most errors first (up to 5)
3. Review: everything else not graduated, priority words first, then
   least recently practiced, never-practiced words before all others (up to 3)
4. Retention: every 5th session one random graduated word is mixed back in
5. Backfill: tops the set up to 15 from the oldest remaining words

Buckets never share a word. The final list keeps bucket order, except that
priority words are moved to the front.
"""
import logging
import random
from datetime import date
from typing import Any, Iterable, List, Optional, Set

from pronbank.config import PracticeSettings, settings
from pronbank.models.practice_models import DailyPracticeSet
from pronbank.services.progression import is_graduated, safe_count

logger = logging.getLogger(__name__)


def _last_practiced_key(record: Any) -> date:
    return record.last_practiced_date or date.min


def is_retention_session(session_count: int, practice: Optional[PracticeSettings] = None) -> bool:
    """Whether this session re-checks one graduated word."""
    practice = practice or settings.practice
    return session_count > 0 and session_count % practice.retention_check_interval == 0


def select_daily_set(
    records: Iterable[Any],
    session_count: int,
    rng: Optional[random.Random] = None,
    practice: Optional[PracticeSettings] = None,
) -> DailyPracticeSet:
    """Select today's practice set.

    Args:
        records: All of the user's word records, oldest added first.
        session_count: Number of sessions the user has completed so far.
        rng: Random source for the retention draw.
        practice: Selection settings, defaults to the global settings.

    Returns:
        The selected words. An empty set means nothing is eligible today.
    """
    practice = practice or settings.practice
    rng = rng or random.Random()
    records = list(records)

    graduated = [r for r in records if is_graduated(r, practice.graduation_streak)]
    non_graduated = [r for r in records if not is_graduated(r, practice.graduation_streak)]

    retention_due = is_retention_session(session_count, practice) and bool(graduated)
    # keep a slot free so the retention word never pushes the set past its size
    reserved = 1 if retention_due else 0
    selected_ids: Set[Any] = set()

    def take(candidates: List[Any], quota: int) -> List[Any]:
        limit = min(quota, max(practice.daily_practice_size - reserved - len(selected_ids), 0))
        chosen = []
        for record in candidates:
            if len(chosen) >= limit:
                break
            if record.id in selected_ids:
                continue
            selected_ids.add(record.id)
            chosen.append(record)
        return chosen

    new_words = take(
        [r for r in non_graduated if safe_count(r.practice_count) < practice.new_word_practice_limit],
        practice.new_words_count,
    )

    struggling_words = take(
        sorted(
            (r for r in non_graduated if r.id not in selected_ids and safe_count(r.total_errors) >= 1),
            key=lambda r: safe_count(r.total_errors),
            reverse=True,
        ),
        practice.struggling_words_count,
    )

    review_words = take(
        sorted(
            (r for r in non_graduated if r.id not in selected_ids),
            key=lambda r: (not r.priority, _last_practiced_key(r)),
        ),
        practice.review_words_count,
    )

    retention_word = None
    if retention_due:
        retention_word = rng.choice(graduated)
        selected_ids.add(retention_word.id)

    backfill_words = []
    for record in non_graduated:
        if len(selected_ids) >= practice.daily_practice_size:
            break
        if record.id not in selected_ids:
            selected_ids.add(record.id)
            backfill_words.append(record)

    combined = [
        *new_words,
        *struggling_words,
        *review_words,
        *([retention_word] if retention_word is not None else []),
        *backfill_words,
    ]
    # stable, so bucket order survives within each priority group
    words = sorted(combined, key=lambda r: not r.priority)

    practice_set = DailyPracticeSet(
        words=words,
        new_words=new_words,
        struggling_words=struggling_words,
        review_words=review_words,
        retention_word=retention_word,
        backfill_words=backfill_words,
    )
    logger.info(f"Selected {len(words)} of {len(records)} words for session {session_count + 1}: "
                f"{practice_set.bucket_sizes()}")
    return practice_set
