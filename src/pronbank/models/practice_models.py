"""Models for practice-related data structures."""
from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional


class WordStage(Enum):
    """Learning stages, in progression order."""
    LEARNING = "learning"
    REVIEWING = "reviewing"
    MASTERED = "mastered"

    @property
    def rank(self) -> int:
        return _STAGE_ORDER.index(self)


_STAGE_ORDER = [WordStage.LEARNING, WordStage.REVIEWING, WordStage.MASTERED]


class UserAction(Enum):
    """Possible user actions during a practice session."""
    ANSWER_YES = "answeryes"  # User pronounced the word correctly
    ANSWER_NO = "answerno"  # User got it wrong
    SKIP = "skip"  # User skipped the word
    EXIT = "exit"  # User left the session


class SessionState(Enum):
    """States of a practice session."""
    NOT_STARTED = "not_started"
    PRESENTING = "presenting"
    COMPLETE = "complete"
    EXITED = "exited"


@dataclass
class OutcomeUpdate:
    """Fields of a word record changed by one practice outcome."""
    practice_count: int
    correct_streak: int
    total_errors: int
    stage: WordStage
    last_practiced_date: date
    next_review_date: date

    def as_dict(self) -> Dict[str, Any]:
        """Column values ready to be written to the store."""
        values = asdict(self)
        values["stage"] = self.stage.value
        return values


@dataclass
class PracticeResult:
    """One answered word in a session's result log."""
    word_id: int
    word: str
    is_correct: bool


@dataclass
class DailyPracticeSet:
    """Words chosen for today, both per bucket and in final practice order."""
    words: List[Any] = field(default_factory=list)
    new_words: List[Any] = field(default_factory=list)
    struggling_words: List[Any] = field(default_factory=list)
    review_words: List[Any] = field(default_factory=list)
    retention_word: Optional[Any] = None
    backfill_words: List[Any] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.words

    def bucket_sizes(self) -> Dict[str, int]:
        return {
            "new": len(self.new_words),
            "struggling": len(self.struggling_words),
            "review": len(self.review_words),
            "retention": 1 if self.retention_word is not None else 0,
            "backfill": len(self.backfill_words),
        }


@dataclass
class SessionSummary:
    """Totals for a practice session."""
    correct: int
    incorrect: int
    skipped: int
    accuracy: float  # fraction of answered words that were correct, 0.0 when none
    log: List[PracticeResult]

    @property
    def accuracy_percent(self) -> int:
        return round(self.accuracy * 100)
