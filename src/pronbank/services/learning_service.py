"""Learning service tying word selection, practice sessions and progress together."""
import logging
import random
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from pronbank import monitoring
from pronbank.errors import StoreError, UserNotFoundError, WordNotFoundError
from pronbank.models.models import PronunciationWord
from pronbank.models.practice_models import DailyPracticeSet
from pronbank.services.progression import apply_outcome
from pronbank.services.pronunciation_service import AudioResolver
from pronbank.services.selection_service import select_daily_set
from pronbank.services.session_service import PracticeSession
from pronbank.services.user_service import UserService
from pronbank.services.word_service import WordService

logger = logging.getLogger(__name__)


class LearningService:
    """Service for choosing daily practice words and running practice sessions."""

    def __init__(
        self,
        db: Session,
        word_service: Optional[WordService] = None,
        user_service: Optional[UserService] = None,
        rng: Optional[random.Random] = None,
        resolve_audio: Optional[AudioResolver] = None,
    ):
        """Initialize the service with a database session."""
        self.db = db
        self.word_service = word_service or WordService(db)
        self.user_service = user_service or UserService(db)
        self.rng = rng or random.Random()
        self.resolve_audio = resolve_audio or self.word_service.pronunciation.resolve_audio

    def get_daily_practice_set(self, user_id: str) -> DailyPracticeSet:
        """Today's practice set for the user, with each bucket exposed."""
        if not self.user_service.get_user(user_id):
            raise UserNotFoundError(user_id)

        words = self.word_service.get_user_words(user_id)
        session_count = self.user_service.get_session_counter(user_id)
        practice_set = select_daily_set(words, session_count, self.rng)
        if practice_set.retention_word is not None:
            monitoring.retention_checks.inc()
            logger.info(f"Retention check for user {user_id}: '{practice_set.retention_word.word}'")
        return practice_set

    def select_daily_set(self, user_id: str) -> List[PronunciationWord]:
        """Words to practice today in order; empty when nothing is eligible."""
        return self.get_daily_practice_set(user_id).words

    def get_session_number(self, user_id: str) -> int:
        """Number of the session the user would start next."""
        return self.user_service.get_session_counter(user_id) + 1

    def record_practice(
        self, word_id: int, is_correct: bool, today: Optional[date] = None
    ) -> PronunciationWord:
        """Record a single practice outcome outside of a session."""
        word = self.word_service.get_word(word_id)
        if word is None:
            raise WordNotFoundError(word_id)
        update = apply_outcome(word, is_correct, today)
        return self.word_service.persist_outcome(word_id, update)

    def start_session(
        self, user_id: str, answer_delay: Optional[float] = None
    ) -> Optional[PracticeSession]:
        """Select today's words and start a session, or None when nothing is eligible."""
        practice_set = self.get_daily_practice_set(user_id)
        if practice_set.is_empty:
            logger.info(f"Nothing eligible to practice for user {user_id}")
            return None

        session = PracticeSession(
            persist_outcome=self.word_service.persist_outcome,
            resolve_audio=self.resolve_audio,
            on_complete=lambda: self.complete_session(user_id),
            answer_delay=answer_delay,
        )
        session.start(practice_set.words)
        monitoring.practice_sessions_started.inc()
        logger.info(f"Starting practice session #{self.get_session_number(user_id)} for user {user_id}")
        return session

    def complete_session(self, user_id: str) -> int:
        """Count a finished session and return the new session total."""
        count = self.user_service.increment_session_counter(user_id)
        monitoring.practice_sessions_completed.inc()
        try:
            self.user_service.log_user_activity(
                user_id, f"Completed practice session {count}", "INFO", "practice"
            )
        except StoreError as e:
            # counter already committed
            logger.warning(f"Could not log completed session for user {user_id}: {e}")
        return count
