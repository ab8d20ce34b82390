"""Service for managing the words in a user's pronunciation bank."""
import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from pronbank import monitoring
from pronbank.config import settings
from pronbank.errors import DuplicateWordError, UserNotFoundError, WordNotFoundError
from pronbank.models.base import store_operation
from pronbank.models.models import PronunciationWord, User, UserLog
from pronbank.models.practice_models import OutcomeUpdate, WordStage
from pronbank.services.progression import next_review_date, normalize_stage
from pronbank.services.pronunciation_service import PronunciationGenerator

logger = logging.getLogger(__name__)

STRESS_MARKS = ("ˈ", "ˌ")


def needs_pronunciation_refresh(word: PronunciationWord) -> bool:
    """Whether a word still carries placeholder pronunciation data.

    That is a "/word/" phonetic or one without any stress marks.
    """
    phonetic = word.phonetic or ""
    if phonetic == f"/{word.word}/":
        return True
    return not any(mark in phonetic for mark in STRESS_MARKS)


class WordService:
    """Service for managing words in the system."""

    def __init__(self, db: Session, pronunciation: Optional[PronunciationGenerator] = None):
        """Initialize the service with a database session."""
        self.db = db
        self.pronunciation = pronunciation or PronunciationGenerator()

    def get_word(self, word_id: int) -> Optional[PronunciationWord]:
        """Get a word by its ID."""
        with store_operation(self.db, f"load word {word_id}"):
            return self.db.get(PronunciationWord, word_id)

    def get_user_words(self, user_id: str) -> List[PronunciationWord]:
        """All of a user's words, oldest added first."""
        with store_operation(self.db, f"load words for user {user_id}"):
            return (
                self.db.query(PronunciationWord)
                .filter(PronunciationWord.user_id == user_id)
                .order_by(PronunciationWord.created_at.asc(), PronunciationWord.id.asc())
                .all()
            )

    def find_user_word(self, user_id: str, text: str) -> Optional[PronunciationWord]:
        """Find a user's word ignoring case."""
        with store_operation(self.db, f"look up '{text}' for user {user_id}"):
            return (
                self.db.query(PronunciationWord)
                .filter(
                    PronunciationWord.user_id == user_id,
                    func.lower(PronunciationWord.word) == text.strip().lower(),
                )
                .first()
            )

    def add_word(self, user_id: str, text: str, today: Optional[date] = None) -> PronunciationWord:
        """Add a word to the user's bank and generate its pronunciation data."""
        text = text.strip()
        if not text:
            raise ValueError("Word cannot be empty")
        if self.db.get(User, user_id) is None:
            raise UserNotFoundError(user_id)
        if self.find_user_word(user_id, text) is not None:
            raise DuplicateWordError(text)

        data = self.pronunciation.generate_pronunciation_data(text)
        today = today or date.today()
        record = PronunciationWord(
            user_id=user_id,
            word=text,
            phonetic=data.phonetic,
            stress_pattern=data.stress_pattern,
            readable_form=data.readable_form,
            audio_reference=data.audio_reference,
            stage=WordStage.LEARNING.value,
            practice_count=0,
            correct_streak=0,
            total_errors=0,
            priority=False,
            next_review_date=next_review_date(WordStage.LEARNING, 0, today),
            last_practiced_date=None,
            notes="",
        )
        with store_operation(self.db, f"add '{text}' for user {user_id}"):
            self.db.add(record)
            self.db.add(UserLog(user_id=user_id, message=f"Added word '{text}'", level="INFO", category="words"))
            self.db.commit()
            self.db.refresh(record)

        monitoring.words_added.inc()
        logger.info(f"Added word '{text}' for user {user_id}")
        return record

    def add_words(self, user_id: str, texts: List[str]) -> List[PronunciationWord]:
        """Add several words, skipping ones already in the bank."""
        added = []
        for text in texts:
            try:
                added.append(self.add_word(user_id, text))
            except DuplicateWordError as e:
                logger.info(str(e))
        return added

    def update_word(self, word_id: int, **kwargs) -> Optional[PronunciationWord]:
        """Update a word's attributes."""
        word = self.get_word(word_id)
        if not word:
            return None

        for key, value in kwargs.items():
            if hasattr(word, key):
                setattr(word, key, value)

        with store_operation(self.db, f"update word {word_id}"):
            self.db.commit()
            self.db.refresh(word)
        return word

    def persist_outcome(self, word_id: int, update: OutcomeUpdate) -> PronunciationWord:
        """Write the fields changed by a practice outcome."""
        previous = self.get_word(word_id)
        if previous is None:
            raise WordNotFoundError(word_id)
        previous_stage = normalize_stage(previous.stage)

        word = self.update_word(word_id, **update.as_dict())
        if word is None:
            raise WordNotFoundError(word_id)

        monitoring.answers_recorded.labels(
            result="correct" if update.correct_streak > 0 else "incorrect"
        ).inc()
        if update.stage is not previous_stage:
            monitoring.stage_promotions.labels(stage=update.stage.value).inc()
            logger.info(f"'{word.word}' promoted from {previous_stage.value} to {update.stage.value}")
        return word

    def delete_word(self, word_id: int) -> bool:
        """Delete a word from the bank."""
        word = self.get_word(word_id)
        if not word:
            return False

        with store_operation(self.db, f"delete word {word_id}"):
            self.db.delete(word)
            self.db.commit()
        monitoring.words_deleted.inc()
        return True

    def toggle_priority(self, word_id: int) -> PronunciationWord:
        """Flip the priority flag of a word."""
        word = self.get_word(word_id)
        if word is None:
            raise WordNotFoundError(word_id)
        return self.update_word(word_id, priority=not word.priority)

    def update_notes(self, word_id: int, notes: str) -> PronunciationWord:
        """Replace the free-text notes of a word."""
        word = self.update_word(word_id, notes=notes)
        if word is None:
            raise WordNotFoundError(word_id)
        return word

    def refresh_pronunciation(self, word_id: int) -> PronunciationWord:
        """Regenerate phonetic, stress pattern, readable form and audio for a word."""
        word = self.get_word(word_id)
        if word is None:
            raise WordNotFoundError(word_id)

        data = self.pronunciation.generate_pronunciation_data(word.word)
        logger.info(f"Refreshed pronunciation for '{word.word}': {data.phonetic}")
        return self.update_word(
            word_id,
            phonetic=data.phonetic,
            stress_pattern=data.stress_pattern,
            readable_form=data.readable_form,
            audio_reference=data.audio_reference,
        )

    def refresh_all(self, user_id: str, placeholders_only: bool = False) -> Tuple[int, int]:
        """Refresh pronunciation data for a user's words.

        Args:
            user_id: Owner of the words.
            placeholders_only: Only refresh words whose phonetic is a placeholder.

        Returns:
            Number of words refreshed and number of words attempted.
        """
        words = self.get_user_words(user_id)
        if placeholders_only:
            words = [w for w in words if needs_pronunciation_refresh(w)]

        refreshed = 0
        for word in words:
            try:
                self.refresh_pronunciation(word.id)
                refreshed += 1
            except Exception as e:
                logger.error(f"Failed to refresh '{word.word}': {e}")
        logger.info(f"Refreshed {refreshed}/{len(words)} words for user {user_id}")
        return refreshed, len(words)

    def fetch_missing_audio(self, user_id: str) -> Tuple[int, int]:
        """Fill in audio for words that have none.

        Returns:
            Number of words that got audio and number of words without audio.
        """
        missing = [w for w in self.get_user_words(user_id) if not w.audio_reference]
        fetched = 0
        for word in missing:
            try:
                audio = self.pronunciation.resolve_audio(word.word)
                if audio:
                    self.update_word(word.id, audio_reference=audio)
                    fetched += 1
            except Exception as e:
                logger.error(f"Failed to fetch audio for '{word.word}': {e}")
        logger.info(f"Fetched audio for {fetched}/{len(missing)} words for user {user_id}")
        return fetched, len(missing)

    def get_stats(self, user_id: str) -> Dict[str, int]:
        """Number of words in each stage."""
        with store_operation(self.db, f"count words for user {user_id}"):
            rows = (
                self.db.query(PronunciationWord.stage, func.count(PronunciationWord.id))
                .filter(PronunciationWord.user_id == user_id)
                .group_by(PronunciationWord.stage)
                .all()
            )
        stats = {stage.value: 0 for stage in WordStage}
        for stage, count in rows:
            stats[normalize_stage(stage).value] += count
        return stats

    def get_eligible_count(self, user_id: str) -> int:
        """Number of words still in daily rotation (not graduated)."""
        with store_operation(self.db, f"count eligible words for user {user_id}"):
            return (
                self.db.query(PronunciationWord)
                .filter(
                    PronunciationWord.user_id == user_id,
                    PronunciationWord.correct_streak < settings.practice.graduation_streak,
                )
                .count()
            )
