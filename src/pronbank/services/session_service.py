"""Practice session runner."""
import logging
import time
from datetime import date
from typing import Any, Callable, List, Optional, Sequence

from pronbank.config import settings
from pronbank.errors import PronbankError, SessionStateError
from pronbank.models.practice_models import OutcomeUpdate, PracticeResult, SessionState, SessionSummary
from pronbank.services.progression import apply_outcome
from pronbank.services.pronunciation_service import SPEECH_SYNTHESIS, AudioResolver

logger = logging.getLogger(__name__)

PersistOutcome = Callable[[Any, OutcomeUpdate], Any]


class PracticeSession:
    """Walks the user through a practice set one word at a time.

    Each answer is graded and persisted as soon as it is given, so leaving
    early never loses completed answers. Skipped and unreached words are
    left untouched.
    """

    def __init__(
        self,
        persist_outcome: PersistOutcome,
        resolve_audio: Optional[AudioResolver] = None,
        on_complete: Optional[Callable[[], Any]] = None,
        answer_delay: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        today: Callable[[], date] = date.today,
    ):
        """Initialize the session.

        Args:
            persist_outcome: Writes an outcome for a word id and returns the updated record.
            resolve_audio: Produces playable audio for a word.
            on_complete: Called once when the last word is answered or skipped.
            answer_delay: Seconds to pause after an answer before moving on.
        """
        self.persist_outcome = persist_outcome
        self.resolve_audio = resolve_audio
        self.on_complete = on_complete
        self.answer_delay = settings.practice.answer_delay_seconds if answer_delay is None else answer_delay
        self._sleep = sleep
        self._today = today
        self._words: List[Any] = []
        self._index = 0
        self._results: List[PracticeResult] = []
        self.state = SessionState.NOT_STARTED
        self.completion_failed = False

    @property
    def index(self) -> int:
        return self._index

    @property
    def total(self) -> int:
        return len(self._words)

    @property
    def results(self) -> List[PracticeResult]:
        return list(self._results)

    def start(self, words: Sequence[Any]) -> None:
        """Begin presenting the given words in order."""
        if self.state is not SessionState.NOT_STARTED:
            raise SessionStateError(f"Session already {self.state.value}")
        if not words:
            raise SessionStateError("Nothing to practice")
        self._words = list(words)
        self._index = 0
        self.state = SessionState.PRESENTING
        logger.info(f"Practice session started with {len(self._words)} words")

    def current(self) -> Optional[Any]:
        """The word being presented, or None outside of a running session."""
        if self.state is not SessionState.PRESENTING:
            return None
        return self._words[self._index]

    def is_complete(self) -> bool:
        return self.state is SessionState.COMPLETE

    def answer(self, is_correct: bool) -> PracticeResult:
        """Grade the current word, persist it and move on.

        If persisting fails the error propagates and the session stays on
        the same word, so the caller can retry or skip.
        """
        record = self._require_current()
        update = apply_outcome(record, is_correct, self._today())
        try:
            updated = self.persist_outcome(record.id, update)
        except Exception:
            logger.error(f"Could not save answer for word {record.id}, staying on it")
            raise
        if updated is not None:
            self._words[self._index] = updated

        result = PracticeResult(word_id=record.id, word=record.word, is_correct=is_correct)
        self._results.append(result)
        logger.debug(f"Answered {record.word!r}: {'correct' if is_correct else 'incorrect'}")

        if self.answer_delay > 0:
            self._sleep(self.answer_delay)
        self._advance()
        return result

    def skip(self) -> None:
        """Move past the current word without recording anything."""
        record = self._require_current()
        logger.debug(f"Skipped {record.word!r}")
        self._advance()

    def exit(self) -> None:
        """Stop the session. Answers already given stay saved."""
        if self.state in (SessionState.COMPLETE, SessionState.EXITED):
            raise SessionStateError(f"Session already {self.state.value}")
        self.state = SessionState.EXITED
        logger.info(f"Practice session exited after {len(self._results)} answers")

    def summary(self) -> SessionSummary:
        correct = sum(1 for r in self._results if r.is_correct)
        answered = len(self._results)
        return SessionSummary(
            correct=correct,
            incorrect=answered - correct,
            skipped=len(self._words) - answered,
            accuracy=correct / answered if answered else 0.0,
            log=self.results,
        )

    def audio_for_current(self) -> Optional[str]:
        """Playable audio for the current word.

        Falls back to the on-device speech synthesis marker when no audio
        can be produced; audio problems never interrupt the session.
        """
        record = self.current()
        if record is None:
            return None
        if record.audio_reference:
            return record.audio_reference
        if self.resolve_audio is None:
            return SPEECH_SYNTHESIS
        try:
            return self.resolve_audio(record.word) or SPEECH_SYNTHESIS
        except Exception as e:
            logger.warning(f"Audio unavailable for {record.word!r}: {e}")
            return SPEECH_SYNTHESIS

    def _require_current(self) -> Any:
        if self.state is not SessionState.PRESENTING:
            raise SessionStateError(f"No word is being presented (session {self.state.value})")
        return self._words[self._index]

    def _advance(self) -> None:
        if self._index < len(self._words) - 1:
            self._index += 1
            return
        self.state = SessionState.COMPLETE
        summary = self.summary()
        logger.info(f"Practice session complete: {summary.correct} correct, "
                    f"{summary.incorrect} incorrect, {summary.skipped} skipped")
        self._run_on_complete()

    def retry_completion(self) -> None:
        """Run the completion hook again after it failed.

        Errors propagate; the flag stays set until the hook succeeds.
        """
        if not self.completion_failed:
            raise SessionStateError("Session completion did not fail")
        self.on_complete()
        self.completion_failed = False

    def _run_on_complete(self) -> None:
        if self.on_complete is None:
            return
        # the last answer is already saved
        try:
            self.on_complete()
        except PronbankError as e:
            logger.error(f"Could not finish practice session: {e}")
            self.completion_failed = True
