"""pronbank CLI: manage a pronunciation bank and run daily practice sessions."""
import logging
from contextlib import contextmanager
from typing import Annotated, Iterator, List, Optional

import typer

from pronbank.errors import DuplicateWordError, StoreError
from pronbank.models.base import SessionLocal, init_db
from pronbank.models.models import PronunciationWord, User
from pronbank.models.practice_models import UserAction
from pronbank.monitoring import start_metrics_server
from pronbank.services.learning_service import LearningService
from pronbank.services.user_service import user_id_from_name

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="pronbank: practice word pronunciations with spaced repetition.",
    no_args_is_help=True,
)

PRACTICE_KEYS = {
    "y": UserAction.ANSWER_YES,
    "n": UserAction.ANSWER_NO,
    "s": UserAction.SKIP,
    "q": UserAction.EXIT,
}


@contextmanager
def learning_service() -> Iterator[LearningService]:
    db = SessionLocal()
    try:
        yield LearningService(db)
    finally:
        db.close()


def _require_user(service: LearningService, name: str) -> User:
    user = service.user_service.get_user(user_id_from_name(name))
    if user is None:
        typer.echo(f"Unknown user '{name}'. Add a word first to create them.", err=True)
        raise typer.Exit(code=1)
    return user


def _require_word(service: LearningService, user: User, text: str) -> PronunciationWord:
    word = service.word_service.find_user_word(user.id, text)
    if word is None:
        typer.echo(f"'{text}' is not in {user.name}'s list.", err=True)
        raise typer.Exit(code=1)
    return word


@app.callback()
def main_callback(
    metrics_port: Annotated[
        Optional[int], typer.Option(help="Expose prometheus metrics on this port.")
    ] = None,
):
    """Global settings for pronbank."""
    init_db()
    if metrics_port:
        start_metrics_server(metrics_port)
        logger.info(f"Metrics server started on port {metrics_port}")


@app.command()
def users():
    """List all users."""
    with learning_service() as service:
        for user in service.user_service.get_all_users():
            typer.echo(f"{user.id}\t{user.name}\tsessions: {user.session_count}")


@app.command()
def add(
    user: Annotated[str, typer.Argument(help="User name; created if new.")],
    words: Annotated[List[str], typer.Argument(help="Words to add.")],
):
    """Add words to a user's pronunciation bank."""
    with learning_service() as service:
        owner = service.user_service.get_or_create_user(user)
        for text in words:
            try:
                record = service.word_service.add_word(owner.id, text)
            except DuplicateWordError as e:
                typer.echo(str(e))
                continue
            typer.echo(f"Added {record.word}  {record.phonetic}  {record.readable_form}")


@app.command("words")
def list_words(user: Annotated[str, typer.Argument(help="User name.")]):
    """Show a user's words and their progress."""
    with learning_service() as service:
        owner = _require_user(service, user)
        for word in service.word_service.get_user_words(owner.id):
            star = "*" if word.priority else " "
            typer.echo(
                f"{star} {word.word:<20} {word.stage:<10} streak {word.correct_streak} "
                f"errors {word.total_errors} next {word.next_review_date}"
            )


@app.command()
def stats(user: Annotated[str, typer.Argument(help="User name.")]):
    """Show how many words are in each stage."""
    with learning_service() as service:
        owner = _require_user(service, user)
        for stage, count in service.word_service.get_stats(owner.id).items():
            typer.echo(f"{stage}: {count}")
        typer.echo(f"eligible for practice: {service.word_service.get_eligible_count(owner.id)}")
        typer.echo(f"next session: #{service.get_session_number(owner.id)}")


@app.command()
def priority(
    user: Annotated[str, typer.Argument(help="User name.")],
    word: Annotated[str, typer.Argument(help="Word to star or unstar.")],
):
    """Toggle the priority flag of a word."""
    with learning_service() as service:
        owner = _require_user(service, user)
        record = service.word_service.toggle_priority(_require_word(service, owner, word).id)
        typer.echo(f"{record.word}: priority {'on' if record.priority else 'off'}")


@app.command()
def notes(
    user: Annotated[str, typer.Argument(help="User name.")],
    word: Annotated[str, typer.Argument(help="Word to annotate.")],
    text: Annotated[str, typer.Argument(help="New notes.")],
):
    """Replace the notes of a word."""
    with learning_service() as service:
        owner = _require_user(service, user)
        service.word_service.update_notes(_require_word(service, owner, word).id, text)
        typer.echo(f"Notes saved for {word}")


@app.command()
def delete(
    user: Annotated[str, typer.Argument(help="User name.")],
    word: Annotated[str, typer.Argument(help="Word to remove.")],
):
    """Remove a word from a user's bank."""
    with learning_service() as service:
        owner = _require_user(service, user)
        service.word_service.delete_word(_require_word(service, owner, word).id)
        typer.echo(f"Deleted {word}")


@app.command()
def refresh(
    user: Annotated[str, typer.Argument(help="User name.")],
    word: Annotated[Optional[str], typer.Argument(help="Single word to refresh.")] = None,
    all_words: Annotated[
        bool, typer.Option("--all", help="Refresh every word, not only placeholders.")
    ] = False,
):
    """Regenerate pronunciation data, by default only for placeholder words."""
    with learning_service() as service:
        owner = _require_user(service, user)
        if word is not None:
            record = service.word_service.refresh_pronunciation(_require_word(service, owner, word).id)
            typer.echo(f"Refreshed {record.word}  {record.phonetic}  {record.readable_form}")
            return
        refreshed, total = service.word_service.refresh_all(owner.id, placeholders_only=not all_words)
        if total == 0:
            typer.echo("No words need refreshing.")
            return
        typer.echo(f"Refreshed {refreshed}/{total} words.")


@app.command("fetch-audio")
def fetch_audio(user: Annotated[str, typer.Argument(help="User name.")]):
    """Fetch audio for words that have none."""
    with learning_service() as service:
        owner = _require_user(service, user)
        fetched, total = service.word_service.fetch_missing_audio(owner.id)
        if total == 0:
            typer.echo("All words already have audio!")
            return
        typer.echo(f"Fetched audio for {fetched}/{total} words.")


@app.command()
def practice(
    user: Annotated[str, typer.Argument(help="User name.")],
    delay: Annotated[
        Optional[float], typer.Option(help="Seconds to pause after each answer.")
    ] = None,
):
    """Run today's practice session."""
    with learning_service() as service:
        owner = _require_user(service, user)
        number = service.get_session_number(owner.id)
        session = service.start_session(owner.id, answer_delay=delay)
        if session is None:
            typer.echo("All words have graduated! Add more words or wait for retention checks.")
            return

        typer.echo(f"Practice session #{number}: {session.total} words")
        while (word := session.current()) is not None:
            typer.echo(f"\n[{session.index + 1}/{session.total}] {word.word}  {word.phonetic}  {word.readable_form}")
            audio = session.audio_for_current()
            typer.echo(f"audio: {audio or 'speech synthesis'}")
            action = PRACTICE_KEYS.get(typer.prompt("[y]es / [n]o / [s]kip / [q]uit").strip().lower())
            if action is None:
                typer.echo("Please answer y, n, s or q.")
                continue
            if action is UserAction.EXIT:
                session.exit()
                typer.echo("Session ended. Your answered words have already been saved.")
                break
            if action is UserAction.SKIP:
                session.skip()
                continue
            try:
                session.answer(action is UserAction.ANSWER_YES)
            except StoreError as e:
                typer.echo(f"Could not save your answer ({e}). Try again or skip.", err=True)

        if session.completion_failed:
            try:
                session.retry_completion()
            except StoreError as e:
                typer.echo(f"Your answers are saved, but this session could not be counted ({e}).", err=True)

        summary = session.summary()
        typer.echo(
            f"\nCorrect: {summary.correct}  Incorrect: {summary.incorrect}  "
            f"Skipped: {summary.skipped}  Accuracy: {summary.accuracy_percent}%"
        )
        for result in summary.log:
            typer.echo(f"  {result.word}: {'correct' if result.is_correct else 'incorrect'}")
