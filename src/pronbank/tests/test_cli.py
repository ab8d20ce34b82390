"""Tests for the pronbank command line interface."""
import pytest
from typer.testing import CliRunner

from pronbank.cli import app
from pronbank.errors import StoreError
from pronbank.services.pronunciation_service import PronunciationData

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_db(db, pronunciation, mocker):
    """Run commands against the test session without network access."""
    mocker.patch("pronbank.cli.SessionLocal", lambda: db)
    mocker.patch("pronbank.services.word_service.PronunciationGenerator", return_value=pronunciation)
    return db


def test_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "practice" in result.output
    assert "add" in result.output


def test_add_and_list_words():
    result = runner.invoke(app, ["add", "Tommy", "tomato", "potato"])
    assert result.exit_code == 0
    assert "Added tomato  /tomato/  TOMATO" in result.output

    result = runner.invoke(app, ["words", "tommy"])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert "tomato" in lines[0]
    assert "potato" in lines[1]
    assert "learning" in lines[0]


def test_add_duplicate_word():
    runner.invoke(app, ["add", "Tommy", "tomato"])
    result = runner.invoke(app, ["add", "Tommy", "Tomato"])
    assert result.exit_code == 0
    assert "'Tomato' is already in your list" in result.output


def test_users():
    runner.invoke(app, ["add", "Tommy Lee", "tomato"])
    result = runner.invoke(app, ["users"])
    assert "tommy-lee\tTommy Lee\tsessions: 0" in result.output


def test_unknown_user_exits_with_error():
    result = runner.invoke(app, ["words", "nobody"])
    assert result.exit_code == 1
    assert "Unknown user 'nobody'" in result.output


def test_unknown_word_exits_with_error():
    runner.invoke(app, ["add", "Tommy", "tomato"])
    result = runner.invoke(app, ["priority", "tommy", "potato"])
    assert result.exit_code == 1
    assert "'potato' is not in Tommy's list" in result.output


def test_priority_notes_and_delete():
    runner.invoke(app, ["add", "Tommy", "tomato", "potato"])

    result = runner.invoke(app, ["priority", "tommy", "TOMATO"])
    assert "tomato: priority on" in result.output

    result = runner.invoke(app, ["notes", "tommy", "tomato", "stress on the second syllable"])
    assert result.exit_code == 0

    result = runner.invoke(app, ["delete", "tommy", "potato"])
    assert "Deleted potato" in result.output

    result = runner.invoke(app, ["words", "tommy"])
    assert result.output.startswith("* tomato")
    assert "potato" not in result.output


def test_stats():
    runner.invoke(app, ["add", "Tommy", "tomato", "potato"])
    result = runner.invoke(app, ["stats", "tommy"])
    assert "learning: 2" in result.output
    assert "reviewing: 0" in result.output
    assert "eligible for practice: 2" in result.output
    assert "next session: #1" in result.output


def test_practice_session():
    runner.invoke(app, ["add", "Tommy", "tomato", "potato"])

    result = runner.invoke(app, ["practice", "tommy", "--delay", "0"], input="y\nn\n")

    assert result.exit_code == 0
    assert "Practice session #1: 2 words" in result.output
    assert "[1/2] tomato" in result.output
    assert "audio: speech synthesis" in result.output
    assert "Correct: 1  Incorrect: 1  Skipped: 0  Accuracy: 50%" in result.output
    assert "tomato: correct" in result.output
    assert "potato: incorrect" in result.output

    result = runner.invoke(app, ["stats", "tommy"])
    assert "next session: #2" in result.output


def test_practice_reprompts_on_unknown_key():
    runner.invoke(app, ["add", "Tommy", "tomato"])

    result = runner.invoke(app, ["practice", "tommy"], input="x\ns\n")

    assert "Please answer y, n, s or q." in result.output
    assert "Skipped: 1" in result.output


def test_practice_quit_keeps_answers():
    runner.invoke(app, ["add", "Tommy", "tomato", "potato"])

    result = runner.invoke(app, ["practice", "tommy"], input="y\nq\n")

    assert "Session ended. Your answered words have already been saved." in result.output
    assert "Correct: 1  Incorrect: 0  Skipped: 1" in result.output

    result = runner.invoke(app, ["words", "tommy"])
    assert "streak 1" in result.output.splitlines()[0]

    result = runner.invoke(app, ["stats", "tommy"])
    assert "next session: #1" in result.output


def test_practice_with_nothing_eligible(user_service):
    user_service.get_or_create_user("Tommy")

    result = runner.invoke(app, ["practice", "tommy"])

    assert result.exit_code == 0
    assert "All words have graduated!" in result.output


def test_practice_reports_uncounted_session(mocker):
    runner.invoke(app, ["add", "Tommy", "tomato"])
    mocker.patch(
        "pronbank.services.user_service.UserService.increment_session_counter",
        side_effect=StoreError("Could not increment session counter for user tommy"),
    )

    result = runner.invoke(app, ["practice", "tommy"], input="y\n")

    assert result.exit_code == 0
    assert "Could not save your answer" not in result.output
    assert "Your answers are saved, but this session could not be counted" in result.output
    assert "Correct: 1  Incorrect: 0" in result.output


def test_practice_retries_session_count(mocker):
    runner.invoke(app, ["add", "Tommy", "tomato"])
    increment = mocker.patch(
        "pronbank.services.user_service.UserService.increment_session_counter",
        side_effect=[StoreError("database is locked"), 1],
    )

    result = runner.invoke(app, ["practice", "tommy"], input="s\n")

    assert result.exit_code == 0
    assert increment.call_count == 2
    assert "could not be counted" not in result.output


def test_refresh_placeholders(pronunciation):
    runner.invoke(app, ["add", "Tommy", "tomato", "potato"])
    pronunciation.generate_pronunciation_data.side_effect = lambda word: PronunciationData(
        f"/ˈ{word}/", word.upper(), word.upper(), ""
    )

    result = runner.invoke(app, ["refresh", "tommy"])
    assert result.exit_code == 0
    assert "Refreshed 2/2 words." in result.output

    result = runner.invoke(app, ["refresh", "tommy"])
    assert "No words need refreshing." in result.output


def test_refresh_single_word(pronunciation):
    runner.invoke(app, ["add", "Tommy", "tomato"])
    pronunciation.generate_pronunciation_data.side_effect = lambda word: PronunciationData(
        "/təˈmeɪtoʊ/", "tuh-MAY-toh", "tuh-MAY-toh", ""
    )

    result = runner.invoke(app, ["refresh", "tommy", "tomato"])

    assert "Refreshed tomato  /təˈmeɪtoʊ/  tuh-MAY-toh" in result.output


def test_fetch_audio(pronunciation):
    runner.invoke(app, ["add", "Tommy", "tomato", "potato"])
    pronunciation.resolve_audio.side_effect = lambda word: f"{word}.mp3"

    result = runner.invoke(app, ["fetch-audio", "tommy"])
    assert "Fetched audio for 2/2 words." in result.output

    result = runner.invoke(app, ["fetch-audio", "tommy"])
    assert "All words already have audio!" in result.output
