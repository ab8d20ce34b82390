"""Test configuration."""
import os
import random
from datetime import UTC, date, datetime, timedelta
from pathlib import Path
from typing import Callable, Generator
from unittest.mock import Mock

import pytest
from dotenv import load_dotenv

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ANSWER_DELAY_SECONDS"] = "0"

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from faker import Faker
from sqlalchemy.orm import Session

from pronbank.config import ensure_directories
from pronbank.models.base import Base, SessionLocal, engine, init_db
from pronbank.models.models import PronunciationWord, User
from pronbank.services.learning_service import LearningService
from pronbank.services.pronunciation_service import PronunciationData, PronunciationGenerator
from pronbank.services.user_service import UserService
from pronbank.services.word_service import WordService

TODAY = date(2026, 1, 10)


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment and a fresh schema before each test."""
    ensure_directories()
    Base.metadata.drop_all(bind=engine)
    init_db()

    yield

    engine.dispose()


@pytest.fixture
def fake() -> Faker:
    return Faker()


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def pronunciation() -> Mock:
    """Pronunciation generator that never touches the network."""
    generator = Mock(spec=PronunciationGenerator)
    generator.generate_pronunciation_data.side_effect = lambda word: PronunciationData(
        phonetic=f"/{word}/",
        stress_pattern=word.upper(),
        readable_form=word.upper(),
        audio_reference="",
    )
    generator.resolve_audio.return_value = ""
    return generator


@pytest.fixture
def word_service(db: Session, pronunciation: Mock) -> WordService:
    return WordService(db, pronunciation=pronunciation)


@pytest.fixture
def user_service(db: Session) -> UserService:
    return UserService(db)


@pytest.fixture
def learning_service(db: Session, word_service: WordService, user_service: UserService) -> LearningService:
    return LearningService(db, word_service, user_service, rng=random.Random(7))


@pytest.fixture
def user(user_service: UserService, fake: Faker) -> User:
    """Create a test user."""
    return user_service.get_or_create_user(fake.first_name())


@pytest.fixture
def make_word(db: Session, user: User, fake: Faker) -> Callable[..., PronunciationWord]:
    """Insert word records directly, each one added a minute after the previous."""
    base_time = datetime(2025, 12, 1, tzinfo=UTC)
    counter = {"n": 0}

    def _make_word(**fields) -> PronunciationWord:
        counter["n"] += 1
        values = {
            "user_id": user.id,
            "word": f"{fake.word()}{counter['n']}",
            "stage": "learning",
            "practice_count": 0,
            "correct_streak": 0,
            "total_errors": 0,
            "priority": False,
            "next_review_date": TODAY,
            "last_practiced_date": None,
            "created_at": base_time + timedelta(minutes=counter["n"]),
        }
        values.update(fields)
        record = PronunciationWord(**values)
        db.add(record)
        db.commit()
        db.refresh(record)
        return record

    return _make_word
