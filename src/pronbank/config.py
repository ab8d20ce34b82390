"""Configuration settings for the pronunciation bank."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))
MEDIA_DIR = DATA_DIR / "media"
PRONUNCIATIONS_DIR = MEDIA_DIR / "pronunciations"

# Practice selection defaults
DAILY_PRACTICE_SIZE = 15
NEW_WORDS_COUNT = 7
STRUGGLING_WORDS_COUNT = 5
REVIEW_WORDS_COUNT = 3
GRADUATION_STREAK = 3
MASTERY_STREAK = 5
NEW_WORD_PRACTICE_LIMIT = 3  # words practiced fewer times than this count as new
RETENTION_CHECK_INTERVAL = 5  # every 5th session re-checks one graduated word


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        DATA_DIR,
        MEDIA_DIR,
        PRONUNCIATIONS_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


@dataclass
class PathSettings:
    """Path configuration settings."""
    base_dir: Path = BASE_DIR
    data_dir: Path = DATA_DIR
    media_dir: Path = MEDIA_DIR
    pronunciations_dir: Path = PRONUNCIATIONS_DIR


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///pronbank.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class PracticeSettings:
    """Daily practice selection and session settings."""
    daily_practice_size: int = int(os.getenv("DAILY_PRACTICE_SIZE", str(DAILY_PRACTICE_SIZE)))
    new_words_count: int = int(os.getenv("NEW_WORDS_COUNT", str(NEW_WORDS_COUNT)))
    struggling_words_count: int = int(os.getenv("STRUGGLING_WORDS_COUNT", str(STRUGGLING_WORDS_COUNT)))
    review_words_count: int = int(os.getenv("REVIEW_WORDS_COUNT", str(REVIEW_WORDS_COUNT)))
    graduation_streak: int = int(os.getenv("GRADUATION_STREAK", str(GRADUATION_STREAK)))
    mastery_streak: int = int(os.getenv("MASTERY_STREAK", str(MASTERY_STREAK)))
    new_word_practice_limit: int = int(os.getenv("NEW_WORD_PRACTICE_LIMIT", str(NEW_WORD_PRACTICE_LIMIT)))
    retention_check_interval: int = int(os.getenv("RETENTION_CHECK_INTERVAL", str(RETENTION_CHECK_INTERVAL)))
    answer_delay_seconds: float = float(os.getenv("ANSWER_DELAY_SECONDS", "0.8"))


@dataclass
class IntervalSettings:
    """Days until the next review, per stage."""
    learning: int = int(os.getenv("LEARNING_INTERVAL", "1"))
    reviewing_early: int = int(os.getenv("REVIEWING_INTERVAL_EARLY", "3"))
    reviewing_late: int = int(os.getenv("REVIEWING_INTERVAL_LATE", "7"))
    reviewing_threshold: int = int(os.getenv("REVIEWING_THRESHOLD", "3"))  # practice count
    mastered: int = int(os.getenv("MASTERED_INTERVAL", "14"))


@dataclass
class AudioSettings:
    """Audio generation settings."""
    language: str = os.getenv("AUDIO_LANGUAGE", "en")
    tld: str = os.getenv("AUDIO_TLD", "com")
    timeout: float = float(os.getenv("AUDIO_TIMEOUT", "5"))


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_practice_settings() -> PracticeSettings:
    """Get practice settings."""
    return PracticeSettings()


def get_interval_settings() -> IntervalSettings:
    """Get review interval settings."""
    return IntervalSettings()


def get_audio_settings() -> AudioSettings:
    """Get audio settings."""
    return AudioSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    practice: PracticeSettings = field(default_factory=get_practice_settings)
    intervals: IntervalSettings = field(default_factory=get_interval_settings)
    audio: AudioSettings = field(default_factory=get_audio_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        practice = self.practice
        if practice.daily_practice_size < 1:
            raise ValueError("DAILY_PRACTICE_SIZE must be positive")

        for name in ("new_words_count", "struggling_words_count", "review_words_count"):
            quota = getattr(practice, name)
            if quota < 0:
                raise ValueError(f"{name.upper()} cannot be negative")
            if quota > practice.daily_practice_size:
                raise ValueError(f"{name.upper()} cannot exceed DAILY_PRACTICE_SIZE")

        if practice.graduation_streak < 1:
            raise ValueError("GRADUATION_STREAK must be positive")

        if practice.mastery_streak < practice.graduation_streak:
            raise ValueError("MASTERY_STREAK cannot be lower than GRADUATION_STREAK")

        if practice.retention_check_interval < 1:
            raise ValueError("RETENTION_CHECK_INTERVAL must be positive")

        if practice.answer_delay_seconds < 0:
            raise ValueError("ANSWER_DELAY_SECONDS cannot be negative")

        intervals = self.intervals
        if min(intervals.learning, intervals.reviewing_early,
               intervals.reviewing_late, intervals.mastered) < 1:
            raise ValueError("Review intervals must be positive")


# Create global settings instance
settings = Settings()
settings.validate()
