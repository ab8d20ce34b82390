"""Database models for the pronunciation bank."""
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from pronbank.models.base import Base, TimestampMixin
from pronbank.models.practice_models import WordStage


class User(Base, TimestampMixin):
    """User model."""

    __tablename__ = "users"

    id = Column(String, primary_key=True)  # slug, e.g. "tommy" or "default-user"
    name = Column(String, nullable=False)
    session_count = Column(Integer, default=0, nullable=False)

    # Relationships
    words = relationship("PronunciationWord", back_populates="user", cascade="all, delete-orphan")
    logs = relationship("UserLog", back_populates="user", cascade="all, delete-orphan")


class PronunciationWord(Base, TimestampMixin):
    """One word in a user's pronunciation bank, with its practice progress."""

    __tablename__ = "pronunciation_words"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    word = Column(String, nullable=False)
    phonetic = Column(String, default="")
    stress_pattern = Column(String, default="")
    readable_form = Column(String, default="")
    audio_reference = Column(String, default="")  # empty means on-device speech synthesis
    stage = Column(String, default=WordStage.LEARNING.value, nullable=False)
    practice_count = Column(Integer, default=0, nullable=False)
    correct_streak = Column(Integer, default=0, nullable=False)
    total_errors = Column(Integer, default=0, nullable=False)
    priority = Column(Boolean, default=False, nullable=False)
    next_review_date = Column(Date)
    last_practiced_date = Column(Date, nullable=True)
    notes = Column(Text, default="")

    # Relationships
    user = relationship("User", back_populates="words")

    def __repr__(self) -> str:
        return f"<PronunciationWord {self.id} {self.word!r} {self.stage}>"


class UserLog(Base, TimestampMixin):
    """User activity log model."""

    __tablename__ = "user_logs"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    message = Column(String, nullable=False)
    level = Column(String, nullable=False)  # INFO, WARNING, ERROR
    category = Column(String, nullable=False)  # e.g., "practice", "words"

    # Relationships
    user = relationship("User", back_populates="logs")
