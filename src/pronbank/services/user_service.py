"""User service for managing users and their practice session counters."""
import logging
import re
from typing import List, Optional

from sqlalchemy.orm import Session

from pronbank.errors import UserNotFoundError
from pronbank.models.base import store_operation
from pronbank.models.models import User, UserLog

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_USER_ID = "default-user"


def user_id_from_name(name: str) -> str:
    """Slug used as a user id: "Tommy Lee" -> "tommy-lee"."""
    return re.sub(r"\s+", "-", name.strip().lower())


def display_name_from_id(raw: str) -> str:
    """Human name for a user id or raw name: "tommy_lee" -> "Tommy Lee"."""
    parts = [p for p in re.split(r"[-_\s]+", raw.strip()) if p]
    return " ".join(p[:1].upper() + p[1:].lower() for p in parts)


class UserService:
    """Service for managing users and their session counters."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def get_user(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        with store_operation(self.db, f"load user {user_id}"):
            return self.db.get(User, user_id)

    def get_all_users(self) -> List[User]:
        """All users, oldest first."""
        with store_operation(self.db, "load users"):
            return self.db.query(User).order_by(User.created_at.asc()).all()

    def create_user(self, user_id: str, name: str) -> User:
        """Create a new user with a zero session counter."""
        user = User(id=user_id, name=name, session_count=0)
        with store_operation(self.db, f"create user {user_id}"):
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)

        self.log_user_activity(user.id, "User created", "INFO", "user_created")
        logger.info(f"Created user {user_id} ({name})")
        return user

    def get_or_create_user(self, raw_name: Optional[str] = None) -> User:
        """Get existing user or create a new one.

        The raw name is slugified into the id; without one the default user is used.
        """
        if raw_name and raw_name.strip():
            user_id = user_id_from_name(raw_name)
            name = display_name_from_id(raw_name)
        else:
            user_id = DEFAULT_USER_ID
            name = "Default User"

        user = self.get_user(user_id)
        if not user:
            user = self.create_user(user_id, name)
        return user

    def get_session_counter(self, user_id: str) -> int:
        """Number of practice sessions the user has completed."""
        user = self.get_user(user_id)
        if not user:
            raise UserNotFoundError(user_id)
        return max(user.session_count or 0, 0)

    def increment_session_counter(self, user_id: str) -> int:
        """Count one more completed session and return the new total."""
        user = self.get_user(user_id)
        if not user:
            raise UserNotFoundError(user_id)

        with store_operation(self.db, f"increment session counter for user {user_id}"):
            user.session_count = max(user.session_count or 0, 0) + 1
            self.db.commit()
            self.db.refresh(user)
        logger.info(f"User {user_id} completed session {user.session_count}")
        return user.session_count

    def log_user_activity(
        self, user_id: str, message: str, level: str, category: str
    ) -> None:
        """Log user activity."""
        log = UserLog(
            user_id=user_id,
            message=message,
            level=level,
            category=category,
        )
        with store_operation(self.db, f"log activity for user {user_id}"):
            self.db.add(log)
            self.db.commit()
