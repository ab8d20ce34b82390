"""Exceptions raised by the pronunciation bank services."""


class PronbankError(Exception):
    """Base class for pronunciation bank errors."""


class StoreError(PronbankError):
    """A read or write against the word store failed."""


class WordNotFoundError(PronbankError, ValueError):
    """No word record with the given id."""

    def __init__(self, word_id: int):
        super().__init__(f"Word {word_id} not found")
        self.word_id = word_id


class UserNotFoundError(PronbankError, ValueError):
    """No user with the given id."""

    def __init__(self, user_id: str):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class DuplicateWordError(PronbankError, ValueError):
    """The word is already in the user's bank."""

    def __init__(self, word: str):
        super().__init__(f"'{word}' is already in your list")
        self.word = word


class SessionStateError(PronbankError, ValueError):
    """A practice session operation was called in the wrong state."""
