"""Service for the words each learner is tracking."""
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from wordrecall.errors import NotFoundError, ValidationError
from wordrecall.models.models import UserWord, Word
from wordrecall.models.review_models import MemoryState, WordStatus
from wordrecall.services.spaced_repetition import SpacedRepetition

logger = logging.getLogger(__name__)


class UserWordService:
    """Service for managing learner word records."""

    def __init__(self, db: Session, scheduler: Optional[SpacedRepetition] = None):
        """Initialize the service with a database session."""
        self.db = db
        self.scheduler = scheduler or SpacedRepetition()

    def get_user_word(self, user_word_id: int) -> Optional[UserWord]:
        return self.db.query(UserWord).filter(UserWord.id == user_word_id).first()

    def get_user_word_or_raise(self, user_word_id: int) -> UserWord:
        user_word = self.get_user_word(user_word_id)
        if user_word is None:
            raise NotFoundError("UserWord", user_word_id)
        return user_word

    def get_user_words(
        self,
        learner_id: str,
        status: Optional[WordStatus] = None,
    ) -> List[UserWord]:
        """Learner words, newest first, optionally filtered by status."""
        query = (
            self.db.query(UserWord)
            .options(joinedload(UserWord.word))
            .filter(UserWord.learner_id == learner_id)
        )
        if status is not None:
            query = query.filter(UserWord.status == WordStatus(status).value)
        return query.order_by(UserWord.created_at.desc(), UserWord.id.desc()).all()

    def get_tracked_words(self, learner_id: str) -> List[Tuple[UserWord, Word]]:
        """Every tracked word of a learner paired with its word."""
        return [(user_word, user_word.word) for user_word in self.get_user_words(learner_id)]

    def add_word(self, learner_id: str, word_id: int, now: Optional[datetime] = None) -> UserWord:
        """Start tracking a word; returns the existing record if already tracked."""
        if not learner_id:
            raise ValidationError("learner_id is required")
        if self.db.query(Word.id).filter(Word.id == word_id).first() is None:
            raise NotFoundError("Word", word_id)

        existing = (
            self.db.query(UserWord)
            .filter(UserWord.learner_id == learner_id, UserWord.word_id == word_id)
            .first()
        )
        if existing:
            return existing

        user_word = UserWord(learner_id=learner_id, word_id=word_id)
        user_word.apply_state(self.scheduler.initial_state(now))
        self.db.add(user_word)
        self.db.commit()
        self.db.refresh(user_word)
        logger.info(f"Learner {learner_id} started tracking word {word_id}")
        return user_word

    def save_state(self, user_word: UserWord, state: MemoryState) -> UserWord:
        """Persist a scheduled state onto its record."""
        user_word.apply_state(state)
        self.db.commit()
        self.db.refresh(user_word)
        return user_word

    def delete_user_word(self, user_word_id: int) -> None:
        """Stop tracking a word."""
        user_word = self.get_user_word_or_raise(user_word_id)
        self.db.delete(user_word)
        self.db.commit()
        logger.info(f"Learner {user_word.learner_id} removed word {user_word.word_id}")

    def get_user_word_count(self, learner_id: str, status: Optional[WordStatus] = None) -> int:
        query = self.db.query(UserWord).filter(UserWord.learner_id == learner_id)
        if status is not None:
            query = query.filter(UserWord.status == WordStatus(status).value)
        return query.count()
