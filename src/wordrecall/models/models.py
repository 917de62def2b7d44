"""Database models for wordrecall."""
from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from wordrecall.config import settings
from wordrecall.models.base import Base, TimestampMixin, as_utc
from wordrecall.models.review_models import MemoryState, WordStatus


class Word(Base, TimestampMixin):
    """Vocabulary entry in the shared word bank."""

    __tablename__ = "words"

    id = Column(Integer, primary_key=True)
    text = Column(String, unique=True, nullable=False, index=True)
    level = Column(String(2), nullable=False, index=True)  # A1 .. C2
    difficulty = Column(Integer, default=1)  # 1-5
    definition = Column(Text, nullable=False)
    phonetic = Column(String)
    audio_url = Column(String)
    image_url = Column(String)
    example_sentence = Column(Text)
    meanings = Column(JSON, default=list)
    synonyms = Column(JSON, default=list)

    # Relationships
    user_words = relationship(
        "UserWord", back_populates="word", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Word {self.id} {self.text!r} {self.level}>"


class UserWord(Base, TimestampMixin):
    """Per-learner review state of a word."""

    __tablename__ = "user_words"
    __table_args__ = (UniqueConstraint("learner_id", "word_id", name="uq_learner_word"),)

    id = Column(Integer, primary_key=True)
    learner_id = Column(String, nullable=False, index=True)
    word_id = Column(Integer, ForeignKey("words.id", ondelete="CASCADE"), nullable=False)
    status = Column(String, default=WordStatus.NEW.value, nullable=False)
    ease_factor = Column(Float, default=lambda: settings.scheduler.initial_ease_factor, nullable=False)
    interval = Column(Integer, default=0, nullable=False)  # days
    repetition_count = Column(Integer, default=0, nullable=False)
    total_review_count = Column(Integer, default=0, nullable=False)
    correct_count = Column(Integer, default=0, nullable=False)
    incorrect_count = Column(Integer, default=0, nullable=False)
    next_review_date = Column(DateTime(timezone=True), nullable=True, index=True)
    version = Column(Integer, nullable=False)

    # Concurrent updates of the same row fail with StaleDataError
    __mapper_args__ = {"version_id_col": version}

    # Relationships
    word = relationship("Word", back_populates="user_words")

    def to_state(self) -> MemoryState:
        """Snapshot the scheduling fields."""
        return MemoryState(
            status=WordStatus(self.status or WordStatus.NEW.value),
            ease_factor=(
                self.ease_factor
                if self.ease_factor is not None
                else settings.scheduler.initial_ease_factor
            ),
            interval=self.interval or 0,
            repetition_count=self.repetition_count or 0,
            total_review_count=self.total_review_count or 0,
            correct_count=self.correct_count or 0,
            incorrect_count=self.incorrect_count or 0,
            next_review_date=as_utc(self.next_review_date),
        )

    def apply_state(self, state: MemoryState) -> None:
        """Copy a scheduled state onto this record."""
        self.status = state.status.value
        self.ease_factor = state.ease_factor
        self.interval = state.interval
        self.repetition_count = state.repetition_count
        self.total_review_count = state.total_review_count
        self.correct_count = state.correct_count
        self.incorrect_count = state.incorrect_count
        self.next_review_date = state.next_review_date

    def __repr__(self) -> str:
        return f"<UserWord {self.id} learner={self.learner_id!r} word={self.word_id} {self.status}>"


class UserProgress(Base, TimestampMixin):
    """Aggregated progress of one learner."""

    __tablename__ = "user_progress"

    id = Column(Integer, primary_key=True)
    learner_id = Column(String, unique=True, nullable=False)
    total_words = Column(Integer, default=0, nullable=False)
    mastered_words = Column(Integer, default=0, nullable=False)
    current_streak = Column(Integer, default=0, nullable=False)
    longest_streak = Column(Integer, default=0, nullable=False)
    last_activity_date = Column(Date, nullable=True)
    accuracy_percentage = Column(Float, default=0.0, nullable=False)
    total_quizzes = Column(Integer, default=0, nullable=False)
    total_reviews = Column(Integer, default=0, nullable=False)
    level_progress = Column(JSON, default=dict)


class EnrichmentCache(Base, TimestampMixin):
    """Cached dictionary and image provider responses."""

    __tablename__ = "enrichment_cache"

    id = Column(Integer, primary_key=True)
    key = Column(String, unique=True, nullable=False)
    payload = Column(JSON, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
