"""Test configuration."""
import os
import tempfile
from datetime import UTC, datetime
from typing import Callable, Generator, Optional

import pytest
from faker import Faker

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="wordrecall-test-")
os.environ["PHONETIC_FALLBACK"] = "false"
os.environ["AUDIO_FALLBACK"] = "false"
os.environ["EXAMPLE_FALLBACK"] = "false"
os.environ["UNSPLASH_ACCESS_KEY"] = ""
os.environ["PEXELS_API_KEY"] = ""

# Import after environment setup
from sqlalchemy.orm import Session  # noqa: E402

from wordrecall.config import ensure_directories  # noqa: E402
from wordrecall.models.base import Base, SessionLocal, engine, init_db  # noqa: E402
from wordrecall.models.models import UserWord, Word  # noqa: E402

fake = Faker()

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment before each test."""
    ensure_directories()
    fake.unique.clear()
    yield


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    init_db()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_word(db: Session) -> Callable[..., Word]:
    """Factory for stored words."""
    def _make_word(
        text: Optional[str] = None,
        level: str = "A1",
        image_url: Optional[str] = None,
        **kwargs,
    ) -> Word:
        text = text or fake.unique.word().lower()
        word = Word(
            text=text,
            level=level,
            difficulty=kwargs.pop("difficulty", 1),
            definition=kwargs.pop("definition", fake.sentence()),
            image_url=image_url,
            **kwargs,
        )
        db.add(word)
        db.commit()
        db.refresh(word)
        return word
    return _make_word


@pytest.fixture
def make_user_word(db: Session) -> Callable[..., UserWord]:
    """Factory for stored learner words."""
    def _make_user_word(word: Word, learner_id: str = "learner-1", **kwargs) -> UserWord:
        fields = dict(
            status="new",
            ease_factor=2.5,
            interval=0,
            repetition_count=0,
            total_review_count=0,
            correct_count=0,
            incorrect_count=0,
            next_review_date=None,
        )
        fields.update(kwargs)
        user_word = UserWord(learner_id=learner_id, word_id=word.id, **fields)
        db.add(user_word)
        db.commit()
        db.refresh(user_word)
        return user_word
    return _make_user_word
