"""Tests for database models."""
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from wordrecall.config import settings
from wordrecall.models.base import SessionLocal, as_utc
from wordrecall.models.models import UserWord, Word
from wordrecall.models.review_models import MemoryState, WordStatus


def test_as_utc() -> None:
    naive = datetime(2024, 3, 1, 12, 0)
    assert as_utc(naive) == datetime(2024, 3, 1, 12, 0, tzinfo=UTC)
    assert as_utc(None) is None


def test_word_defaults(db: Session) -> None:
    word = Word(text="harbour", level="B1", definition="A sheltered expanse of water.")
    db.add(word)
    db.commit()
    db.refresh(word)

    assert word.difficulty == 1
    assert word.meanings == []
    assert word.synonyms == []
    assert word.created_at is not None


def test_user_word_to_state(make_word, make_user_word, now) -> None:
    user_word = make_user_word(
        make_word(),
        status="learning",
        ease_factor=2.36,
        interval=6,
        repetition_count=2,
        total_review_count=3,
        correct_count=2,
        incorrect_count=1,
        next_review_date=now + timedelta(days=6),
    )
    state = user_word.to_state()

    assert state.status == WordStatus.LEARNING
    assert state.ease_factor == pytest.approx(2.36)
    assert state.interval == 6
    assert state.total_review_count == 3
    # SQLite drops the timezone, the snapshot restores it
    assert state.next_review_date == now + timedelta(days=6)
    assert state.next_review_date.tzinfo is not None


def test_apply_state_round_trip(db: Session, make_word, make_user_word, now) -> None:
    user_word = make_user_word(make_word())
    state = MemoryState(
        status=WordStatus.LEARNING,
        ease_factor=2.6,
        interval=1,
        repetition_count=1,
        total_review_count=1,
        correct_count=1,
        incorrect_count=0,
        next_review_date=now + timedelta(days=1),
    )
    user_word.apply_state(state)
    db.commit()
    db.refresh(user_word)

    assert user_word.status == "learning"
    assert user_word.to_state() == state


def test_concurrent_update_is_rejected(db: Session, make_word, make_user_word) -> None:
    user_word = make_user_word(make_word())

    other = SessionLocal()
    try:
        stale = other.get(UserWord, user_word.id)
        user_word.correct_count = 1
        db.commit()

        stale.correct_count = 5
        with pytest.raises(StaleDataError):
            other.commit()
        other.rollback()
    finally:
        other.close()


def test_ease_factor_default_follows_settings(db: Session, make_word, monkeypatch) -> None:
    monkeypatch.setattr(settings.scheduler, "initial_ease_factor", 2.3)
    user_word = UserWord(learner_id="learner-1", word_id=make_word().id)
    db.add(user_word)
    db.commit()
    db.refresh(user_word)

    assert user_word.ease_factor == pytest.approx(2.3)
