"""Tests for learner word records."""
from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from wordrecall.errors import NotFoundError, ValidationError
from wordrecall.models.base import as_utc
from wordrecall.models.models import UserWord
from wordrecall.models.review_models import MemoryState, WordStatus
from wordrecall.services.user_word_service import UserWordService


@pytest.fixture
def user_word_service(db: Session) -> UserWordService:
    """Create a learner word service instance."""
    return UserWordService(db)


def test_add_word_initializes_state(user_word_service: UserWordService, make_word, now) -> None:
    word = make_word()
    user_word = user_word_service.add_word("learner-1", word.id, now=now)

    assert user_word.id is not None
    assert user_word.status == WordStatus.NEW.value
    assert user_word.ease_factor == 2.5
    assert user_word.interval == 0
    assert user_word.repetition_count == 0
    assert as_utc(user_word.next_review_date) == now + timedelta(days=1)


def test_add_word_is_idempotent(user_word_service: UserWordService, make_word) -> None:
    word = make_word()
    first = user_word_service.add_word("learner-1", word.id)
    second = user_word_service.add_word("learner-1", word.id)

    assert first.id == second.id
    assert user_word_service.get_user_word_count("learner-1") == 1


def test_add_word_validation(user_word_service: UserWordService, make_word) -> None:
    with pytest.raises(NotFoundError):
        user_word_service.add_word("learner-1", 12345)
    with pytest.raises(ValidationError):
        user_word_service.add_word("", make_word().id)


def test_one_record_per_learner_and_word(db: Session, make_word, make_user_word) -> None:
    """The database rejects a second record for the same pair."""
    word = make_word()
    make_user_word(word, learner_id="learner-1")
    with pytest.raises(IntegrityError):
        make_user_word(word, learner_id="learner-1")
    db.rollback()


def test_get_user_words_filters(user_word_service: UserWordService, make_word, make_user_word) -> None:
    learning = make_user_word(make_word(), status="learning")
    mastered = make_user_word(make_word(), status="mastered")
    make_user_word(make_word(), learner_id="learner-2")

    all_words = user_word_service.get_user_words("learner-1")
    assert [uw.id for uw in all_words] == [mastered.id, learning.id]

    only_mastered = user_word_service.get_user_words("learner-1", status=WordStatus.MASTERED)
    assert [uw.id for uw in only_mastered] == [mastered.id]
    assert user_word_service.get_user_word_count("learner-1", status="learning") == 1


def test_get_tracked_words_pairs(user_word_service: UserWordService, make_word, make_user_word) -> None:
    word = make_word(text="harbour")
    user_word = make_user_word(word)

    pairs = user_word_service.get_tracked_words("learner-1")
    assert len(pairs) == 1
    assert pairs[0][0].id == user_word.id
    assert pairs[0][1].text == "harbour"


def test_save_state(user_word_service: UserWordService, make_word, make_user_word, now) -> None:
    user_word = make_user_word(make_word())
    state = MemoryState(
        status=WordStatus.MASTERED,
        ease_factor=2.7,
        interval=30,
        repetition_count=4,
        total_review_count=6,
        correct_count=5,
        incorrect_count=1,
        next_review_date=now + timedelta(days=30),
    )
    saved = user_word_service.save_state(user_word, state)

    assert saved.to_state() == state
    assert saved.version == 2


def test_delete_user_word(user_word_service: UserWordService, db: Session, make_word, make_user_word) -> None:
    user_word = make_user_word(make_word())
    user_word_service.delete_user_word(user_word.id)

    assert db.query(UserWord).count() == 0
    with pytest.raises(NotFoundError):
        user_word_service.delete_user_word(user_word.id)
