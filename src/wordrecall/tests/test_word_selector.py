"""Tests for session word selection."""
import random
from datetime import UTC, datetime, timedelta
from typing import List, Optional

import pytest
from faker import Faker

from wordrecall.errors import NoContentError, ValidationError
from wordrecall.models.models import UserWord, Word
from wordrecall.models.quiz_models import QuizMode
from wordrecall.services.word_selector import is_due, select_due, select_for_session

fake = Faker()

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


def tracked(word_id: int, next_review_date: Optional[datetime]):
    word = Word(id=word_id, text=f"word{word_id}", level="A1", definition=fake.sentence())
    user_word = UserWord(
        id=100 + word_id,
        learner_id="learner-1",
        word_id=word_id,
        status="learning",
        ease_factor=2.5,
        interval=1,
        next_review_date=next_review_date,
    )
    return user_word, word


@pytest.fixture
def mixed_words() -> List:
    """Two due words and three scheduled in the future."""
    return [
        tracked(1, NOW - timedelta(days=2)),
        tracked(2, NOW),
        tracked(3, NOW + timedelta(days=1)),
        tracked(4, NOW + timedelta(days=3)),
        tracked(5, NOW + timedelta(days=10)),
    ]


def test_is_due() -> None:
    """Past, present and missing review dates are due; future ones are not."""
    assert is_due(tracked(1, NOW - timedelta(seconds=1))[0], NOW)
    assert is_due(tracked(1, NOW)[0], NOW)
    assert is_due(tracked(1, None)[0], NOW)
    assert not is_due(tracked(1, NOW + timedelta(seconds=1))[0], NOW)


def test_is_due_accepts_naive_datetimes() -> None:
    """Naive dates read back from SQLite are treated as UTC."""
    naive_past = (NOW - timedelta(hours=1)).replace(tzinfo=None)
    assert is_due(tracked(1, naive_past)[0], NOW)


def test_select_only_due_words(mixed_words: List) -> None:
    """Never pads with not-due words while something is due."""
    chosen = select_for_session(mixed_words, 10, QuizMode.MULTIPLE_CHOICE, now=NOW)
    assert sorted(user_word.word_id for user_word, _ in chosen) == [1, 2]


def test_select_respects_desired_count(mixed_words: List) -> None:
    chosen = select_for_session(mixed_words, 1, now=NOW, rng=random.Random(3))
    assert len(chosen) == 1
    assert chosen[0][0].word_id in (1, 2)


def test_select_falls_back_to_all_words() -> None:
    """With nothing due the whole tracked set is sampled."""
    words = [tracked(i, NOW + timedelta(days=i)) for i in range(1, 6)]
    chosen = select_for_session(words, 3, now=NOW, rng=random.Random(7))
    assert len(chosen) == 3
    assert len({user_word.id for user_word, _ in chosen}) == 3

    everything = select_for_session(words, 10, now=NOW)
    assert len(everything) == 5


def test_select_without_words_signals_no_content() -> None:
    with pytest.raises(NoContentError) as exc_info:
        select_for_session([], 10, learner_id="learner-9", now=NOW)
    assert exc_info.value.learner_id == "learner-9"


def test_select_rejects_non_positive_count(mixed_words: List) -> None:
    with pytest.raises(ValidationError):
        select_for_session(mixed_words, 0, now=NOW)


def test_select_is_reproducible_with_seed() -> None:
    """The same seed gives the same sample."""
    words = [tracked(i, None) for i in range(1, 21)]
    first = select_for_session(words, 5, now=NOW, rng=random.Random(42))
    second = select_for_session(words, 5, now=NOW, rng=random.Random(42))
    assert [uw.id for uw, _ in first] == [uw.id for uw, _ in second]


def test_select_due_orders_most_overdue_first(mixed_words: List) -> None:
    words = mixed_words + [tracked(6, None), tracked(7, NOW - timedelta(days=5))]
    due = select_due(words, 10, now=NOW)
    assert [user_word.word_id for user_word, _ in due] == [6, 7, 1, 2]


def test_select_due_truncates(mixed_words: List) -> None:
    due = select_due(mixed_words, 1, now=NOW)
    assert [user_word.word_id for user_word, _ in due] == [1]
    assert select_due(mixed_words, 0, now=NOW) == []
