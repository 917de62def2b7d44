"""Choosing which tracked words go into a quiz or review session."""
import logging
import random
from datetime import UTC, datetime
from typing import List, Optional, Tuple

from wordrecall.errors import NoContentError, ValidationError
from wordrecall.models.base import as_utc
from wordrecall.models.models import UserWord, Word
from wordrecall.models.quiz_models import QuizMode

logger = logging.getLogger(__name__)

TrackedWord = Tuple[UserWord, Word]


def is_due(user_word: UserWord, now: Optional[datetime] = None) -> bool:
    """A word is due when its review date has passed or was never set."""
    next_review = as_utc(user_word.next_review_date)
    if next_review is None:
        return True
    return next_review <= (now or datetime.now(UTC))


def _review_order(pair: TrackedWord) -> datetime:
    # Never-scheduled words sort first
    return as_utc(pair[0].next_review_date) or datetime.min.replace(tzinfo=UTC)


def select_for_session(
    learner_words: List[TrackedWord],
    desired_count: int,
    mode: Optional[QuizMode] = None,
    learner_id: Optional[str] = None,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> List[TrackedWord]:
    """Sample words for a session, preferring the ones that are due.

    When anything is due only due words are sampled, so a request for ten
    words with two due returns exactly those two. With nothing due the
    whole tracked set is sampled instead.

    Raises:
        NoContentError: the learner tracks no words.
        ValidationError: desired_count is below 1.
    """
    if desired_count < 1:
        raise ValidationError(f"Session size must be positive, got {desired_count}")
    if not learner_words:
        raise NoContentError(learner_id or "learner")

    rng = rng or random.Random()
    now = now or datetime.now(UTC)

    due = [pair for pair in learner_words if is_due(pair[0], now)]
    pool = due if due else learner_words
    chosen = rng.sample(pool, min(desired_count, len(pool)))
    logger.info(
        f"Selected {len(chosen)} of {len(learner_words)} words "
        f"({len(due)} due) for {mode.value if mode else 'session'}"
    )
    return chosen


def select_due(
    learner_words: List[TrackedWord],
    limit: int,
    now: Optional[datetime] = None,
) -> List[TrackedWord]:
    """Due words, most overdue first, truncated to limit."""
    now = now or datetime.now(UTC)
    due = [pair for pair in learner_words if is_due(pair[0], now)]
    due.sort(key=_review_order)
    return due[:max(0, limit)]
