"""SM-2 spaced repetition: quality estimation and review scheduling.

The scheduler is a pure mapping from a MemoryState and a 0-5 quality score
to the next MemoryState. Nothing here touches the database; persisting the
result is the caller's job.
"""
import logging
import math
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Optional

from wordrecall.config import SchedulerSettings, settings
from wordrecall.models.review_models import MemoryState, WordStatus

logger = logging.getLogger(__name__)

# Quality of response (0-5 scale)
QUALITY_PERFECT = 5
QUALITY_CORRECT_EASY = 4
QUALITY_CORRECT_HARD = 3
QUALITY_INCORRECT_REMEMBERED = 2
QUALITY_INCORRECT_FORGOTTEN = 1
QUALITY_COMPLETE_BLACKOUT = 0

PASSING_QUALITY = QUALITY_CORRECT_HARD

FAST_ANSWER_SECONDS = 5
SLOW_ANSWER_SECONDS = 15

_LATEST = datetime.max.replace(tzinfo=UTC)


def estimate_quality(correct: bool, time_spent: int = 0, attempts: int = 1) -> int:
    """Convert quiz performance to a quality score.

    Args:
        correct: Whether the answer was correct.
        time_spent: Time spent answering, in seconds.
        attempts: Number of attempts; values below 1 count as 1.

    Returns:
        Quality score between 0 and 5.
    """
    attempts = max(1, attempts)
    time_spent = max(0, time_spent)

    if not correct:
        return QUALITY_COMPLETE_BLACKOUT if attempts > 2 else QUALITY_INCORRECT_FORGOTTEN

    if attempts == 1:
        if time_spent < FAST_ANSWER_SECONDS:
            return QUALITY_PERFECT
        if time_spent < SLOW_ANSWER_SECONDS:
            return QUALITY_CORRECT_EASY
        return QUALITY_CORRECT_HARD

    return QUALITY_CORRECT_HARD


def add_days(moment: datetime, days: int) -> datetime:
    """Add days to moment, saturating at the latest representable datetime."""
    try:
        return moment + timedelta(days=days)
    except OverflowError:
        return _LATEST


class SpacedRepetition:
    """SuperMemo 2 scheduler."""

    def __init__(self, params: Optional[SchedulerSettings] = None):
        self.params = params or settings.scheduler

    def initial_state(self, now: Optional[datetime] = None) -> MemoryState:
        """State of a word the learner has just started tracking."""
        now = now or datetime.now(UTC)
        return MemoryState(
            status=WordStatus.NEW,
            ease_factor=self.params.initial_ease_factor,
            interval=0,
            next_review_date=add_days(now, self.params.initial_review_delay_days),
        )

    def next_ease_factor(self, ease_factor: float, quality: int) -> float:
        """EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), floored."""
        miss = QUALITY_PERFECT - quality
        new_ef = ease_factor + (0.1 - miss * (0.08 + miss * 0.02))
        return max(self.params.minimum_ease_factor, new_ef)

    def next_interval(self, interval: int, ease_factor: float) -> int:
        """ceil(interval * EF), capped at max_interval."""
        cap = self.params.max_interval
        interval = min(max(interval, 0), cap)
        grown = interval * ease_factor
        if grown >= cap:
            return cap
        return math.ceil(grown)

    def schedule(
        self, state: MemoryState, quality: int, now: Optional[datetime] = None
    ) -> MemoryState:
        """Apply one review of the given quality and return the new state."""
        now = now or datetime.now(UTC)
        quality = max(QUALITY_COMPLETE_BLACKOUT, min(QUALITY_PERFECT, quality))
        ease_factor = self.next_ease_factor(state.ease_factor, quality)

        if quality < PASSING_QUALITY:
            new_state = replace(
                state,
                status=WordStatus.LEARNING,
                ease_factor=ease_factor,
                interval=self.params.first_interval,
                repetition_count=0,
                incorrect_count=state.incorrect_count + 1,
            )
        else:
            repetition_count = state.repetition_count + 1
            if repetition_count == 1:
                interval = self.params.first_interval
            elif repetition_count == 2:
                interval = self.params.second_interval
            else:
                interval = self.next_interval(state.interval, ease_factor)

            mastered = (
                interval >= self.params.mastery_interval
                and ease_factor >= self.params.mastery_ease_factor
            )
            new_state = replace(
                state,
                status=WordStatus.MASTERED if mastered else WordStatus.LEARNING,
                ease_factor=ease_factor,
                interval=interval,
                repetition_count=repetition_count,
                correct_count=state.correct_count + 1,
            )

        new_state = replace(
            new_state,
            total_review_count=state.total_review_count + 1,
            next_review_date=add_days(now, new_state.interval),
        )
        logger.debug(
            f"Scheduled review: quality={quality} ef={ease_factor:.2f} "
            f"interval={new_state.interval} status={new_state.status.value}"
        )
        return new_state
