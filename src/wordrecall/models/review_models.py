"""Models for spaced-repetition state."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class WordStatus(str, Enum):
    """Learning status of a tracked word."""
    NEW = "new"
    LEARNING = "learning"
    MASTERED = "mastered"


@dataclass(frozen=True)
class MemoryState:
    """Snapshot of the scheduling fields of a learner word.

    repetition_count is the current streak of successful recalls and
    resets on a lapse; the three review counters are lifetime totals.
    """
    status: WordStatus = WordStatus.NEW
    ease_factor: float = 2.5
    interval: int = 0
    repetition_count: int = 0
    total_review_count: int = 0
    correct_count: int = 0
    incorrect_count: int = 0
    next_review_date: Optional[datetime] = None
