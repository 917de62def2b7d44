"""Learner progress: aggregated counters, streaks and statistics."""
import logging
from collections import Counter, defaultdict
from datetime import UTC, date, datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from wordrecall.models.models import UserProgress
from wordrecall.models.review_models import WordStatus
from wordrecall.services.user_word_service import UserWordService
from wordrecall.services.word_selector import is_due

logger = logging.getLogger(__name__)


class ProgressService:
    """Service for recomputing and reporting learner progress."""

    def __init__(self, db: Session, user_words: Optional[UserWordService] = None):
        """Initialize the service with a database session."""
        self.db = db
        self.user_words = user_words or UserWordService(db)

    def get_or_create_progress(self, learner_id: str) -> UserProgress:
        progress = (
            self.db.query(UserProgress)
            .filter(UserProgress.learner_id == learner_id)
            .first()
        )
        if progress is None:
            progress = UserProgress(
                learner_id=learner_id,
                total_words=0,
                mastered_words=0,
                current_streak=0,
                longest_streak=0,
                accuracy_percentage=0.0,
                total_quizzes=0,
                total_reviews=0,
                level_progress={},
            )
            self.db.add(progress)
            self.db.commit()
            self.db.refresh(progress)
        return progress

    @staticmethod
    def update_streak(progress: UserProgress, today: date) -> None:
        """Count today as an active day."""
        last_activity = progress.last_activity_date
        if last_activity == today:
            return

        if last_activity == today - timedelta(days=1):
            progress.current_streak += 1
        else:
            # Streak broken
            progress.current_streak = 1

        if progress.current_streak > progress.longest_streak:
            progress.longest_streak = progress.current_streak
        progress.last_activity_date = today

    def recompute_progress(
        self,
        learner_id: str,
        quiz_completed: bool = False,
        review_completed: bool = False,
        today: Optional[date] = None,
    ) -> UserProgress:
        """Rebuild the learner's counters from their tracked words.

        Completing a quiz or a review also counts the day towards the streak.
        """
        progress = self.get_or_create_progress(learner_id)
        today = today or datetime.now(UTC).date()

        if quiz_completed or review_completed:
            self.update_streak(progress, today)
        if quiz_completed:
            progress.total_quizzes += 1
        if review_completed:
            progress.total_reviews += 1

        user_words = self.user_words.get_user_words(learner_id)
        progress.total_words = len(user_words)
        progress.mastered_words = sum(
            1 for user_word in user_words if user_word.status == WordStatus.MASTERED.value
        )

        total_reviews = sum(user_word.total_review_count or 0 for user_word in user_words)
        correct_answers = sum(user_word.correct_count or 0 for user_word in user_words)
        if total_reviews > 0:
            accuracy = correct_answers / total_reviews * 100
            progress.accuracy_percentage = round(min(100.0, max(0.0, accuracy)), 2)
        else:
            progress.accuracy_percentage = 0.0

        level_progress: Dict[str, Dict[str, int]] = defaultdict(lambda: {"total": 0, "mastered": 0})
        for user_word in user_words:
            entry = level_progress[user_word.word.level]
            entry["total"] += 1
            if user_word.status == WordStatus.MASTERED.value:
                entry["mastered"] += 1
        progress.level_progress = dict(level_progress)

        self.db.commit()
        self.db.refresh(progress)
        logger.info(
            f"Progress for {learner_id}: {progress.total_words} words, "
            f"{progress.mastered_words} mastered, streak {progress.current_streak}"
        )
        return progress

    def get_statistics(self, learner_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Progress plus word counts by status and level and the due count."""
        progress = self.get_or_create_progress(learner_id)
        user_words = self.user_words.get_user_words(learner_id)
        now = now or datetime.now(UTC)

        by_status = Counter(user_word.status for user_word in user_words)
        return {
            "progress": progress,
            "words_by_status": {status.value: by_status.get(status.value, 0) for status in WordStatus},
            "words_by_level": dict(Counter(user_word.word.level for user_word in user_words)),
            "due_for_review": sum(1 for user_word in user_words if is_due(user_word, now)),
        }
