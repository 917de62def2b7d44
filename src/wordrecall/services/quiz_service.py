"""Quiz sessions: generating questions and applying submitted answers."""
import logging
import random
from datetime import UTC, datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from wordrecall.config import settings
from wordrecall.errors import ValidationError
from wordrecall.models.base import as_utc
from wordrecall.models.models import UserWord, Word
from wordrecall.models.quiz_models import (
    AnswerSubmission,
    QuizMode,
    QuizResult,
    ReviewResult,
    SubmissionSummary,
)
from wordrecall.models.review_models import WordStatus
from wordrecall.monitoring import answers_skipped, quiz_size, quizzes_generated, reviews_recorded
from wordrecall.services.question_generator import QuestionGenerator
from wordrecall.services.spaced_repetition import SpacedRepetition, estimate_quality
from wordrecall.services.user_word_service import UserWordService
from wordrecall.services.word_selector import select_due, select_for_session
from wordrecall.services.word_service import WordService

logger = logging.getLogger(__name__)


class QuizService:
    """Ties word selection, question generation and scheduling together."""

    def __init__(
        self,
        db: Session,
        rng: Optional[random.Random] = None,
        scheduler: Optional[SpacedRepetition] = None,
        word_service: Optional[WordService] = None,
    ):
        """Initialize the service with a database session."""
        self.db = db
        self.rng = rng or random.Random()
        self.scheduler = scheduler or SpacedRepetition()
        self.words = word_service or WordService(db, rng=self.rng)
        self.user_words = UserWordService(db, self.scheduler)
        self.generator = QuestionGenerator(self.words.sample_words_by_level, self.rng)

    def generate_quiz(
        self,
        learner_id: str,
        mode: QuizMode,
        count: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> QuizResult:
        """Pick words for the learner and build questions in the given mode.

        Raises:
            NoContentError: the learner tracks no words.
            ValidationError: unknown mode or count out of range.
        """
        try:
            mode = QuizMode(mode)
        except ValueError as e:
            raise ValidationError(f"Unknown quiz mode {mode!r}") from e

        count = settings.quiz.default_count if count is None else count
        if not 1 <= count <= settings.quiz.max_count:
            raise ValidationError(f"Question count must be between 1 and {settings.quiz.max_count}")

        tracked = self.user_words.get_tracked_words(learner_id)
        chosen = select_for_session(
            tracked, count, mode=mode, learner_id=learner_id, now=now, rng=self.rng
        )
        questions = self.generator.generate(chosen, mode)

        quizzes_generated.labels(mode=mode.value).inc()
        quiz_size.observe(len(questions))
        logger.info(f"Generated {len(questions)} {mode.value} questions for learner {learner_id}")
        return QuizResult(mode=mode, questions=questions)

    def _apply_answer(
        self,
        user_word: UserWord,
        correct: bool,
        time_spent: int,
        attempts: int,
        now: Optional[datetime],
    ) -> UserWord:
        quality = estimate_quality(correct, time_spent, attempts)
        state = self.scheduler.schedule(user_word.to_state(), quality, now or datetime.now(UTC))
        user_word = self.user_words.save_state(user_word, state)
        reviews_recorded.labels(status=user_word.status).inc()
        return user_word

    def submit_answers(
        self, answers: List[AnswerSubmission], now: Optional[datetime] = None
    ) -> SubmissionSummary:
        """Schedule every answered word; unknown learner words are skipped."""
        results = []
        total_correct = 0

        for answer in answers:
            user_word = self.user_words.get_user_word(answer.user_word_id)
            if user_word is None:
                answers_skipped.inc()
                logger.warning(f"Skipping answer for unknown learner word {answer.user_word_id}")
                continue

            user_word = self._apply_answer(
                user_word, answer.correct, answer.time_spent, answer.attempts, now
            )
            if answer.correct:
                total_correct += 1

            results.append(
                ReviewResult(
                    user_word_id=user_word.id,
                    next_review_date=as_utc(user_word.next_review_date),
                    status=WordStatus(user_word.status),
                )
            )

        total = len(answers)
        accuracy = round(total_correct / total * 100, 2) if total > 0 else 0.0
        return SubmissionSummary(total=total, correct=total_correct, accuracy=accuracy, results=results)

    def record_single_review(
        self,
        user_word_id: int,
        correct: bool,
        time_spent: int = 0,
        attempts: int = 1,
        now: Optional[datetime] = None,
    ) -> UserWord:
        """Schedule one review of a learner word.

        Raises:
            NotFoundError: no learner word with that id.
        """
        user_word = self.user_words.get_user_word_or_raise(user_word_id)
        return self._apply_answer(user_word, correct, time_spent, attempts, now)

    def get_due_words(
        self,
        learner_id: str,
        limit: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[Tuple[UserWord, Word]]:
        """The learner's due words, most overdue first."""
        limit = settings.quiz.due_limit if limit is None else limit
        return select_due(self.user_words.get_tracked_words(learner_id), limit, now)
