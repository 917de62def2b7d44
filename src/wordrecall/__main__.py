"""Command line entry point: prepare storage and report a learner's reviews."""
import logging
import sys

from wordrecall.config import ensure_directories, settings
from wordrecall.logging_config import setup_logging
from wordrecall.models.base import SessionLocal, init_db
from wordrecall.monitoring import start_monitoring
from wordrecall.services.progress_service import ProgressService
from wordrecall.services.quiz_service import QuizService

logger = logging.getLogger("wordrecall")


def report(learner_id: str) -> None:
    """Log due words and progress for one learner."""
    db = SessionLocal()
    try:
        due_words = QuizService(db).get_due_words(learner_id)
        logger.info(f"{len(due_words)} words due for {learner_id}")
        for user_word, word in due_words:
            logger.info(f"  {word.text} ({word.level}) due {user_word.next_review_date}")

        stats = ProgressService(db).get_statistics(learner_id)
        progress = stats["progress"]
        logger.info(
            f"Words: {progress.total_words}, mastered: {progress.mastered_words}, "
            f"accuracy: {progress.accuracy_percentage}%, streak: {progress.current_streak}"
        )
        logger.info(f"By status: {stats['words_by_status']}")
    finally:
        db.close()


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    ensure_directories()
    setup_logging("Starting wordrecall ...")
    init_db()
    logger.info(f"Database ready at {settings.database.url}")

    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)
        logger.info(f"Metrics exposed on port {settings.monitoring.port}")

    for learner_id in argv:
        report(learner_id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
