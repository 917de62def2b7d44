"""Service for managing words in the word bank."""
import logging
import random
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from wordrecall.config import LEVELS, settings
from wordrecall.errors import EnrichmentUnavailable, NotFoundError, ValidationError
from wordrecall.models.models import Word
from wordrecall.monitoring import words_created
from wordrecall.services.content_generator import ContentGenerator
from wordrecall.services.enrichment_service import DictionaryService, ImageService

logger = logging.getLogger(__name__)


def normalize_level(level: str) -> str:
    level = (level or "").strip().upper()
    if level not in LEVELS:
        raise ValidationError(f"Unknown level {level!r}, expected one of {', '.join(LEVELS)}")
    return level


class WordService:
    """Service for managing words in the word bank."""

    def __init__(
        self,
        db: Session,
        dictionary: Optional[DictionaryService] = None,
        images: Optional[ImageService] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize the service with a database session."""
        self.db = db
        self.dictionary = dictionary or DictionaryService(db)
        self.images = images or ImageService(db)
        self.content_generator = ContentGenerator()
        self.rng = rng or random.Random()

    def get_word(self, word_id: int) -> Optional[Word]:
        """Get a word by its ID."""
        return self.db.query(Word).filter(Word.id == word_id).first()

    def get_word_or_raise(self, word_id: int) -> Word:
        word = self.get_word(word_id)
        if word is None:
            raise NotFoundError("Word", word_id)
        return word

    def get_word_by_text(self, text: str) -> Optional[Word]:
        """Get a word by its text."""
        return self.db.query(Word).filter(Word.text == text.strip().lower()).first()

    def get_words_by_level(
        self,
        level: str,
        difficulty: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Word]:
        """Words of a level, optionally of one difficulty, in random order."""
        query = self.db.query(Word).filter(Word.level == normalize_level(level))
        if difficulty is not None:
            query = query.filter(Word.difficulty == difficulty)
        query = query.order_by(func.random())
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def get_random_words(self, level: str, count: int = 10) -> List[Word]:
        """Random words of a level for initial training."""
        return self.get_words_by_level(level, limit=count)

    def sample_words_by_level(
        self,
        level: str,
        exclude_id: Optional[int],
        limit: int,
        require_image: bool = False,
    ) -> List[Word]:
        """Random sample of same-level words, used as quiz distractors."""
        if limit <= 0:
            return []
        query = self.db.query(Word.id).filter(Word.level == level)
        if exclude_id is not None:
            query = query.filter(Word.id != exclude_id)
        if require_image:
            query = query.filter(Word.image_url.isnot(None), Word.image_url != "")
        candidate_ids = [row.id for row in query.all()]
        chosen_ids = self.rng.sample(candidate_ids, min(limit, len(candidate_ids)))
        if not chosen_ids:
            return []
        words = {word.id: word for word in self.db.query(Word).filter(Word.id.in_(chosen_ids)).all()}
        return [words[word_id] for word_id in chosen_ids]

    def create_word(self, text: str, level: str, difficulty: Optional[int] = None) -> Word:
        """Fetch dictionary data and an image for text and store the word.

        An existing word with the same text is returned unchanged.

        Raises:
            EnrichmentUnavailable: the dictionary has no definition for text.
        """
        text = text.strip().lower()
        level = normalize_level(level)
        if not text:
            raise ValidationError("Word text is required")
        if difficulty is not None and not 1 <= difficulty <= 5:
            raise ValidationError(f"Difficulty must be between 1 and 5, got {difficulty}")

        existing_word = self.get_word_by_text(text)
        if existing_word:
            return existing_word

        word_data = self.dictionary.fetch_word_data(text)
        if not word_data or not word_data.get("definition"):
            raise EnrichmentUnavailable(text)

        word = Word(
            text=text,
            level=level,
            difficulty=difficulty or word_data.get("difficulty") or 1,
            definition=word_data["definition"],
            phonetic=word_data.get("phonetic") or None,
            audio_url=word_data.get("audio_url"),
            image_url=self.images.fetch_image(text),
            example_sentence=word_data.get("example_sentence"),
            meanings=word_data.get("meanings") or [],
            synonyms=word_data.get("synonyms") or [],
        )
        self._fill_from_fallbacks(word)

        self.db.add(word)
        self.db.commit()
        self.db.refresh(word)
        words_created.inc()
        logger.info(f"Created word {word.text} ({word.level})")
        return word

    def backfill_word(self, word_id: int) -> Word:
        """Fill empty phonetic, audio, image and example fields of a word."""
        word = self.get_word_or_raise(word_id)
        if not (word.phonetic and word.audio_url and word.example_sentence):
            word_data = self.dictionary.fetch_word_data(word.text) or {}
            word.phonetic = word.phonetic or word_data.get("phonetic") or None
            word.audio_url = word.audio_url or word_data.get("audio_url")
            word.example_sentence = word.example_sentence or word_data.get("example_sentence")
        if not word.image_url:
            word.image_url = self.images.fetch_image(word.text)
        self._fill_from_fallbacks(word)

        self.db.commit()
        self.db.refresh(word)
        return word

    def _fill_from_fallbacks(self, word: Word) -> None:
        if not word.phonetic and settings.enrichment.phonetic_fallback:
            word.phonetic = self.content_generator.generate_transcription(word.text) or None
        if not word.audio_url and settings.enrichment.audio_fallback:
            word.audio_url = self.content_generator.generate_pronunciation(word.text) or None
        if not word.example_sentence and settings.enrichment.example_fallback:
            word.example_sentence = self.content_generator.generate_example(word.text)

    def delete_word(self, word_id: int) -> bool:
        """Delete a word and its locally generated pronunciation."""
        word = self.get_word(word_id)
        if not word:
            return False

        if word.audio_url and not word.audio_url.startswith("http"):
            self.content_generator.delete_file(word.audio_url)

        self.db.delete(word)
        self.db.commit()
        return True

    def get_word_count(self, level: Optional[str] = None) -> int:
        """Get the count of words in the word bank."""
        query = self.db.query(Word)
        if level is not None:
            query = query.filter(Word.level == normalize_level(level))
        return query.count()
