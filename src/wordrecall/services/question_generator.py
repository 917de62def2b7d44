"""Question builders for each quiz mode."""
import logging
import random
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Type, final

from wordrecall.config import settings
from wordrecall.models.models import UserWord, Word
from wordrecall.models.quiz_models import Question, QuizMode
from wordrecall.services.word_selector import TrackedWord

logger = logging.getLogger(__name__)

# (level, exclude_id, limit, require_image) -> words
DistractorSource = Callable[[str, int, int, bool], List[Word]]


def get_all_subclasses(cls):
    """Get all subclasses of a class."""
    all_subclasses = []
    for subclass in cls.__subclasses__():
        all_subclasses.append(subclass)
        all_subclasses.extend(get_all_subclasses(subclass))
    return all_subclasses


def make_hint(text: str) -> str:
    """First letter followed by one underscore per remaining letter."""
    if not text:
        return ""
    return text[0] + "_" * (len(text) - 1)


class BaseQuestionBuilder(ABC):
    """Base class for all question builders."""

    """Fields and methods that must be implemented by subclasses."""
    mode: Optional[QuizMode] = None

    @abstractmethod
    def _create_question(self, user_word: UserWord, word: Word) -> Question:
        """Internal method to build a question. Must be implemented by subclasses."""
        raise NotImplementedError("Subclasses must implement this method")

    """Fields and methods that must not be overridden by subclasses."""

    @final
    def __init__(self, sample_words: DistractorSource, rng: Optional[random.Random] = None):
        self.sample_words = sample_words
        self.rng = rng or random.Random()

    @final
    def create_question(self, user_word: UserWord, word: Word) -> Question:
        """Build the question for one tracked word."""
        question = self._create_question(user_word, word)
        logger.debug(f"{type(self).__name__}: built question for word: {word.text}")
        return question

    @final
    def _distractors(self, word: Word, limit: int, require_image: bool = False) -> List[Word]:
        """Other words of the same level; fewer than limit when the bank runs short."""
        if limit <= 0:
            return []
        return [
            other
            for other in self.sample_words(word.level, word.id, limit, require_image)
            if other.id != word.id
        ][:limit]


class MultipleChoiceBuilder(BaseQuestionBuilder):
    """Show the definition, choose the word among distractors."""
    mode = QuizMode.MULTIPLE_CHOICE

    def _create_question(self, user_word: UserWord, word: Word) -> Question:
        wrong_words = self._distractors(word, settings.quiz.choice_distractors)
        options = [other.text for other in wrong_words]
        options.append(word.text)
        self.rng.shuffle(options)

        return Question(
            user_word_id=user_word.id,
            mode=self.mode,
            type="definition_to_word",
            question=word.definition,
            options=options,
            correct_answer=word.text,
            phonetic=word.phonetic,
        )


class ImageMatchBuilder(BaseQuestionBuilder):
    """Show the word, choose its picture among other pictures."""
    mode = QuizMode.IMAGE_MATCH

    def _create_question(self, user_word: UserWord, word: Word) -> Question:
        other_words = self._distractors(word, settings.quiz.image_distractors, require_image=True)
        images = [{"url": other.image_url, "word": other.text} for other in other_words]
        images.append({"url": word.image_url, "word": word.text})
        self.rng.shuffle(images)

        return Question(
            user_word_id=user_word.id,
            mode=self.mode,
            type="word_to_image",
            word=word.text,
            images=images,
            correct_answer=word.image_url,
        )


class ListeningBuilder(BaseQuestionBuilder):
    """Play the pronunciation, type what was heard."""
    mode = QuizMode.LISTENING

    def _create_question(self, user_word: UserWord, word: Word) -> Question:
        return Question(
            user_word_id=user_word.id,
            mode=self.mode,
            type="listening",
            word=word.text,
            audio_url=word.audio_url,
            phonetic=word.phonetic,
            correct_answer=word.text,
        )


class WritingBuilder(BaseQuestionBuilder):
    """Show definition, picture and example, type the word."""
    mode = QuizMode.WRITING

    def _create_question(self, user_word: UserWord, word: Word) -> Question:
        return Question(
            user_word_id=user_word.id,
            mode=self.mode,
            type="writing",
            definition=word.definition,
            image_url=word.image_url,
            example_sentence=word.example_sentence,
            hint=make_hint(word.text),
            correct_answer=word.text,
        )


class QuestionGenerator:
    """Dispatch tracked words to the builder of the requested mode."""

    def __init__(self, sample_words: DistractorSource, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.builders: Dict[QuizMode, BaseQuestionBuilder] = {
            builder.mode: builder(sample_words, self.rng)
            for builder in self.builder_classes()
        }

    @staticmethod
    def builder_classes() -> List[Type[BaseQuestionBuilder]]:
        return [cls for cls in get_all_subclasses(BaseQuestionBuilder) if cls.mode is not None]

    def generate(self, words: List[TrackedWord], mode: QuizMode) -> List[Question]:
        """Build one question per tracked word."""
        builder = self.builders[QuizMode(mode)]
        return [builder.create_question(user_word, word) for user_word, word in words]
