"""Models for quiz requests, questions and results."""
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from wordrecall.models.review_models import WordStatus


class QuizMode(str, Enum):
    """Available quiz game modes."""
    MULTIPLE_CHOICE = "quiz"  # Definition -> pick the word
    IMAGE_MATCH = "images"  # Word -> pick the image
    LISTENING = "listening"  # Audio -> type the word
    WRITING = "writing"  # Definition and hint -> type the word


@dataclass
class Question:
    """A single quiz question for one learner word."""
    user_word_id: int
    mode: QuizMode
    type: str
    correct_answer: Optional[str]
    question: Optional[str] = None
    word: Optional[str] = None
    options: List[str] = field(default_factory=list)
    images: List[Dict[str, Optional[str]]] = field(default_factory=list)
    phonetic: Optional[str] = None
    audio_url: Optional[str] = None
    definition: Optional[str] = None
    image_url: Optional[str] = None
    example_sentence: Optional[str] = None
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["mode"] = self.mode.value
        return data


@dataclass
class QuizResult:
    """Questions generated for one quiz session."""
    mode: QuizMode
    questions: List[Question]


@dataclass
class AnswerSubmission:
    """A learner's answer to one question."""
    user_word_id: int
    correct: bool
    time_spent: int = 0  # seconds
    attempts: int = 1


@dataclass
class ReviewResult:
    """Scheduling outcome for one submitted answer."""
    user_word_id: int
    next_review_date: Optional[datetime]
    status: WordStatus


@dataclass
class SubmissionSummary:
    """Aggregate outcome of a batch of submitted answers."""
    total: int
    correct: int
    accuracy: float
    results: List[ReviewResult] = field(default_factory=list)
