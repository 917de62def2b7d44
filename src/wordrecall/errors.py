"""Typed outcomes raised by the review and quiz services."""


class WordRecallError(Exception):
    """Base class for all wordrecall errors."""


class NoContentError(WordRecallError):
    """The learner has no tracked words to quiz or review."""

    def __init__(self, learner_id: str):
        self.learner_id = learner_id
        super().__init__(
            f"No words saved for learning by {learner_id}. Please add some words first."
        )


class NotFoundError(WordRecallError, LookupError):
    """A referenced word or learner-word record does not exist."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class ValidationError(WordRecallError, ValueError):
    """Malformed input that cannot be clamped into range."""


class EnrichmentUnavailable(WordRecallError):
    """The dictionary provider returned nothing usable for a word."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Word '{text}' not found in dictionary")
