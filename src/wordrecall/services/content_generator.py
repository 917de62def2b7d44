"""Offline content used when the dictionary leaves fields empty."""
import logging
import os
import re
from typing import Optional

import eng_to_ipa as ipa
import nltk
from gtts import gTTS
from nltk.corpus import wordnet

from wordrecall.config import settings

logger = logging.getLogger(__name__)


class ContentGenerator:
    """Local phonetic, pronunciation and example generation."""
    _wordnet_ready = False

    @classmethod
    def _ensure_wordnet(cls) -> None:
        """Download the WordNet corpus on first use."""
        if cls._wordnet_ready:
            return
        try:
            nltk.data.find("corpora/wordnet")
        except LookupError:
            nltk.download("wordnet", quiet=True)
            logger.info("Downloaded NLTK wordnet data")
        cls._wordnet_ready = True

    @staticmethod
    def generate_transcription(word: str) -> str:
        """IPA transcription of a single English word, or "" if unknown."""
        if len(word.split()) != 1:
            return ""
        try:
            transcription = ipa.convert(word)
        except Exception as e:
            logger.error(f"Error generating transcription for word: {word}, error: {e}")
            return ""
        # eng_to_ipa marks words missing from its dictionary with '*'
        if not transcription or "*" in transcription:
            return ""
        logger.info(f"Transcription generated for word: {word}, transcription: {transcription}")
        return f"/{transcription}/"

    @staticmethod
    def generate_pronunciation(word: str, lang: str = "en") -> str:
        """Save a spoken pronunciation and return its path, or "" on failure."""
        filename = f"{ContentGenerator._sanitize_filename(word)}.mp3"
        path = settings.paths.pronunciations_dir / filename
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tts = gTTS(text=word, lang=lang)
            tts.save(str(path))
            logger.info(f"Pronunciation generated for word: {word}, file: {filename}")
            return str(path)
        except Exception as e:
            logger.error(f"Error generating pronunciation for word: {word}, error: {e}")
            return ""

    @classmethod
    def generate_example(cls, word: str) -> Optional[str]:
        """First WordNet example sentence for the word."""
        try:
            cls._ensure_wordnet()
            for synset in wordnet.synsets(word):
                examples = synset.examples()
                if examples:
                    return examples[0]
        except Exception as e:
            logger.error(f"Error generating example for word: {word}, error: {e}")
        return None

    @staticmethod
    def calculate_difficulty(word: str) -> int:
        """Longer words = higher difficulty (1-5)."""
        length = len(word)
        if length <= 4:
            return 1
        if length <= 6:
            return 2
        if length <= 8:
            return 3
        if length <= 10:
            return 4
        return 5

    @staticmethod
    def delete_file(file_path: str) -> None:
        """Delete a file from storage."""
        if file_path and os.path.exists(file_path):
            os.remove(file_path)

    @staticmethod
    def _sanitize_filename(word: str) -> str:
        """Sanitize word for use in filename."""
        # Replace any non-alphanumeric characters with underscore
        return re.sub(r'[^a-zA-Z0-9]', '_', word.lower())
