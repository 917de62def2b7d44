"""Dictionary and image providers with a database-backed response cache.

Provider failures never propagate: every network or parsing error is
logged, counted and reported to the caller as "no data" (None).
"""
import logging
import time
from collections import deque
from datetime import UTC, datetime, timedelta
from typing import Any, Deque, Dict, List, Optional
from urllib.parse import quote

import requests
from sqlalchemy.orm import Session

from wordrecall.config import settings
from wordrecall.models.base import as_utc
from wordrecall.models.models import EnrichmentCache
from wordrecall.monitoring import enrichment_cache_hits, provider_failures
from wordrecall.services.content_generator import ContentGenerator

logger = logging.getLogger(__name__)


class ResponseCache:
    """Provider responses stored in the enrichment_cache table."""

    def __init__(self, db: Session, ttl_days: Optional[int] = None):
        self.db = db
        self.ttl = timedelta(days=ttl_days if ttl_days is not None else settings.enrichment.cache_ttl_days)

    def get(self, key: str, now: Optional[datetime] = None) -> Optional[Any]:
        """Cached payload for key, or None when absent or expired."""
        now = now or datetime.now(UTC)
        entry = self.db.query(EnrichmentCache).filter(EnrichmentCache.key == key).first()
        if entry is None:
            return None
        if as_utc(entry.expires_at) <= now:
            self.db.delete(entry)
            self.db.commit()
            return None
        return entry.payload

    def put(self, key: str, payload: Any, now: Optional[datetime] = None) -> None:
        now = now or datetime.now(UTC)
        entry = self.db.query(EnrichmentCache).filter(EnrichmentCache.key == key).first()
        if entry is None:
            entry = EnrichmentCache(key=key)
            self.db.add(entry)
        entry.payload = payload
        entry.expires_at = now + self.ttl
        self.db.commit()


class DictionaryService:
    """Word data from the free dictionary API."""
    _request_times: Deque[float] = deque()

    def __init__(self, db: Session, http: Optional[requests.Session] = None):
        """Initialize the service with a database session."""
        self.db = db
        self.cache = ResponseCache(db)
        self.http = http or requests.Session()

    @classmethod
    def _allow_request(cls) -> bool:
        """Sliding one-minute window shared by every instance in the process."""
        now = time.monotonic()
        while cls._request_times and now - cls._request_times[0] >= 60:
            cls._request_times.popleft()
        if len(cls._request_times) >= settings.enrichment.rate_limit_per_minute:
            return False
        cls._request_times.append(now)
        return True

    def fetch_word_data(self, word: str) -> Optional[Dict[str, Any]]:
        """Parsed dictionary entry for a word, or None if unavailable."""
        word = word.strip().lower()
        cache_key = f"dictionary:{word}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            enrichment_cache_hits.labels(provider="dictionary").inc()
            return cached

        if not self._allow_request():
            logger.warning("Rate limit exceeded for Dictionary API")
            return None

        try:
            response = self.http.get(
                settings.enrichment.dictionary_api_url + quote(word),
                timeout=settings.enrichment.request_timeout,
            )
            if response.status_code == 404:
                logger.info(f"Dictionary has no entry for word: {word}")
                return None
            response.raise_for_status()
            entries = response.json()
        except (requests.RequestException, ValueError) as e:
            provider_failures.labels(provider="dictionary").inc()
            logger.error(f"Dictionary API error for word '{word}': {e}")
            return None

        if not isinstance(entries, list) or not entries:
            return None

        data = self.parse_entry(entries[0])
        self.cache.put(cache_key, data)
        return data

    def fetch_multiple_words(self, words: List[str]) -> List[Dict[str, Any]]:
        results = []
        for word in words:
            data = self.fetch_word_data(word)
            if data:
                results.append(data)
        return results

    @staticmethod
    def parse_entry(data: Dict[str, Any]) -> Dict[str, Any]:
        """Flatten one API entry into the fields a Word needs."""
        meanings = data.get("meanings") or []
        first_definition: Dict[str, Any] = {}
        if meanings and meanings[0].get("definitions"):
            first_definition = meanings[0]["definitions"][0]

        phonetic = data.get("phonetic") or ""
        audio_url = None
        for phonetic_data in data.get("phonetics") or []:
            if phonetic_data.get("audio"):
                audio_url = phonetic_data["audio"]
                if not phonetic and phonetic_data.get("text"):
                    phonetic = phonetic_data["text"]
                break

        synonyms: List[str] = []
        for meaning in meanings:
            for synonym in meaning.get("synonyms") or []:
                if synonym not in synonyms:
                    synonyms.append(synonym)

        text = data.get("word") or ""
        return {
            "word": text,
            "phonetic": phonetic,
            "audio_url": audio_url,
            "definition": first_definition.get("definition", ""),
            "example_sentence": first_definition.get("example"),
            "meanings": meanings,
            "synonyms": synonyms[:settings.enrichment.max_synonyms],
            "difficulty": ContentGenerator.calculate_difficulty(text),
        }


class ImageService:
    """Illustrations from Unsplash, falling back to Pexels."""

    def __init__(self, db: Session, http: Optional[requests.Session] = None):
        self.db = db
        self.cache = ResponseCache(db)
        self.http = http or requests.Session()

    def fetch_image(self, query: str) -> Optional[str]:
        """Image URL for the query, or None when no provider has one."""
        cache_key = f"image:{query.strip().lower()}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            enrichment_cache_hits.labels(provider="image").inc()
            return cached.get("url")

        image_url = self._fetch_from_unsplash(query) or self._fetch_from_pexels(query)
        if image_url:
            self.cache.put(cache_key, {"url": image_url})
        return image_url

    def _search(self, provider: str, url: str, headers: Dict[str, str], query: str) -> Optional[Dict[str, Any]]:
        try:
            response = self.http.get(
                url,
                headers=headers,
                params={"query": query, "per_page": 1, "orientation": "landscape"},
                timeout=settings.enrichment.request_timeout,
            )
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            provider_failures.labels(provider=provider).inc()
            logger.error(f"{provider.capitalize()} API error: {e}")
            return None

    def _fetch_from_unsplash(self, query: str) -> Optional[str]:
        api_key = settings.enrichment.unsplash_access_key
        if not api_key:
            return None
        body = self._search(
            "unsplash",
            settings.enrichment.unsplash_api_url,
            {"Authorization": f"Client-ID {api_key}"},
            query,
        )
        results = (body or {}).get("results") or []
        if results:
            return results[0].get("urls", {}).get("regular")
        return None

    def _fetch_from_pexels(self, query: str) -> Optional[str]:
        api_key = settings.enrichment.pexels_api_key
        if not api_key:
            return None
        body = self._search(
            "pexels",
            settings.enrichment.pexels_api_url,
            {"Authorization": api_key},
            query,
        )
        photos = (body or {}).get("photos") or []
        if photos:
            return photos[0].get("src", {}).get("large")
        return None
