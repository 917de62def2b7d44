"""Configuration settings for wordrecall."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))
MEDIA_DIR = DATA_DIR / "media"
PRONUNCIATIONS_DIR = MEDIA_DIR / "pronunciations"

# Proficiency tiers, easiest first
LEVELS = ["A1", "A2", "B1", "B2", "C1", "C2"]

DICTIONARY_API_URL = "https://api.dictionaryapi.dev/api/v2/entries/en/"
UNSPLASH_API_URL = "https://api.unsplash.com/search/photos"
PEXELS_API_URL = "https://api.pexels.com/v1/search"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        DATA_DIR,
        MEDIA_DIR,
        PRONUNCIATIONS_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


@dataclass
class PathSettings:
    """Path configuration settings."""
    base_dir: Path = BASE_DIR
    data_dir: Path = DATA_DIR
    media_dir: Path = MEDIA_DIR
    pronunciations_dir: Path = PRONUNCIATIONS_DIR


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///wordrecall.db")
    echo: bool = _env_flag("DATABASE_ECHO", "false")


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class SchedulerSettings:
    """Spaced repetition (SM-2) parameters."""
    initial_ease_factor: float = float(os.getenv("INITIAL_EASE_FACTOR", "2.5"))
    minimum_ease_factor: float = float(os.getenv("MINIMUM_EASE_FACTOR", "1.3"))
    first_interval: int = int(os.getenv("FIRST_INTERVAL", "1"))
    second_interval: int = int(os.getenv("SECOND_INTERVAL", "6"))
    mastery_interval: int = int(os.getenv("MASTERY_INTERVAL", "21"))
    mastery_ease_factor: float = float(os.getenv("MASTERY_EASE_FACTOR", "2.5"))
    initial_review_delay_days: int = int(os.getenv("INITIAL_REVIEW_DELAY_DAYS", "1"))
    # Upper bound for interval, in days; must fit a 32-bit integer column
    max_interval: int = int(os.getenv("MAX_INTERVAL", "36500"))


@dataclass
class QuizSettings:
    """Quiz generation settings."""
    default_count: int = int(os.getenv("QUIZ_DEFAULT_COUNT", "10"))
    max_count: int = int(os.getenv("QUIZ_MAX_COUNT", "50"))
    choice_distractors: int = int(os.getenv("QUIZ_CHOICE_DISTRACTORS", "3"))
    image_distractors: int = int(os.getenv("QUIZ_IMAGE_DISTRACTORS", "5"))
    due_limit: int = int(os.getenv("DUE_WORDS_LIMIT", "20"))


@dataclass
class EnrichmentSettings:
    """Dictionary and image provider settings."""
    dictionary_api_url: str = os.getenv("DICTIONARY_API_URL", DICTIONARY_API_URL)
    unsplash_api_url: str = UNSPLASH_API_URL
    pexels_api_url: str = PEXELS_API_URL
    unsplash_access_key: Optional[str] = os.getenv("UNSPLASH_ACCESS_KEY")
    pexels_api_key: Optional[str] = os.getenv("PEXELS_API_KEY")
    request_timeout: float = float(os.getenv("ENRICHMENT_TIMEOUT", "10"))
    cache_ttl_days: int = int(os.getenv("ENRICHMENT_CACHE_TTL_DAYS", "7"))
    rate_limit_per_minute: int = int(os.getenv("DICTIONARY_RATE_LIMIT", "100"))
    max_synonyms: int = int(os.getenv("MAX_SYNONYMS", "5"))
    phonetic_fallback: bool = _env_flag("PHONETIC_FALLBACK", "true")
    audio_fallback: bool = _env_flag("AUDIO_FALLBACK", "false")
    example_fallback: bool = _env_flag("EXAMPLE_FALLBACK", "false")


@dataclass
class MonitoringSettings:
    """Prometheus metrics settings."""
    enabled: bool = _env_flag("METRICS_ENABLED", "false")
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_scheduler_settings() -> SchedulerSettings:
    """Get scheduler settings."""
    return SchedulerSettings()


def get_quiz_settings() -> QuizSettings:
    """Get quiz settings."""
    return QuizSettings()


def get_enrichment_settings() -> EnrichmentSettings:
    """Get enrichment settings."""
    return EnrichmentSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    scheduler: SchedulerSettings = field(default_factory=get_scheduler_settings)
    quiz: QuizSettings = field(default_factory=get_quiz_settings)
    enrichment: EnrichmentSettings = field(default_factory=get_enrichment_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if self.scheduler.minimum_ease_factor <= 0:
            raise ValueError("MINIMUM_EASE_FACTOR must be positive")

        if self.scheduler.initial_ease_factor < self.scheduler.minimum_ease_factor:
            raise ValueError("INITIAL_EASE_FACTOR cannot be lower than MINIMUM_EASE_FACTOR")

        if self.scheduler.first_interval < 1 or self.scheduler.second_interval < 1:
            raise ValueError("FIRST_INTERVAL and SECOND_INTERVAL must be positive")

        longest_fixed_interval = max(self.scheduler.first_interval, self.scheduler.second_interval)
        if not longest_fixed_interval <= self.scheduler.max_interval < 2 ** 31:
            raise ValueError("MAX_INTERVAL must cover SECOND_INTERVAL and fit a 32-bit integer")

        if self.quiz.default_count < 1 or self.quiz.max_count < 1:
            raise ValueError("QUIZ_DEFAULT_COUNT and QUIZ_MAX_COUNT must be positive")

        if self.quiz.default_count > self.quiz.max_count:
            raise ValueError("QUIZ_DEFAULT_COUNT cannot be greater than QUIZ_MAX_COUNT")

        if self.quiz.choice_distractors < 0 or self.quiz.image_distractors < 0:
            raise ValueError("Distractor counts cannot be negative")

        if self.enrichment.request_timeout <= 0:
            raise ValueError("ENRICHMENT_TIMEOUT must be positive")


# Create global settings instance
settings = Settings()
settings.validate()
