"""Configuration settings for the drill engine."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
PACKAGE_DIR = Path(__file__).parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data locations from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", str(PACKAGE_DIR / "data")))
STATE_DIR = Path(os.getenv("STATE_DIR", "./state"))
VOCABULARY_FILE = DATA_DIR / os.getenv("VOCABULARY_FILE", "vocabulary.json")
LESSONS_FILE = DATA_DIR / os.getenv("LESSONS_FILE", "lessons.json")
LEDGER_FILE = STATE_DIR / os.getenv("LEDGER_FILE", "ledger.json")

# Learning settings
UNLOCK_THRESHOLD = 80  # percent of a lesson's items that must be learned
UNSEEN_ITEM_WEIGHT = 200.0
MIN_ITEM_WEIGHT = 1.0
LEDGER_BACKENDS = ("json", "sql")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        STATE_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


@dataclass
class PathSettings:
    """Path configuration settings."""
    data_dir: Path = DATA_DIR
    state_dir: Path = STATE_DIR
    vocabulary_file: Path = VOCABULARY_FILE
    lessons_file: Path = LESSONS_FILE
    ledger_file: Path = LEDGER_FILE


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///lexdrill.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


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
class LearningSettings:
    """Lesson gating and item selection settings."""
    unlock_threshold: int = int(os.getenv("UNLOCK_THRESHOLD", str(UNLOCK_THRESHOLD)))
    unseen_item_weight: float = float(os.getenv("UNSEEN_ITEM_WEIGHT", str(UNSEEN_ITEM_WEIGHT)))
    min_item_weight: float = float(os.getenv("MIN_ITEM_WEIGHT", str(MIN_ITEM_WEIGHT)))
    cross_track_unlock: bool = _env_flag("CROSS_TRACK_UNLOCK", "true")
    ledger_backend: str = os.getenv("LEDGER_BACKEND", "json").lower()


@dataclass
class MonitoringSettings:
    """Metrics exporter settings."""
    metrics_port: int = int(os.getenv("METRICS_PORT", "0"))  # 0 disables the exporter


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_learning_settings() -> LearningSettings:
    """Get learning settings."""
    return LearningSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    learning: LearningSettings = field(default_factory=get_learning_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if self.learning.unlock_threshold < 0 or self.learning.unlock_threshold > 100:
            raise ValueError("UNLOCK_THRESHOLD must be between 0 and 100")

        if self.learning.unseen_item_weight <= 0:
            raise ValueError("UNSEEN_ITEM_WEIGHT must be positive")

        if self.learning.min_item_weight <= 0:
            raise ValueError("MIN_ITEM_WEIGHT must be positive")

        if self.learning.ledger_backend not in LEDGER_BACKENDS:
            raise ValueError(f"LEDGER_BACKEND must be one of {', '.join(LEDGER_BACKENDS)}")

        if self.monitoring.metrics_port < 0:
            raise ValueError("METRICS_PORT cannot be negative")


# Create global settings instance
settings = Settings()
settings.validate()
