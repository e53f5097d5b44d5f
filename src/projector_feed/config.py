"""Configuration for projector-feed.

Settings come from environment variables, optionally loaded from a .env
file with python-dotenv. Three groups are read: the Message DB connection,
the layout and polling of projector streams, and logging output.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
LOG_FORMATS = frozenset({"json", "text"})


def _require_text(value: str, what: str) -> None:
    if not value or not value.strip():
        raise ValueError(f"{what} cannot be empty")


@dataclass(frozen=True)
class MessageDBConfig:
    """Connection settings for the Message DB PostgreSQL database.

    Example:
        >>> MessageDBConfig("localhost", 5432, "message_store", "postgres", "secret")
    """

    host: str
    port: int
    database: str
    user: str
    password: str

    def __post_init__(self) -> None:
        _require_text(self.host, "Message DB host")
        if not 0 < self.port <= 65535:
            raise ValueError(f"Message DB port must be 1-65535, got {self.port}")
        _require_text(self.database, "Message DB database")
        _require_text(self.user, "Message DB user")
        if not self.password:
            raise ValueError("Message DB password cannot be empty")


@dataclass(frozen=True)
class DirectoryConfig:
    """Where projector streams live and how their change feed is polled.

    Projector 7 is stored in the stream "{category}:{version}-7".

    Attributes:
        category: Stream category of projector streams
        version: Stream version, bumped when the event schema changes
        poll_interval_ms: Pause between change feed polls
        batch_size: Maximum number of messages per read
    """

    category: str = "projector"
    version: str = "v0"
    poll_interval_ms: int = 100
    batch_size: int = 1000

    def __post_init__(self) -> None:
        """Validate the stream layout and polling settings.

        Raises:
            ValueError: If a name is empty or contains a stream separator, or a
                number is not positive
        """
        _require_text(self.category, "Projector category")
        if ":" in self.category or "-" in self.category:
            raise ValueError(f"Projector category cannot contain ':' or '-', got {self.category}")
        _require_text(self.version, "Projector stream version")
        if "-" in self.version:
            raise ValueError(f"Projector stream version cannot contain '-', got {self.version}")
        if self.poll_interval_ms <= 0:
            raise ValueError(f"poll_interval_ms must be > 0, got {self.poll_interval_ms}")
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be > 0, got {self.batch_size}")


@dataclass(frozen=True)
class LoggingConfig:
    """Log level and output format (json or text)."""

    log_level: str
    log_format: str

    def __post_init__(self) -> None:
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {sorted(LOG_LEVELS)}, got {self.log_level}"
            )
        if self.log_format.lower() not in LOG_FORMATS:
            raise ValueError(
                f"log_format must be one of {sorted(LOG_FORMATS)}, got {self.log_format}"
            )


@dataclass(frozen=True)
class Config:
    """All settings of projector-feed."""

    message_db: MessageDBConfig
    directory: DirectoryConfig
    logging: LoggingConfig


def load_config(env_file: str | None = None) -> Config:
    """Load configuration from the environment.

    Args:
        env_file: .env file to load first (default: look for .env)

    Raises:
        ValueError: If a required variable is missing or a value is invalid

    Environment Variables:
        DB_HOST (localhost), DB_PORT (5432), DB_NAME (message_store),
        DB_USER (required), DB_PASSWORD (required),
        PROJECTOR_CATEGORY (projector), PROJECTOR_VERSION (v0),
        POLL_INTERVAL_MS (100), BATCH_SIZE (1000),
        LOG_LEVEL (INFO), LOG_FORMAT (json)
    """
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return Config(
        message_db=MessageDBConfig(
            host=os.getenv("DB_HOST", "localhost"),
            port=_get_int_env("DB_PORT", 5432),
            database=os.getenv("DB_NAME", "message_store"),
            user=_get_required_env("DB_USER"),
            password=_get_required_env("DB_PASSWORD"),
        ),
        directory=DirectoryConfig(
            category=os.getenv("PROJECTOR_CATEGORY", "projector"),
            version=os.getenv("PROJECTOR_VERSION", "v0"),
            poll_interval_ms=_get_int_env("POLL_INTERVAL_MS", 100),
            batch_size=_get_int_env("BATCH_SIZE", 1000),
        ),
        logging=LoggingConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("LOG_FORMAT", "json").lower(),
        ),
    )


def _get_required_env(var_name: str) -> str:
    value = os.getenv(var_name)
    if value is None:
        raise ValueError(
            f"Required environment variable {var_name} is not set. "
            f"Please set it in your environment or .env file."
        )
    return value


def _get_int_env(var_name: str, default: int) -> int:
    raw = os.getenv(var_name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"Environment variable {var_name} must be an integer, got {raw!r}") from e
