"""Configuration management for the proverbs store.

Values come from environment variables (a local `.env` file is loaded first).
Services receive an `AppConfig` explicitly; nothing reads the environment
after `load_config()` returns.
"""

import os
import re
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError

# Dimension of text-embedding-3-small / text-embedding-ada-002 vectors
EMBEDDING_DIM = 1536

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass
class AppConfig:
    """Runtime configuration.

    Attributes:
        pg_conn: Postgres connection string; None selects the in-memory store
        table_name: Table holding the verses
        embedding_dim: Fixed vector length accepted everywhere
        embedding_provider: "openai" or "fake" (deterministic, offline)
        ingest_max_workers: Bounded parallelism for per-line ingestion work
        text_search_limit: Default cap for text search results
        max_result_limit: Hard cap applied to any caller-supplied limit
        similar_top_k: Default k for similarity search
        min_chapter / max_chapter: Accepted range for chapter numbers
    """

    pg_conn: Optional[str] = None
    pg_pool_min_size: int = 1
    pg_pool_max_size: int = 10
    table_name: str = "proverbs"
    ivfflat_lists: int = 100

    openai_api_key: Optional[str] = None
    embedding_provider: str = "openai"
    embedding_model: str = "text-embedding-3-small"
    embedding_dim: int = EMBEDDING_DIM
    embedding_timeout: float = 30.0
    embedding_max_retries: int = 2

    ingest_max_workers: int = 4
    text_search_limit: int = 20
    max_result_limit: int = 100
    similar_top_k: int = 10
    min_chapter: int = 1
    max_chapter: int = 31

    jwt_secret_key: Optional[str] = None
    jwt_algorithm: str = "HS256"
    allowed_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:8000", "http://localhost:3000"]
    )
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not _IDENTIFIER.match(self.table_name):
            raise ConfigurationError(f"Invalid table name: {self.table_name!r}")
        if self.embedding_dim < 1:
            raise ConfigurationError("EMBEDDING_DIM must be positive")
        if self.ingest_max_workers < 1:
            raise ConfigurationError("INGEST_MAX_WORKERS must be at least 1")
        if self.min_chapter > self.max_chapter:
            raise ConfigurationError("MIN_CHAPTER must not exceed MAX_CHAPTER")
        if self.embedding_provider not in ("openai", "fake"):
            raise ConfigurationError(
                f"Unknown EMBEDDING_PROVIDER: {self.embedding_provider!r}"
            )

    @property
    def uses_database(self) -> bool:
        return bool(self.pg_conn)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


def load_config() -> AppConfig:
    """Build configuration from environment variables.

    Returns:
        AppConfig instance

    Raises:
        ConfigurationError: If a variable has an invalid value
    """
    load_dotenv()

    origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:8000,http://localhost:3000")

    return AppConfig(
        pg_conn=os.getenv("PG_CONN") or os.getenv("DATABASE_URL"),
        pg_pool_min_size=_int_env("PG_POOL_MIN_SIZE", 1),
        pg_pool_max_size=_int_env("PG_POOL_MAX_SIZE", 10),
        table_name=os.getenv("TABLE_NAME", "proverbs"),
        ivfflat_lists=_int_env("IVFFLAT_LISTS", 100),
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        embedding_provider=os.getenv("EMBEDDING_PROVIDER", "openai").lower(),
        embedding_model=os.getenv("EMBEDDING_MODEL", "text-embedding-3-small"),
        embedding_dim=_int_env("EMBEDDING_DIM", EMBEDDING_DIM),
        embedding_timeout=_float_env("EMBEDDING_TIMEOUT", 30.0),
        embedding_max_retries=_int_env("EMBEDDING_MAX_RETRIES", 2),
        ingest_max_workers=_int_env("INGEST_MAX_WORKERS", 4),
        text_search_limit=_int_env("TEXT_SEARCH_LIMIT", 20),
        max_result_limit=_int_env("MAX_RESULT_LIMIT", 100),
        similar_top_k=_int_env("SIMILAR_TOP_K", 10),
        min_chapter=_int_env("MIN_CHAPTER", 1),
        max_chapter=_int_env("MAX_CHAPTER", 31),
        jwt_secret_key=os.getenv("JWT_SECRET_KEY"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        allowed_origins=[o.strip() for o in origins.split(",") if o.strip()],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


__all__ = ["AppConfig", "EMBEDDING_DIM", "load_config"]
