"""Configuration management with environment variable support."""

import os
import secrets
from dataclasses import dataclass, field
from typing import Literal


def _parse_cors_origins() -> list[str]:
    """Parse CORS_ORIGINS environment variable."""
    origins = os.getenv("CORS_ORIGINS", "http://localhost:8000")
    return [o.strip() for o in origins.split(",") if o.strip()]


def _parse_backend() -> Literal["http", "memory"]:
    """Parse DECK_BACKEND environment variable."""
    backend = os.getenv("DECK_BACKEND", "http").strip().lower()
    if backend not in ("http", "memory"):
        raise ValueError(f"DECK_BACKEND must be 'http' or 'memory', got {backend!r}")
    return backend  # type: ignore[return-value]


@dataclass(frozen=True)
class CORSConfig:
    """CORS configuration."""

    allowed_origins: list[str] = field(default_factory=_parse_cors_origins)
    allow_credentials: bool = True
    allow_methods: list[str] = field(default_factory=lambda: ["*"])
    allow_headers: list[str] = field(default_factory=lambda: ["*"])


@dataclass(frozen=True)
class RateLimitConfig:
    """Rate limiting configuration."""

    enabled: bool = field(
        default_factory=lambda: os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    )
    requests_per_minute: int = field(
        default_factory=lambda: int(os.getenv("RATE_LIMIT_RPM", "60"))
    )


@dataclass(frozen=True)
class SecurityConfig:
    """Security configuration."""

    secret_key: str = field(
        default_factory=lambda: os.getenv("SECRET_KEY", secrets.token_urlsafe(32))
    )


@dataclass(frozen=True)
class SupplyConfig:
    """Remote deck service configuration."""

    backend: Literal["http", "memory"] = field(default_factory=_parse_backend)
    base_url: str = field(
        default_factory=lambda: os.getenv("DECK_API_URL", "https://deckofcardsapi.com")
    )
    timeout: float = field(
        default_factory=lambda: float(os.getenv("DECK_API_TIMEOUT", "10"))
    )
    deck_count: int = field(default_factory=lambda: int(os.getenv("DECK_COUNT", "6")))
    shuffled: bool = True


@dataclass(frozen=True)
class GameConfig:
    """Default session configuration."""

    minimum_threshold: int = 15
    deal_animation: float = field(
        default_factory=lambda: float(os.getenv("DEAL_ANIMATION_SECONDS", "0"))
    )
    shuffle_animation: float = field(
        default_factory=lambda: float(os.getenv("SHUFFLE_ANIMATION_SECONDS", "0"))
    )
    channel: str = "deck"


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    session_ttl: int = 3600  # Session timeout in seconds

    supply: SupplyConfig = field(default_factory=SupplyConfig)
    game: GameConfig = field(default_factory=GameConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    cors: CORSConfig = field(default_factory=CORSConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)


# Global configuration instance
config = AppConfig()
