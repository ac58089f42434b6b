"""
Configuration management for StandFinder.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase.

The resolution core never reads the module-level ``config`` directly;
it receives an ``AppConfig`` (or the pieces it needs) from the
application factory so tests can build their own.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class DatabaseConfig:
    """Database configuration."""
    url: str = os.getenv('DATABASE_URL', 'sqlite:///standfinder.db')

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith('sqlite')


@dataclass(frozen=True)
class CacheConfig:
    """In-process cache settings."""
    ttl_seconds: int = int(os.getenv('CACHE_TTL_SECONDS', '3600'))
    # Resolved stands are kept for a full day
    flight_ttl_seconds: int = int(os.getenv('FLIGHT_CACHE_TTL_SECONDS', '86400'))
    max_entries: int = 1000


@dataclass(frozen=True)
class RedisConfig:
    """Optional shared cache tier."""
    url: Optional[str] = os.getenv('REDIS_URL') or None
    enabled: bool = os.getenv('USE_REDIS', 'false').lower() == 'true'
    key_prefix: str = 'standfinder:'

    @property
    def is_configured(self) -> bool:
        return bool(self.enabled and self.url)


@dataclass(frozen=True)
class OpenSkyConfig:
    """OpenSky API configuration."""
    username: Optional[str] = os.getenv('OPENSKY_USERNAME') or None
    password: Optional[str] = os.getenv('OPENSKY_PASSWORD') or None
    base_url: str = 'https://opensky-network.org/api'


@dataclass(frozen=True)
class ADSBExchangeConfig:
    """ADS-B Exchange (RapidAPI) configuration."""
    api_key: Optional[str] = os.getenv('ADSBEXCHANGE_API_KEY') or None
    base_url: str = 'https://adsbexchange-com1.p.rapidapi.com/v2'
    rapidapi_host: str = 'adsbexchange-com1.p.rapidapi.com'

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class AviationStackConfig:
    """AviationStack API configuration for scheduled flight data."""
    api_key: Optional[str] = os.getenv('AVIATIONSTACK_API_KEY') or None
    base_url: str = 'http://api.aviationstack.com/v1'

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class SourcesConfig:
    """Settings shared by all external data sources."""
    timeout_seconds: float = float(os.getenv('REQUEST_TIMEOUT_SECONDS', '10'))


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    redis: RedisConfig = field(default_factory=RedisConfig)
    opensky: OpenSkyConfig = field(default_factory=OpenSkyConfig)
    adsbexchange: ADSBExchangeConfig = field(default_factory=ADSBExchangeConfig)
    aviationstack: AviationStackConfig = field(default_factory=AviationStackConfig)
    sources: SourcesConfig = field(default_factory=SourcesConfig)

    # Flask settings
    cors_origin: str = '*'
    log_level: str = 'INFO'
    secret_key: str = 'dev-key-change-in-prod'
    debug: bool = False


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        database=DatabaseConfig(),
        cache=CacheConfig(),
        redis=RedisConfig(),
        opensky=OpenSkyConfig(),
        adsbexchange=ADSBExchangeConfig(),
        aviationstack=AviationStackConfig(),
        sources=SourcesConfig(),
        cors_origin=os.getenv('CORS_ORIGIN', '*'),
        log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        secret_key=os.getenv('SECRET_KEY', 'dev-key-change-in-prod'),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
    )


# Process-wide instance, consumed by the application entry point only
config = load_config()
