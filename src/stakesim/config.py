from pydantic_settings import BaseSettings, SettingsConfigDict

from stakesim.analysis.projection import Cadence


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SS_",
    )

    # Beacon chain API (validator lookup)
    beacon_api_url: str = "https://beaconcha.in/api/v1"
    beacon_api_key: str = ""
    beacon_timeout: float = 10.0
    beacon_max_retries: int = 3
    beacon_retry_backoff: float = 2.0
    beacon_request_delay: float = 0.0

    # Projection defaults
    default_reward_rate: float = 0.042  # ~4.2% APR, ethereum.org staking estimate
    default_time_period_years: int = 5
    default_cadence: Cadence = Cadence.EPOCH
    max_intervals: int = 10_000_000  # ~120 years of epochs

    # Logging
    log_dir: str = "logs"
    log_level: str = "DEBUG"  # stakesim.* loggers only; third-party stays at WARNING

    # API Server
    cors_origins: list[str] = ["http://localhost:3000"]

    # Cache (validator lookups)
    cache_ttl: int = 300  # seconds
    cache_maxsize: int = 1024
