from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from governance_sync.ledger.addresses import ZERO_ADDRESS


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: str = "dev"
    log_level: str = "INFO"
    log_format: str = "json"
    network_env: str = "testnet"

    rpc_url: str = "http://127.0.0.1:8545"
    governor_address: str = ZERO_ADDRESS
    governance_track: str = "research"
    request_timeout_seconds: float = 60.0
    command_timeout_seconds: float = 300.0

    content_gateway_url: str = "https://gateway.pinata.cloud/ipfs/"
    content_timeout_seconds: float = 10.0

    redis_url: str = "redis://127.0.0.1:6379/0"
    redis_url_dev: str = "redis://127.0.0.1:6379/1"

    temporary_cache_ttl_seconds: int = 900
    index_set_ttl_seconds: int = 86400 * 7
    fetch_batch_size: int = 10

    refresh_cooldown_seconds: float = 15.0
    refresh_max_attempts: int = 3
    refresh_retry_delay_seconds: float = 1.0

    @property
    def json_logs(self) -> bool:
        return self.log_format.strip().lower() != "console"

    @property
    def is_mainnet(self) -> bool:
        return self.network_env.strip().lower() == "mainnet"

    @property
    def active_redis_url(self) -> str:
        return self.redis_url if self.is_mainnet else self.redis_url_dev


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()
