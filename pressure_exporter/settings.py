from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    procfs_path: str = "/proc"
    namespace: str = "node"
    listen_host: str = "0.0.0.0"
    listen_port: int = 9100
    log_level: str = "INFO"
    collectors_enabled: List[str] = []    # force-enable, even if off by default
    collectors_disabled: List[str] = []

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PRESSURE_EXPORTER_",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings()
