from functools import lru_cache
from typing import final

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


@final
class PostalSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="POSTAL_", env_file=".env", extra="ignore")

    address: str
    token: SecretStr
    timeout: float | None = Field(default=None, gt=0)
    debug: bool = False
    log_level: str = "INFO"


@lru_cache  # get it from memory
def get_settings() -> PostalSettings:
    return PostalSettings()
