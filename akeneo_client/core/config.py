from __future__ import annotations

from functools import lru_cache
from urllib.parse import urlparse

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from akeneo_client import __version__


PIM_VERSION_7 = 7
PIM_VERSION_6 = 6
PIM_VERSION_5 = 5

PIM_VERSIONS: dict[int, str] = {
    PIM_VERSION_7: "7.0",
    PIM_VERSION_6: "6.0",
    PIM_VERSION_5: "5.0",
}

DEFAULT_USER_AGENT = f"akeneo-client/{__version__}"
SAFETY_MARGIN_SECONDS = 300


class ClientSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="AKENEO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = ""
    client_id: str = ""
    secret: str = ""
    username: str = ""
    password: str = ""
    pim_version: int = PIM_VERSION_6

    rate_limit: int = 5
    rate_period_seconds: float = 1.0
    retry_count: int = 2
    retry_wait_seconds: float = 0.1
    retry_max_wait_seconds: float = 2.0
    http_timeout_seconds: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT

    log_level: str = "INFO"
    app_env: str = "local"

    @model_validator(mode="after")
    def validate_limits(self) -> "ClientSettings":
        if self.rate_limit < 1:
            raise ValueError("AKENEO_RATE_LIMIT must be at least 1.")
        if self.rate_period_seconds <= 0:
            raise ValueError("AKENEO_RATE_PERIOD_SECONDS must be greater than 0.")
        if self.retry_count < 0:
            raise ValueError("AKENEO_RETRY_COUNT must not be negative.")
        if self.retry_wait_seconds < 0 or self.retry_max_wait_seconds < self.retry_wait_seconds:
            raise ValueError("AKENEO_RETRY_WAIT_SECONDS must be between 0 and AKENEO_RETRY_MAX_WAIT_SECONDS.")
        if self.http_timeout_seconds <= 0:
            raise ValueError("AKENEO_HTTP_TIMEOUT_SECONDS must be greater than 0.")
        return self

    @property
    def version_string(self) -> str:
        return PIM_VERSIONS.get(self.pim_version, "")

    def connection_problems(self) -> list[str]:
        problems: list[str] = []
        parsed = urlparse(self.base_url)
        if parsed.scheme not in {"http", "https"} or not parsed.hostname:
            problems.append("AKENEO_BASE_URL must be an absolute http(s) URL")
        required = {
            "AKENEO_CLIENT_ID": self.client_id,
            "AKENEO_SECRET": self.secret,
            "AKENEO_USERNAME": self.username,
            "AKENEO_PASSWORD": self.password,
        }
        missing = [key for key, value in required.items() if not value.strip()]
        if missing:
            problems.append(f"missing credentials: {', '.join(missing)}")
        if self.pim_version not in PIM_VERSIONS:
            problems.append(f"unsupported AKENEO_PIM_VERSION {self.pim_version}")
        return problems


@lru_cache
def get_settings() -> ClientSettings:
    return ClientSettings()
