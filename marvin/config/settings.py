from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Профили таймаутов: новый клиент ждет 30с, старый (legacy) 10с.
DEFAULT_PROFILE: Dict[str, Any] = {"TIMEOUT_MS": 30000}
LEGACY_PROFILE: Dict[str, Any] = {"TIMEOUT_MS": 10000}

PROFILES: Dict[str, Dict[str, Any]] = {
    "default": DEFAULT_PROFILE,
    "legacy": LEGACY_PROFILE,
}


class Settings(BaseSettings):
    # --- Basic Info ---
    APP_NAME: str = "marvin-client"
    APP_VERSION: str = "0.1.0"

    # --- Auth ---
    # Ограниченный токен (X-API-Token), не full access.
    API_TOKEN: str = ""

    # --- HTTP Client Configuration ---
    BASE_URL: str = "https://serv.amazingmarvin.com/api"
    USER_AGENT: str = "MarvinClient/1.0"
    PROXY_URL: str = ""
    HTTP_TIMEOUT_CONNECT: float = 10.0

    # Бюджет одной попытки (мс), включая ожидание ответа.
    TIMEOUT_MS: float = Field(30000, gt=0)

    # --- Retry Policy Configuration ---
    # Число ПОВТОРОВ после первой попытки (итого попыток MAX_RETRIES + 1).
    MAX_RETRIES: int = Field(3, ge=0)
    # База экспоненциальной задержки: RETRY_DELAY_MS * 2^attempt.
    RETRY_DELAY_MS: float = Field(1000, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="MARVIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @classmethod
    def for_profile(cls, name: str, **overrides: Any) -> "Settings":
        """Создает настройки с дефолтами профиля; явные overrides важнее."""
        if name not in PROFILES:
            raise ValueError(f"Unknown settings profile: {name!r}. Known: {sorted(PROFILES)}")
        values = {**PROFILES[name], **overrides}
        return cls(**values)

    @property
    def proxy(self) -> Optional[str]:
        return self.PROXY_URL.strip() or None


@lru_cache
def get_settings() -> Settings:
    return Settings()
