from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from marvin.config.settings import Settings


def load_app_config(path: str = "config/marvin.yaml") -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {p.resolve()}")

    data = yaml.safe_load(p.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Config must be a YAML mapping (top-level dict).")

    return data


def load_settings(path: Optional[str] = None, profile: Optional[str] = None) -> Settings:
    """
    Настройки из YAML поверх окружения (MARVIN_*).
    Ключи YAML - имена полей Settings (TIMEOUT_MS, MAX_RETRIES, ...); регистр не важен.
    Ключ `profile` в файле выбирает профиль, если он не передан явно.
    """
    data: Dict[str, Any] = load_app_config(path) if path else {}
    values = {str(k).upper(): v for k, v in data.items()}

    profile = profile or values.pop("PROFILE", None)
    values.pop("PROFILE", None)

    if profile:
        return Settings.for_profile(profile, **values)
    return Settings(**values)
