"""
Environment-driven settings.

Every value is read lazily through a small getter so tests can patch the
environment per case. Blank or unparseable values fall back to the default.
"""

from __future__ import annotations

import os

DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_LYRICS_API_BASE_URL = "https://api.lyrics.ovh/v1"
DEFAULT_YANDEX_TRANSLATE_URL = "https://translate.api.cloud.yandex.net/translate/v2/translate"
DEFAULT_DEEPSEEK_URL = "https://api.deepseek.com/v1/chat/completions"
DEFAULT_DEEPSEEK_MODEL = "deepseek-chat"


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def app_env() -> str:
    return env_str("APP_ENV", "local").lower()


def log_level() -> str:
    return env_str("LOG_LEVEL", "").upper()


def db_pool_min_size() -> int:
    return max(1, env_int("DB_POOL_MIN_SIZE", 1))


def db_pool_max_size() -> int:
    return max(db_pool_min_size(), env_int("DB_POOL_MAX_SIZE", 5))


def redis_url() -> str:
    return env_str("REDIS_URL", DEFAULT_REDIS_URL)


def cache_ttl_s() -> int:
    # 0 keeps entries until they are evicted explicitly.
    return env_int("CACHE_TTL_S", 0)


def cache_write_timeout_s() -> float:
    return env_float("CACHE_WRITE_TIMEOUT_S", 5.0)


def lyrics_api_base_url() -> str:
    return env_str("LYRICS_API_BASE_URL", DEFAULT_LYRICS_API_BASE_URL).rstrip("/")


def http_timeout_s() -> float:
    return env_float("HTTP_TIMEOUT_S", 10.0)


def request_timeout_s() -> float | None:
    """
    Upper bound for one orchestrator call. Zero or negative disables it.
    """
    value = env_float("REQUEST_TIMEOUT_S", 30.0)
    return value if value > 0 else None


def translator_backend() -> str:
    return env_str("TRANSLATOR", "yandex").lower()


def translate_target_language() -> str:
    return env_str("TRANSLATE_TARGET_LANGUAGE", "ru")


def yandex_translate_api_key() -> str:
    return env_str("YANDEX_TRANSLATE_API_KEY", "")


def yandex_translate_url() -> str:
    return env_str("YANDEX_TRANSLATE_URL", DEFAULT_YANDEX_TRANSLATE_URL)


def deepseek_api_key() -> str:
    return env_str("DEEPSEEK_API_KEY", "")


def deepseek_model() -> str:
    return env_str("DEEPSEEK_MODEL", DEFAULT_DEEPSEEK_MODEL)


def deepseek_url() -> str:
    return env_str("DEEPSEEK_URL", DEFAULT_DEEPSEEK_URL)
