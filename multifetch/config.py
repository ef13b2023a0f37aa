import os
from dotenv import load_dotenv
from pydantic import BaseModel, field_validator
from .constants import (
    DEFAULT_MAX_CONCURRENT, DEFAULT_TIMEOUT, USER_AGENT,
    SELECT_TIMEOUT, RETRY_SLEEP, IDLE_SLEEP,
)

ENV_PREFIX = "MULTIFETCH_"


class Settings(BaseModel):
    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    debug: bool = False
    timeout: float = DEFAULT_TIMEOUT
    follow_redirects: bool = True
    user_agent: str = USER_AGENT
    include_headers: bool = False
    capture_body: bool = True
    select_timeout: float = SELECT_TIMEOUT
    retry_sleep: float = RETRY_SLEEP
    idle_sleep: float = IDLE_SLEEP

    @field_validator("max_concurrent", mode="before")
    @classmethod
    def _coerce_concurrency(cls, v):
        return coerce_concurrency(v)


def coerce_concurrency(value) -> int:
    # unset, zero and negative all fall back to the default pool size
    try:
        n = int(value or 0)
    except (TypeError, ValueError):
        return DEFAULT_MAX_CONCURRENT
    return n if n > 0 else DEFAULT_MAX_CONCURRENT


def _env_bool(v: str) -> bool:
    return v.strip().lower() in ("1", "true", "yes", "on")


def load_settings(**overrides) -> Settings:
    """Build Settings from MULTIFETCH_* env vars (after loading .env), then overrides."""
    load_dotenv()
    values = {}
    for name, field in Settings.model_fields.items():
        raw = os.getenv(ENV_PREFIX + name.upper())
        if raw is None or raw == "":
            continue
        values[name] = _env_bool(raw) if field.annotation is bool else raw
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)
