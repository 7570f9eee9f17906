import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

_FALSEY = {"0", "false", "no", "off"}


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    mongo_url: str
    mongo_db: str
    tz: str
    quiz_session_size: int
    log_level: str
    seed_starter: bool
    max_cached_users: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    tz = (os.getenv("TZ") or "Asia/Tokyo").strip() or "Asia/Tokyo"
    return Settings(
        mongo_url=(os.getenv("MONGO_URL") or "").strip(),
        mongo_db=(os.getenv("MONGO_DB") or "").strip(),
        tz=tz,
        quiz_session_size=max(1, _env_int("QUIZ_SESSION_SIZE", 10)),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper() or "INFO",
        seed_starter=(os.getenv("WORDBANK_SEED_STARTER") or "true").strip().lower() not in _FALSEY,
        max_cached_users=max(1, _env_int("WORDBANK_MAX_CACHED_USERS", 1000)),
    )


def validate_mongo_settings(settings: Settings | None = None) -> Settings:
    cfg = settings or get_settings()
    if not cfg.mongo_url or not cfg.mongo_db:
        raise RuntimeError(
            "Missing required env vars: MONGO_URL and MONGO_DB. "
            "Copy .env.example to .env and set both values before starting the app."
        )
    return cfg
