import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str
    log_path: str
    host: str = "0.0.0.0"
    port: int = 8080
    base_url: str = "http://localhost:8080"
    session_ttl_days: int = 7
    cookie_secure: bool = False


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_settings() -> Settings:
    database_url = os.getenv("DATABASE_URL")
    log_level = os.getenv("LOG_LEVEL", "INFO")
    log_path = os.getenv("LOG_PATH", "logs/gift_exchange.log")

    if not database_url:
        raise ValueError("DATABASE_URL is required. Set it in the environment or .env file.")

    try:
        port = int(os.getenv("PORT", "8080"))
        session_ttl_days = int(os.getenv("SESSION_TTL_DAYS", "7"))
    except ValueError as exc:
        raise ValueError("PORT and SESSION_TTL_DAYS must be integers.") from exc

    if session_ttl_days <= 0:
        raise ValueError("SESSION_TTL_DAYS must be positive.")

    return Settings(
        database_url=database_url,
        log_level=log_level,
        log_path=log_path,
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        base_url=os.getenv("BASE_URL", "http://localhost:8080").rstrip("/"),
        session_ttl_days=session_ttl_days,
        cookie_secure=_as_bool(os.getenv("COOKIE_SECURE", "false")),
    )
