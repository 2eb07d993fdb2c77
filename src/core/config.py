from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


DEFAULT_CATEGORIES = ["Food", "Transport", "Housing", "Utilities", "Entertainment", "Health", "Other"]


class AppConfig(BaseModel):
    database_url: str = "sqlite:///./data/expenses.db"
    jwt_secret: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    token_ttl_hours: int = 24
    bcrypt_rounds: int = 10
    cookie_name: str = "token"
    cookie_secure: bool = False  # no HTTPS in local dev; enable behind TLS
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"
    default_categories: list[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))


def _int(raw: Optional[str], default: int) -> int:
    try:
        return int(str(raw).strip())
    except Exception:
        return default


def _bool(raw: Optional[str], default: bool) -> bool:
    v = (raw or "").strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def database_url_from_env(env: Mapping[str, str], default: str) -> str:
    url = (env.get("DATABASE_URL") or "").strip()
    if url:
        return url
    host = (env.get("DB_HOST") or "").strip()
    if not host:
        return default
    name = env.get("DB_NAME") or "expense_tracker"
    user = env.get("DB_USER") or "postgres"
    password = env.get("DB_PASSWORD") or "password"
    port = (env.get("DB_PORT") or "5432").strip()
    return f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{name}"


def _config_file(env: Mapping[str, str]) -> Optional[Path]:
    explicit = (env.get("EXPENSE_TRACKER_CONFIG") or "").strip()
    if explicit:
        return Path(os.path.expanduser(explicit))
    p = Path("expense_tracker.yaml")
    return p if p.exists() else None


def load_config(env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Build the process configuration once at startup.

    Precedence: environment variables > optional YAML file > defaults. When `env`
    is None the real environment is used (after loading `.env`).
    """
    if env is None:
        load_dotenv()
        env = os.environ

    data: dict = {}
    path = _config_file(env)
    if path is not None and path.exists():
        data = yaml.safe_load(path.read_text()) or {}
    base = AppConfig.model_validate(data)

    categories = env.get("DEFAULT_CATEGORIES")
    return base.model_copy(
        update={
            "database_url": database_url_from_env(env, base.database_url),
            "jwt_secret": env.get("JWT_SECRET") or base.jwt_secret,
            "jwt_algorithm": env.get("JWT_ALGORITHM") or base.jwt_algorithm,
            "token_ttl_hours": _int(env.get("TOKEN_TTL_HOURS"), base.token_ttl_hours),
            "bcrypt_rounds": _int(env.get("BCRYPT_ROUNDS"), base.bcrypt_rounds),
            "cookie_name": env.get("COOKIE_NAME") or base.cookie_name,
            "cookie_secure": _bool(env.get("COOKIE_SECURE"), base.cookie_secure),
            "host": env.get("HOST") or base.host,
            "port": _int(env.get("PORT"), base.port),
            "log_level": (env.get("LOG_LEVEL") or base.log_level).upper(),
            "default_categories": (
                [c.strip() for c in categories.split(",") if c.strip()]
                if categories is not None
                else base.default_categories
            ),
        }
    )
