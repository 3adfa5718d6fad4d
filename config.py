import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEV_ORIGINS = ["http://localhost:5173", "http://localhost:3000"]

REQUIRED_ENV = ("SUPABASE_URL", "SUPABASE_KEY")


class ConfigError(RuntimeError):
    pass


def _positive_int(env: dict, key: str, default: int) -> int:
    raw = env.get(key)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}")
    if value < 1:
        raise ConfigError(f"{key} must be at least 1, got {value}")
    return value


class Settings(BaseModel):
    """
    Everything the API needs at start-up, built once and handed to create_app().
    """
    supabase_url: str
    supabase_key: str
    entries_table: str = "entries"
    client_urls: List[str] = Field(default_factory=list)
    environment: str = "development"
    log_level: str = "INFO"
    max_page_limit: int = Field(default=100, ge=1)
    port: int = 5000

    @classmethod
    def from_env(cls, env: Optional[dict] = None) -> "Settings":
        # Make sure your .env has SUPABASE_URL and SUPABASE_KEY
        if env is None:
            load_dotenv()
            env = dict(os.environ)

        missing = [key for key in REQUIRED_ENV if not env.get(key)]
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

        client_urls = [url.strip() for url in env.get("CLIENT_URL", "").split(",") if url.strip()]

        return cls(
            supabase_url=env["SUPABASE_URL"],
            supabase_key=env["SUPABASE_KEY"],
            entries_table=env.get("ENTRIES_TABLE") or "entries",
            client_urls=client_urls,
            environment=env.get("APP_ENV") or "development",
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
            max_page_limit=_positive_int(env, "MAX_PAGE_LIMIT", 100),
            port=_positive_int(env, "PORT", 5000),
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def cors_origins(self) -> List[str]:
        if self.client_urls:
            return list(self.client_urls)
        # Frontends on dynamic preview URLs have no fixed origin in production
        if self.is_production:
            return ["*"]
        return list(DEV_ORIGINS)
