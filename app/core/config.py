# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - DATABASE_URL (Supabase Postgres connection string)
      - SUPABASE_JWT_SECRET (JWT signing secret from Supabase project settings)

    Optional:
      - SUPABASE_SERVICE_ROLE_KEY (admin Supabase client, TPOS token lookup)
      - TPOS_BEARER_TOKEN (if unset, read from the TPOS_TOKEN_TABLE table)
    """

    PROJECT_NAME: str = "Live Commerce Back Office"
    API_V1_STR: str = "/api/v1"

    # Supabase / DB config
    SUPABASE_URL: str
    DATABASE_URL: str

    # JWT verification (backend-side)
    SUPABASE_JWT_SECRET: str
    SUPABASE_JWT_ALG: str = "HS256"

    # Service role key bypasses RLS (backend only)
    SUPABASE_SERVICE_ROLE_KEY: str | None = None

    # TPOS (external sales platform)
    TPOS_BASE_URL: str = "https://tomato.tpos.vn"
    TPOS_BEARER_TOKEN: str | None = None
    TPOS_APP_VERSION: str = "5.9.10.1"
    TPOS_TIMEOUT_SECONDS: float = 30.0
    TPOS_TOKEN_TABLE: str = "tpos_credentials"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
