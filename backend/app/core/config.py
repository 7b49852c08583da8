"""
Pydantic Settings — centralized configuration loaded from environment variables.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Database ──────────────────────────────
    POSTGRES_USER: str = "simlak_user"
    POSTGRES_PASSWORD: str = "simlak_pass"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "simlak_db"

    @property
    def DATABASE_URL(self) -> str:
        """Async URL for app runtime (asyncpg)."""
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def DATABASE_URL_SYNC(self) -> str:
        """Sync URL for Alembic migrations (psycopg2)."""
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # ── eSIM Access partner API ───────────────
    ESIM_API_BASE_URL: str = "https://api.esimaccess.com"
    ESIM_ACCESS_CODE: str = ""
    ESIM_SECRET_KEY: str = ""
    ESIM_API_TIMEOUT: float = 30.0

    # ── Pricing / fulfillment ─────────────────
    RETAIL_MARKUP_PERCENT: int = 70
    FULFILLMENT_POLL_ATTEMPTS: int = 5
    FULFILLMENT_POLL_DELAY_SECONDS: float = 3.0

    # ── Catalog sync ──────────────────────────
    REST_COUNTRIES_URL: str = "https://restcountries.com/v3.1/all?fields=cca2,name"
    CATALOG_SYNC_PAGE_SIZE: int = 5000
    CATALOG_SYNC_INTERVAL_SECONDS: int = 86400

    # ── Clerk (identity provider) ─────────────
    CLERK_WEBHOOK_SECRET: str = ""
    CLERK_JWT_KEY: str = ""          # PEM public key (networkless verification)
    CLERK_JWKS_URL: str = ""         # e.g. https://<instance>.clerk.accounts.dev/.well-known/jwks.json
    CLERK_AUTHORIZED_PARTIES: list[str] = []

    # ── Application ───────────────────────────
    APP_ENV: str = "development"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    model_config = {"env_file": ["../.env", ".env"], "extra": "ignore"}


settings = Settings()
