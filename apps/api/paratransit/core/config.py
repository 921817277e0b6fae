"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # App Version (format: a.bc.de - major.feature.patch)
    VERSION: str = "0.01.00"

    # Proxy/Load Balancer Settings
    # Set to True when running behind nginx/Cloudflare to trust X-Forwarded-For
    TRUST_PROXY_HEADERS: bool = False

    # System database (organizations, platform users)
    DATABASE_URL: str

    # Template URL for tenant databases. The database name is replaced
    # by the organization subdomain.
    ORG_DATABASE_URL: str = ""
    # PostgreSQL database cloned by CREATE DATABASE ... TEMPLATE (optional)
    ORG_TEMPLATE_DATABASE: str = ""

    # Session Token (issued by the identity service, verified here)
    JWT_SECRET: str = "change-this-in-production"
    JWT_SECRET_PREVIOUS: str = ""  # Set during rotation, clear after

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Internal scheduled endpoints (cron jobs)
    INTERNAL_SECRET: str = ""  # Secret for /internal/scheduled/* endpoints

    # Driver digest job
    DIGEST_CLOSE_TIME: str = "17:00"  # Default org close time (HH:MM, org-local)
    DIGEST_TIMEZONE: str = "America/New_York"
    DIGEST_LOOKAHEAD_DAYS: int = 7

    # Driver matching
    MATCHING_DEFAULT_LIMIT: int = 10

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    # Set by the test suite: in-memory rate limit storage, no default limits
    TESTING: bool = False

    # Rate Limiting (requests per minute)
    REDIS_URL: str = "redis://localhost:6379/0"
    RATE_LIMIT_API: int = 60
    RATE_LIMIT_INTERNAL: int = 10

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def jwt_secrets(self) -> list[str]:
        """Returns list of valid secrets (current first, then previous if set)."""
        secrets = [self.JWT_SECRET]
        if self.JWT_SECRET_PREVIOUS:
            secrets.append(self.JWT_SECRET_PREVIOUS)
        return secrets

    @property
    def org_database_template(self) -> str:
        """Tenant URL template, falling back to the system database URL."""
        return self.ORG_DATABASE_URL or self.DATABASE_URL


settings = Settings()
