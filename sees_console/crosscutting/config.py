"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup (fail-fast)
  - Provide defaults that match the console's historical behavior
    (24h sessions, 30m reset tokens, 1h drafts, 6-char passwords)

Collaborators:
  - api/main.py: reads settings for CORS, lifespan and startup validation
  - container.py: builds stores/repositories/provisioner from settings
  - identity/*: cookie name, TTLs and password policy

Constraints:
  - No business logic, pure configuration
  - Secrets come from the environment only

Notes:
  - Singleton via lru_cache; tests call get_settings.cache_clear()
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TEMPLATE_PATH = (
    Path(__file__).resolve().parent.parent / "templates" / "default-template.html"
)

_VALID_ENVS = {"development", "local", "test", "production"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_env: development | local | test | production
        database_url: PostgreSQL connection string (required outside tests)
        redis_url: Redis connection string for sessions/reset tokens/drafts
        session_cookie_name: Cookie carrying the opaque session token
        session_ttl_seconds: Session lifetime in the store (default: 24h)
        reset_token_ttl_seconds: Password reset token lifetime (default: 30m)
        draft_ttl_seconds: Draft lifetime (default: 1h)
        password_min_length: Minimum password length (default: 6)
        template_path: HTML template used for notice pages
        template_base_url: Public base URL for template assets in previews
        template_url_pattern: Regex URL-typed placeholders must match
        azure_*: Cloud provisioning (optional, disabled when empty)
        custom_domain_delay_seconds: Delay before custom domain registration
        custom_domain_max_attempts: Attempts for domain registration (1 = no retry)
        domain_task_retention_seconds: How long finished domain tasks stay queryable
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    app_env: str = "development"

    # Database
    database_url: str = ""
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_statement_timeout_ms: int = 30_000

    # Redis (key-value store)
    redis_url: str = "redis://localhost:6379/0"
    redis_max_retries: int = 3
    redis_socket_timeout_seconds: float = 5.0

    # Sessions / credentials
    session_cookie_name: str = "seesuid"
    session_cookie_secure: bool | None = None
    session_ttl_seconds: int = 24 * 60 * 60
    reset_token_ttl_seconds: int = 30 * 60
    password_min_length: int = 6

    # Drafts / templates
    draft_ttl_seconds: int = 60 * 60
    template_path: str = str(DEFAULT_TEMPLATE_PATH)
    template_base_url: str = "http://localhost:8000"
    template_url_pattern: str = r"^https?://.+"

    # CORS configuration
    allowed_origins: str = "http://localhost:3000"
    cors_allow_credentials: bool = True

    # Observability
    log_level: str = "INFO"
    log_json: bool = True

    # Cloud provisioning (Azure DNS + Static Web Apps)
    azure_subscription_id: str = ""
    azure_tenant_id: str = ""
    azure_client_id: str = ""
    azure_client_secret: str = ""
    azure_resource_group: str = ""
    azure_location: str = "eastasia"
    azure_environment: str = "dev"
    custom_domain_delay_seconds: float = 30.0
    custom_domain_max_attempts: int = 1
    domain_task_retention_seconds: int = 3600

    # Development seed (local only)
    dev_seed_admin: bool = False
    dev_seed_admin_name: str = "Administrator"
    dev_seed_admin_email: str = "admin@local"
    dev_seed_admin_password: str = ""
    dev_seed_admin_force_reset: bool = False

    @field_validator("app_env")
    @classmethod
    def app_env_must_be_known(cls, v: str) -> str:
        value = (v or "").strip().lower()
        if value not in _VALID_ENVS:
            raise ValueError(f"app_env must be one of {sorted(_VALID_ENVS)}")
        return value

    @field_validator(
        "session_ttl_seconds",
        "reset_token_ttl_seconds",
        "draft_ttl_seconds",
        "password_min_length",
        "domain_task_retention_seconds",
    )
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("custom_domain_max_attempts")
    @classmethod
    def attempts_at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("custom_domain_max_attempts must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_pool_sizes(self):
        if self.db_pool_min_size > self.db_pool_max_size:
            raise ValueError("db_pool_min_size must be <= db_pool_max_size")
        return self

    @model_validator(mode="after")
    def validate_database_requirements(self):
        if self.app_env != "test" and not self.database_url.strip():
            raise ValueError("DATABASE_URL is required outside the test environment")
        return self

    def get_allowed_origins_list(self) -> list[str]:
        """Parse allowed_origins CSV into a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    def is_production(self) -> bool:
        return self.app_env == "production"

    def is_test(self) -> bool:
        return self.app_env == "test"

    def cookie_secure(self) -> bool:
        """Secure flag for the session cookie (defaults to production only)."""
        if self.session_cookie_secure is None:
            return self.is_production()
        return bool(self.session_cookie_secure)

    def cloud_configured(self) -> bool:
        return all(
            v.strip()
            for v in (
                self.azure_subscription_id,
                self.azure_tenant_id,
                self.azure_client_id,
                self.azure_client_secret,
                self.azure_resource_group,
            )
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()
