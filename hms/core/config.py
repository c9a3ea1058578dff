from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_env: str = "local"
    api_v1_prefix: str = "/api/v1"
    project_name: str = "Hospital Management System API"
    log_level: str = "INFO"

    # Security
    secret_key: str = "changeme"  # override in .env
    refresh_secret_key: str = "changeme-refresh"  # override in .env
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7

    # Database
    database_url: str = "sqlite:///./hms.db"
    database_echo: bool = False
    auto_create_tables: bool = False

    # Redis (login throttling); the API runs without it
    redis_url: str | None = None
    login_rate_limit: int = 10
    login_rate_window_seconds: int = 15 * 60

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Paystack
    paystack_secret_key: str | None = None
    paystack_webhook_secret: str | None = None
    paystack_base_url: str = "https://api.paystack.co"
    paystack_timeout_seconds: float = 10.0

    # First super admin for scripts/setup_platform.py
    super_admin_email: str | None = None
    super_admin_password: str | None = None
    super_admin_first_name: str = "Super"
    super_admin_last_name: str = "Admin"

    # Pydantic v2 style config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings instance so the .env is parsed once.
    """
    return Settings()
