"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

INSECURE_JWT_SECRET = "CHANGE-ME-IN-PRODUCTION"


class Settings(BaseSettings):
    """Settings for the user groups service, read from the environment or ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="User Groups API")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Store
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/user_groups",
        description="Connection URL of the groups store (asyncpg or aiosqlite driver)",
    )
    db_pool_size: int = Field(default=5, ge=1)
    db_max_overflow: int = Field(default=10, ge=0)

    # Host-issued tokens
    jwt_secret_key: str = Field(
        default=INSECURE_JWT_SECRET,
        description="Shared secret used to verify host-issued tokens",
    )
    jwt_algorithm: str = Field(default="HS256")
    jwt_expire_minutes: int = Field(default=30)

    # Host event hooks
    assign_default_group_on_user_create: bool = Field(
        default=False,
        description="Add newly created users to their tenant's default group",
    )

    # Rate limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Disabled in tests",
    )
    rate_limit_read: str = Field(default="60/minute")
    rate_limit_write: str = Field(default="20/minute")

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed origins",
    )

    @model_validator(mode="after")
    def _require_secret_in_production(self) -> "Settings":
        if self.app_env == "production" and self.jwt_secret_key == INSECURE_JWT_SECRET:
            raise ValueError("JWT_SECRET_KEY must be set in production")
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """The database URL with an async driver.

        Plain ``postgresql://`` URLs are rewritten to ``postgresql+asyncpg://``.
        """
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
