"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Profile Registration API")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Database
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/profiles",
        description="PostgreSQL connection URL with asyncpg driver",
    )

    # Profile photo uploads
    upload_dir: str = Field(
        default="uploads",
        description="Directory where accepted profile photos are stored",
    )
    upload_url_prefix: str = Field(
        default="/uploads",
        description="URL path the upload directory is served under",
    )
    max_upload_bytes: int = Field(default=2 * 1024 * 1024)
    allowed_upload_types: str = Field(
        default="image/jpeg,image/png",
        description="Comma-separated list of accepted MIME types",
    )

    # Credentials
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed origins",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses the asyncpg driver scheme.

        Hosting providers usually hand out a plain ``postgresql://`` URL.
        SQLAlchemy's async engine requires ``postgresql+asyncpg://``.
        """
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def allowed_upload_types_set(self) -> frozenset[str]:
        """Parse accepted upload MIME types into a set."""
        return frozenset(
            mime.strip().lower()
            for mime in self.allowed_upload_types.split(",")
            if mime.strip()
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
