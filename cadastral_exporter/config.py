"""Application configuration using pydantic-settings."""
from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """Exporter settings loaded from environment variables."""

    # Source database
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "postgres"
    # Full SQLAlchemy URL, takes precedence over the POSTGRES_* fields
    DATABASE_URL: Optional[str] = None

    # Only rows with this load status are exported
    LOAD_STATUS: str = "SUCCESS"

    # GeoPackage output
    GPKG_OUTPUT: str = "cadastral.gpkg"
    GPKG_TABLE_NAME: str = "cadastral_objects"
    GPKG_IDENTIFIER: str = "Cadastral Objects"
    GPKG_DESCRIPTION: str = "Cadastral objects from Kazan"

    # GeoJSON output
    GEOJSON_OUTPUT: str = "cadastral.geojson"

    # Logging
    LOG_LEVEL: str = "INFO"
    PROGRESS_INTERVAL: int = 100

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL of the source database."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        # URL.create escapes reserved characters in the credentials
        url = URL.create(
            "postgresql+psycopg2",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_HOST,
            port=self.POSTGRES_PORT,
            database=self.POSTGRES_DB,
        )
        return url.render_as_string(hide_password=False)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
