import warnings
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

INSECURE_DEFAULT_SECRET = "insecure-default-change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    PROJECT_NAME: str = "Warehouse Inventory"
    VERSION: str = "1.0.0"

    # Database (full URL wins over the POSTGRES_* parts)
    DATABASE_URL: str = ""
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_HOST: str = "localhost"  # In Docker, this will be 'postgres'
    POSTGRES_PORT: str = "5433"
    POSTGRES_DB: str = "warehouse"
    DB_ECHO: bool = False

    # Security
    JWT_SECRET_KEY: str = Field("", validate_default=True)
    JWT_ISSUER: str = "warehouse-inventory"
    JWT_AUDIENCE: str = "warehouse-inventory-users"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    RATE_LIMIT_ENABLED: bool = True

    # Products
    PRODUCT_PAGE_SIZE: int = 5
    PRODUCT_LIST_CACHE_SECONDS: int = 300

    # Observability
    LOG_LEVEL: str = "INFO"
    METRICS_ENABLED: bool = True
    TRACING_ENABLED: bool = False
    OTLP_ENDPOINT: str = "http://localhost:4317"

    @field_validator("JWT_SECRET_KEY")
    @classmethod
    def _secret_or_loud_default(cls, value: str) -> str:
        if not value:
            warnings.warn(
                "JWT_SECRET_KEY is not set. Using an insecure default. "
                "Set this env var in production!",
                stacklevel=2,
            )
            return INSECURE_DEFAULT_SECRET
        return value

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
