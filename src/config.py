from typing import List, Optional
from pydantic import PostgresDsn, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "Veedor Consensus Backend"
    VERSION: str = "0.1.0"
    API_V1_STR: str = "/v1"
    LOG_LEVEL: str = "INFO"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "veedor"
    POSTGRES_PORT: int = 5432
    # Full URL override, e.g. "sqlite+aiosqlite:///./veedor.db"
    DATABASE_URL: Optional[str] = None

    # Admin
    ADMIN_API_KEY: str = "change-me"

    # Elections
    ELECTION_TIMEZONE: str = "America/La_Paz"

    # Resolver job
    RESOLVER_ENABLED: bool = True
    RESOLVER_INTERVAL_SECONDS: int = 300
    RESOLVER_TABLE_TIMEOUT_SECONDS: float = 30.0
    RESOLVER_CONCURRENCY: int = 1

    @computed_field
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return str(PostgresDsn.build(
            scheme="postgresql+asyncpg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_SERVER,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        ))

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env")

settings = Settings()
