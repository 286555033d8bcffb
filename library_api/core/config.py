from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # Application settings
    ENVIRONMENT: str = "development"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 9000
    FRONTEND_URL: str = "http://localhost:5173"

    # Database settings
    POSTGRES_USER: str = "library"
    POSTGRES_PASSWORD: str = "library"
    POSTGRES_DB: str = "school_library"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    DATABASE_URL_OVERRIDE: Optional[str] = None  # e.g. sqlite+aiosqlite:///./library.db
    SQL_ECHO: bool = False  # Set to True for SQL query debugging

    # Borrowing settings
    DEFAULT_LOAN_DAYS: int = 7

    # Report settings
    DEFAULT_CATEGORY: str = "Lainnya"
    DASHBOARD_CATEGORY_LIMIT: int = 8
    REPORT_CATEGORY_LIMIT: int = 6
    DASHBOARD_POPULAR_LIMIT: int = 5
    REPORT_POPULAR_LIMIT: int = 10
    DASHBOARD_MONTHS: int = 6
    RECENT_BORROWINGS_LIMIT: int = 5

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
