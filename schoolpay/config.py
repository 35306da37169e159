"""
Application Configuration
Loads and validates environment variables
"""
import os
from pydantic_settings import BaseSettings
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "School Payroll Service"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # MongoDB
    MONGODB_URL: str = os.getenv("DB_URL", "mongodb://localhost:27017")
    MONGODB_DB_NAME: str = "school_payroll"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:3001"
    CORS_ALLOW_CREDENTIALS: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    PAYROLL_GENERATION_MAX_ATTEMPTS: int = 3
    PAYROLL_GENERATION_WINDOW_SECONDS: int = 3600

    # Payroll
    PAYROLL_DEDUCTION_SCHEME: str = "flat"  # flat, statutory
    PAYROLL_FLAT_DEDUCTION_RATE: float = 0.10
    PAYROLL_PRORATE_NEW_HIRES: bool = True
    CURRENCY: str = "MAD"

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert CORS origins string to list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
