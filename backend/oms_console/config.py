"""
Configuration settings for the OMS console backend
"""
import os
from decimal import Decimal
from pathlib import Path

import dotenv
from pydantic_settings import BaseSettings

# Resolve .env paths relative to this file so imports work regardless of cwd.
_CONFIG_DIR = Path(__file__).resolve().parent.parent  # backend/
_PROJECT_ROOT = _CONFIG_DIR.parent                   # repo root
_ENV_CANDIDATES = [
    _CONFIG_DIR / ".env",    # backend/.env
    _PROJECT_ROOT / ".env",  # repo-root .env
]
_ENV_FILE = [str(p) for p in _ENV_CANDIDATES if p.is_file()]

# Load .env into os.environ so DATABASE_URL is visible to scripts that read os.environ directly.
for p in _ENV_CANDIDATES:
    if p.is_file():
        dotenv.load_dotenv(p, override=False)
        break


class Settings(BaseSettings):
    """Application settings"""

    # App
    APP_NAME: str = "OMS Console"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Database (PostgreSQL, schema created by scripts/create_tables.py)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    DB_USER: str = os.getenv("DB_USER", "postgres")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "")
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
    DB_NAME: str = os.getenv("DB_NAME", "oms")

    @property
    def database_connection_string(self) -> str:
        """Build database connection string"""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        return (
            f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    # CSV import
    # Rows per upsert batch; each batch commits or rolls back on its own.
    IMPORT_BATCH_SIZE: int = int(os.getenv("IMPORT_BATCH_SIZE", "500"))
    DEFAULT_GST_RATE: Decimal = Decimal(os.getenv("DEFAULT_GST_RATE", "18.00"))
    DEFAULT_CATEGORY: str = os.getenv("DEFAULT_CATEGORY", "Uncategorized")

    class Config:
        env_file = _ENV_FILE if _ENV_FILE else [".env", "../.env"]
        case_sensitive = True
        extra = "ignore"


settings = Settings()
