# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    APP_TITLE: str = "Storeroom Inventory API"
    DATABASE_URL: str = "sqlite:///./inventory.db"

    # Directory holding the binary content of uploaded forms
    ATTACHMENTS_DIR: str = "storage/attachments"

    # Extra origin allowed by CORS next to the local dev servers
    FRONTEND_URL: Optional[str] = None

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
