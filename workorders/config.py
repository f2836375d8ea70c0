# -*- coding: utf-8 -*-
"""
Work Orders Configuration
"""
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # App info
    APP_NAME: str = "Work Orders"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Orders API (client side)
    API_URL: str = "http://localhost:8000"
    API_TOKEN: str = ""
    API_TIMEOUT: float = 30.0

    # Order fetch is bounded so the editor never hangs on a slow network
    LOAD_TIMEOUT: float = 8.0
    # Debounced autosave delay in seconds, None disables it
    AUTOSAVE_DELAY: Optional[float] = 1.5

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Uploads
    MAX_UPLOAD_SIZE: int = 25 * 1024 * 1024  # 25 MB

    # Ticket PDF font with Cyrillic glyphs (e.g. DejaVuSans.ttf)
    TICKET_FONT_PATH: Optional[Path] = None

    # Paths
    BASE_DIR: Path = Path(__file__).parent.parent
    DATA_DIR: Path = BASE_DIR / "data"
    UPLOAD_DIR: Path = BASE_DIR / "uploads"
    DRAFTS_DIR: Path = BASE_DIR / "data" / "drafts"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
