# config.py

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Konfigurasi kalkulator. Dibaca dari environment (prefix FARAID_) atau file .env.

    FARAID_MAX_TOTAL_HEIRS : batas total jumlah orang ahli waris per perhitungan
    FARAID_LOG_LEVEL       : level logging (DEBUG, INFO, ...)
    FARAID_CORS_ORIGINS    : daftar origin frontend (JSON list)
    FARAID_RULES_DIR       : folder alternatif untuk tabel aturan (hanafi.json, shia.json)
    """

    model_config = SettingsConfigDict(
        env_prefix="FARAID_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_total_heirs: int = Field(default=100, gt=0, le=1000)
    log_level: str = "INFO"
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost", "http://localhost:3000"]
    )
    rules_dir: Optional[str] = None


@lru_cache
def get_settings() -> Settings:
    return Settings()
